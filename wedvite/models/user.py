"""User model for event owners."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from wedvite.models.event import Event


class User(SQLModel, table=True):
    """An account that owns events.

    Guests never have accounts; they act through invite tokens.

    Attributes:
        id: Unique identifier.
        name: Display name used in owner notifications.
        email: Login email, stored lowercased.
        password_hash: bcrypt hash of the password.
        created_at: When the account was created.
    """
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    password_hash: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    events: list["Event"] = Relationship(back_populates="owner")
