"""Companion invite model for additional guests named in an RSVP.

When a guest RSVPs as attending and brings companions, each companion email
gets its own CompanionInvite with a private link token. The set is rebuilt
on every RSVP submission, but a companion whose email is unchanged keeps the
same row and therefore the same link.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from wedvite.models.invite import Invite


class CompanionInvite(SQLModel, table=True):
    """An additional attendee named by a primary guest.

    Attributes:
        id: Unique identifier.
        invite_id: The primary guest's invite.
        email: Companion email, lowercased. Unique per invite.
        token: Random link token, unique across all companions.
        created_at: When the companion was first named.
    """
    __table_args__ = (UniqueConstraint("invite_id", "email"),)

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    invite_id: str = Field(foreign_key="invite.id", index=True, ondelete="CASCADE")
    email: str
    token: str = Field(index=True, unique=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    invite: Optional["Invite"] = Relationship(back_populates="companions")
