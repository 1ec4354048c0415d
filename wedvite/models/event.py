"""Event model for weddings and related celebrations.

An Event is owned by a single User and is the root of everything a guest
can see: its invites, the companion invites spawned from RSVPs, and the
reminder log. Deleting an event removes all of them.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from wedvite.models.invite import Invite
    from wedvite.models.reminder import Reminder
    from wedvite.models.user import User


class Event(SQLModel, table=True):
    """An event that guests are invited to.

    Attributes:
        id: Unique identifier.
        title: Display title, e.g. "Anna & Tom's Wedding".
        date: When the event takes place. RSVPs are refused once it passes.
        time: Free-form time string shown in emails (e.g. "4:30 PM").
        location: Venue name or address.
        description: Optional long description.
        dress_code: Optional dress code.
        hashtag: Optional social media hashtag.
        guest_limit: Default number of companions each guest may bring.
            Individual invites can override it.
        user_id: Owner of the event.
        created_at: When the event was created.
    """
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str
    date: datetime = Field(index=True)
    time: str | None = None
    location: str
    description: str | None = None
    dress_code: str | None = None
    hashtag: str | None = None
    guest_limit: int | None = None
    user_id: str = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationships
    owner: Optional["User"] = Relationship(back_populates="events")
    invites: list["Invite"] = Relationship(
        back_populates="event",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    reminders: list["Reminder"] = Relationship(
        back_populates="event",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
