"""Invite model: one guest's personalized invitation to an event.

The ``qr_code`` column holds the guest's opaque RSVP token. Older rows
store a full URL ending in the token, and the oldest links used the invite
id itself; see ``wedvite.rsvp.tokens`` for how all three are resolved.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from wedvite.models.companion import CompanionInvite
    from wedvite.models.event import Event
    from wedvite.models.reminder import Reminder


class RsvpStatus(str, Enum):
    PENDING = "pending"
    ATTENDING = "attending"
    NOT_ATTENDING = "not-attending"


# Values written by earlier versions of the dashboard and RSVP form
LEGACY_STATUS_ALIASES = {
    "accepted": RsvpStatus.ATTENDING,
    "confirmed": RsvpStatus.ATTENDING,
    "declined": RsvpStatus.NOT_ATTENDING,
}


def normalize_rsvp_status(value: str | None) -> RsvpStatus:
    """Map a stored status string (including legacy aliases) to RsvpStatus."""
    if not value:
        return RsvpStatus.PENDING
    value = value.strip().lower()
    if value in LEGACY_STATUS_ALIASES:
        return LEGACY_STATUS_ALIASES[value]
    try:
        return RsvpStatus(value)
    except ValueError:
        return RsvpStatus.PENDING


class Invite(SQLModel, table=True):
    """A guest record within an event.

    Attributes:
        id: Unique identifier. Legacy rows use ids such as
            ``invite_1700000000000_ab12cd``.
        guest_name: Name shown on the invitation.
        email: Guest email; optional since some guests are invited offline.
        qr_code: Opaque RSVP token (or, for legacy rows, a URL ending in it).
        guest_limit: Per-guest companion cap overriding the event default.
        guest_count: Number of companions confirmed with the last RSVP.
        rsvp_status: Raw stored status; read it through ``status``.
        message: Note left by the guest with their RSVP.
        sent_at: When the invitation email was last sent.
        viewed_at: When the invitation link was first opened.
        rsvp_at: When the guest last responded.
        created_at: When the guest was added.
        event_id: Owning event.
    """
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    guest_name: str
    email: str | None = Field(default=None, index=True)
    qr_code: str = Field(index=True, unique=True)
    guest_limit: int | None = None
    guest_count: int = Field(default=0)
    rsvp_status: str = Field(default=RsvpStatus.PENDING.value)
    message: str | None = None
    sent_at: datetime | None = None
    viewed_at: datetime | None = None
    rsvp_at: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    event_id: str = Field(foreign_key="event.id", index=True, ondelete="CASCADE")

    # Relationships
    event: Optional["Event"] = Relationship(back_populates="invites")
    companions: list["CompanionInvite"] = Relationship(
        back_populates="invite",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    reminders: list["Reminder"] = Relationship(
        back_populates="invite",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    @property
    def status(self) -> RsvpStatus:
        return normalize_rsvp_status(self.rsvp_status)

    @property
    def has_responded(self) -> bool:
        return self.status != RsvpStatus.PENDING
