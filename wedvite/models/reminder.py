"""Reminder model: append-only log of reminder emails.

A row is written every time a reminder is dispatched to a guest, whether
delivery succeeded or not. Rows are never updated afterwards, so the table
doubles as an audit trail of what each guest was sent and when.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from wedvite.models.event import Event
    from wedvite.models.invite import Invite


class ReminderType(str, Enum):
    GENERAL = "general"
    RSVP = "rsvp"
    DEADLINE = "deadline"
    FINAL = "final"
    URGENT = "urgent"


class ReminderStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"


class Reminder(SQLModel, table=True):
    """A record of one reminder email sent to one guest.

    Attributes:
        id: Unique identifier.
        invite_id: Guest the reminder was addressed to.
        event_id: Event the reminder was about.
        type: One of the ReminderType values.
        message: Body text that was sent.
        status: "sent" or "failed".
        sent_at: When dispatch was attempted.
    """
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    invite_id: str = Field(foreign_key="invite.id", index=True, ondelete="CASCADE")
    event_id: str = Field(foreign_key="event.id", index=True, ondelete="CASCADE")
    type: str = Field(default=ReminderType.GENERAL.value)
    message: str
    status: str = Field(default=ReminderStatus.SENT.value)
    sent_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    invite: Optional["Invite"] = Relationship(back_populates="reminders")
    event: Optional["Event"] = Relationship(back_populates="reminders")
