"""Request and response bodies for the JSON API.

Every model serializes with camelCase keys and accepts either camelCase or
snake_case on input. Datetimes read back from SQLite are naive; ``UtcDatetime``
marks them as UTC so clients always see an offset.
"""
from datetime import datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from wedvite.core.clock import as_utc
from wedvite.models import Invite, ReminderType, normalize_rsvp_status
from wedvite.rsvp.tokens import invite_token
from wedvite.rsvp.validation import is_valid_email

UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _optional_email(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not is_valid_email(value):
        raise ValueError("Invalid email address")
    return value


OptionalEmail = Annotated[str | None, AfterValidator(_optional_email)]


# Auth


class SignupRequest(CamelModel):
    name: str = Field(min_length=1)
    email: str
    password: str = Field(min_length=6)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("email")
    @classmethod
    def email_shape(cls, value: str) -> str:
        value = value.strip().lower()
        if not is_valid_email(value):
            raise ValueError("Invalid email address")
        return value


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"


class UserRead(CamelModel):
    id: str
    name: str
    email: str


# Events


class EventCreate(CamelModel):
    title: str = Field(min_length=1)
    date: datetime
    time: str | None = None
    location: str = Field(min_length=1)
    description: str | None = None
    dress_code: str | None = None
    hashtag: str | None = None
    guest_limit: int | None = Field(default=None, ge=0)


class EventUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1)
    date: datetime | None = None
    time: str | None = None
    location: str | None = Field(default=None, min_length=1)
    description: str | None = None
    dress_code: str | None = None
    hashtag: str | None = None
    guest_limit: int | None = Field(default=None, ge=0)


class EventRead(CamelModel):
    id: str
    title: str
    date: UtcDatetime
    time: str | None = None
    location: str
    description: str | None = None
    dress_code: str | None = None
    hashtag: str | None = None
    guest_limit: int | None = None
    created_at: UtcDatetime


# Guests / invites


class EventGuestCreate(CamelModel):
    """A guest added from an event page; the event comes from the URL."""
    name: str = Field(min_length=1)
    email: OptionalEmail = None
    guest_limit: int | None = Field(default=None, ge=0)


class GuestCreate(CamelModel):
    event_id: str
    guest_name: str = Field(min_length=1)
    email: OptionalEmail = None
    guest_limit: int | None = Field(default=None, ge=0)


class GuestUpdate(CamelModel):
    guest_name: str | None = Field(default=None, min_length=1)
    email: OptionalEmail = None
    guest_limit: int | None = Field(default=None, ge=0)
    rsvp_status: Literal["pending", "attending", "not-attending"] | None = None
    guest_count: int | None = Field(default=None, ge=0)


class GuestRead(CamelModel):
    id: str
    event_id: str
    guest_name: str
    email: str | None = None
    guest_limit: int | None = None
    guest_count: int = 0
    rsvp_status: str
    message: str | None = None
    invitation_token: str | None = None
    sent_at: UtcDatetime | None = None
    viewed_at: UtcDatetime | None = None
    rsvp_at: UtcDatetime | None = None
    created_at: UtcDatetime

    @field_validator("rsvp_status", mode="before")
    @classmethod
    def normalize_status(cls, value):
        return normalize_rsvp_status(value).value

    @classmethod
    def from_invite(cls, invite: Invite) -> "GuestRead":
        guest = cls.model_validate(invite)
        guest.invitation_token = invite_token(invite)
        return guest


class BulkGuest(CamelModel):
    name: str = Field(min_length=1)
    email: OptionalEmail = None
    guest_limit: int | None = Field(default=None, ge=0)


class BulkInviteCreate(CamelModel):
    event_id: str
    guests: list[BulkGuest] = Field(min_length=1)
    send_email: bool = False


class BulkInviteDelete(CamelModel):
    invite_ids: list[str] = Field(min_length=1)


class SendBulkRequest(CamelModel):
    event_id: str
    guest_ids: list[str] = Field(min_length=1)


# Reminders


class EventReminderRequest(CamelModel):
    reminder_type: ReminderType = ReminderType.GENERAL
    target_audience: Literal["pending", "attending", "all"] = "pending"
    custom_message: str | None = None


class ReminderCreate(CamelModel):
    event_id: str
    invite_ids: list[str] = Field(min_length=1)
    reminder_type: ReminderType = ReminderType.GENERAL
    custom_message: str | None = None


class ReminderRead(CamelModel):
    id: str
    invite_id: str
    event_id: str
    type: str
    message: str
    status: str
    sent_at: UtcDatetime


# Guest-facing RSVP


class RsvpSubmission(CamelModel):
    """Body of ``POST /api/rsvp/{token}``.

    ``response`` is checked by the RSVP workflow itself so that an unknown
    value gets the same error message as any other RSVP rule.
    """
    response: str
    bringing_guests: str | bool | None = None
    guest_count: int | None = None
    guest_emails: list[str] | None = None
    message: str | None = None
