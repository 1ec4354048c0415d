"""Validation rules for RSVP submissions.

All checks here are pure: they look at the invite, its event and the
submitted values, and either return a ``ValidatedRsvp`` or raise an
``InvitationError``. Nothing is written until validation has passed.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime

from wedvite.core.clock import has_passed
from wedvite.models import Event, Invite, RsvpStatus
from wedvite.rsvp.errors import (
    DuplicateGuestEmail,
    EventExpired,
    GuestCountRequired,
    GuestEmailCountMismatch,
    GuestLimitExceeded,
    InvalidGuestEmail,
    NoGuestsAllowed,
    RsvpValidationError,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def effective_guest_limit(invite: Invite, event: Event) -> int:
    """Companion cap: the invite's own limit, else the event's, else zero."""
    if invite.guest_limit is not None:
        return invite.guest_limit
    if event.guest_limit is not None:
        return event.guest_limit
    return 0


def clean_guest_emails(guest_emails: list | None) -> list[str]:
    """Trim submitted emails and drop blanks and non-strings."""
    if not guest_emails:
        return []
    cleaned = []
    for email in guest_emails:
        if not isinstance(email, str):
            continue
        email = email.strip()
        if email:
            cleaned.append(email)
    return cleaned


def wants_guests(bringing_guests) -> bool:
    if isinstance(bringing_guests, bool):
        return bringing_guests
    return isinstance(bringing_guests, str) and bringing_guests.strip().lower() == "yes"


@dataclass
class ValidatedRsvp:
    """An RSVP that passed every rule and is ready to persist."""
    status: RsvpStatus
    guest_count: int
    companion_emails: list[str] = field(default_factory=list)
    message: str | None = None


def validate_rsvp(
    invite: Invite,
    event: Event,
    response: str,
    bringing_guests=None,
    guest_count: int | None = None,
    guest_emails: list | None = None,
    message: str | None = None,
    now: datetime | None = None,
) -> ValidatedRsvp:
    """Apply the RSVP rules in order and return what should be stored.

    Raises:
        EventExpired: The event date has passed.
        RsvpValidationError: Any guest count or guest email rule failed.
    """
    if has_passed(event.date, now):
        raise EventExpired()

    try:
        status = RsvpStatus(response)
    except ValueError:
        status = None
    if status not in (RsvpStatus.ATTENDING, RsvpStatus.NOT_ATTENDING):
        raise RsvpValidationError("Response must be 'attending' or 'not-attending'.")

    limit = effective_guest_limit(invite, event)
    bringing = status == RsvpStatus.ATTENDING and wants_guests(bringing_guests)

    additional_guests = 0
    if bringing:
        if limit <= 0:
            raise NoGuestsAllowed()
        if not guest_count or guest_count <= 0:
            raise GuestCountRequired()
        if guest_count > limit:
            raise GuestLimitExceeded(limit)
        additional_guests = guest_count

    companion_emails: list[str] = []
    if additional_guests:
        companion_emails = clean_guest_emails(guest_emails)
        if len(companion_emails) != additional_guests:
            raise GuestEmailCountMismatch(additional_guests)

        invalid = [email for email in companion_emails if not is_valid_email(email)]
        if invalid:
            raise InvalidGuestEmail(invalid)

        seen: dict[str, str] = {}
        duplicates: list[str] = []
        for email in companion_emails:
            key = email.lower()
            if key in seen:
                if seen[key] not in duplicates:
                    duplicates.append(seen[key])
                duplicates.append(email)
            else:
                seen[key] = email
        if duplicates:
            raise DuplicateGuestEmail(duplicates)

    note = message.strip() if isinstance(message, str) else None
    return ValidatedRsvp(
        status=status,
        guest_count=additional_guests,
        companion_emails=companion_emails,
        message=note or None,
    )
