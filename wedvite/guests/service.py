"""Creating guests (invites) under an event."""
import logging

from sqlalchemy import func
from sqlmodel import Session, select

from wedvite.guests.csv_io import ParsedGuestList
from wedvite.models import Event, Invite, RsvpStatus
from wedvite.rsvp.tokens import generate_invite_token

logger = logging.getLogger(__name__)


def new_invite(
    event: Event,
    guest_name: str,
    email: str | None = None,
    guest_limit: int | None = None,
) -> Invite:
    """Build a pending invite with a fresh canonical token. Not added to a session."""
    return Invite(
        event_id=event.id,
        guest_name=guest_name.strip(),
        email=email.strip() if email else None,
        guest_limit=guest_limit,
        qr_code=generate_invite_token(),
        rsvp_status=RsvpStatus.PENDING.value,
    )


def event_has_email(session: Session, event_id: str, email: str) -> bool:
    """Whether a guest with this email (case-insensitive) is already on the event."""
    statement = (
        select(Invite.id)
        .where(Invite.event_id == event_id)
        .where(func.lower(Invite.email) == email.strip().lower())
    )
    return session.exec(statement).first() is not None


def import_guests(session: Session, event: Event, parsed: ParsedGuestList) -> dict:
    """
    Create invites for parsed CSV rows.

    Rows whose email is already on the event, or repeats an email earlier
    in the same file, are skipped and reported.

    Returns:
        Dict with importedCount, skipped and errors lists.
    """
    created = 0
    skipped: list[dict] = []
    seen: set[str] = set()

    for guest in parsed.guests:
        if guest.email:
            key = guest.email.lower()
            if key in seen or event_has_email(session, event.id, guest.email):
                skipped.append({"row": guest.row, "email": guest.email, "reason": "Duplicate email"})
                continue
            seen.add(key)

        session.add(new_invite(event, guest.name, guest.email))
        created += 1

    session.commit()
    logger.info(
        f"Imported {created} guests into event {event.id} "
        f"({len(skipped)} skipped, {len(parsed.errors)} invalid rows)"
    )
    return {"importedCount": created, "skipped": skipped, "errors": parsed.errors}
