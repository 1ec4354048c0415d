"""Guest-facing RSVP workflow.

``submit_rsvp`` is the single write path for guest responses: it resolves
the token, validates the submission, then updates the invite and its
companion invites in one transaction. Sending the follow-up emails is left
to the caller (see ``NotificationDispatcher.notify_rsvp``) so that delivery
problems can never undo a recorded response.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlmodel import Session

from wedvite.core.clock import has_passed, utcnow
from wedvite.models import Event, Invite, RsvpStatus
from wedvite.rsvp.companions import CompanionLink, reconcile_companions
from wedvite.rsvp.errors import EventExpired
from wedvite.rsvp.tokens import resolve_invite
from wedvite.rsvp.validation import validate_rsvp

logger = logging.getLogger(__name__)


@dataclass
class RsvpOutcome:
    """What a successful submission changed, for building notifications."""
    invite: Invite
    event: Event
    status: RsvpStatus
    guest_count: int
    message: str | None = None
    companions: list[CompanionLink] = field(default_factory=list)


def load_rsvp(session: Session, token: str, now: datetime | None = None) -> Invite:
    """Resolve a token for display, refusing events that have passed."""
    invite = resolve_invite(session, token)
    if has_passed(invite.event.date, now):
        raise EventExpired()
    return invite


def submit_rsvp(
    session: Session,
    token: str,
    response: str,
    bringing_guests=None,
    guest_count: int | None = None,
    guest_emails: list | None = None,
    message: str | None = None,
    now: datetime | None = None,
) -> RsvpOutcome:
    """Record a guest's RSVP.

    Args:
        session: Database session. Committed on success, rolled back on
            failure during the write.
        token: Link token in any of the supported encodings.
        response: "attending" or "not-attending".
        bringing_guests: "yes" when the guest is bringing companions.
        guest_count: Number of companions.
        guest_emails: One email per companion.
        message: Optional note for the hosts.
        now: Submission time; defaults to the current UTC time.

    Raises:
        InviteNotFound: The token does not resolve.
        EventExpired: The event date has passed.
        RsvpValidationError: A guest count or guest email rule failed.
    """
    now = now or utcnow()
    invite = resolve_invite(session, token)
    event = invite.event

    validated = validate_rsvp(
        invite,
        event,
        response,
        bringing_guests=bringing_guests,
        guest_count=guest_count,
        guest_emails=guest_emails,
        message=message,
        now=now,
    )

    try:
        invite.rsvp_status = validated.status.value
        invite.guest_count = validated.guest_count
        invite.message = validated.message
        invite.rsvp_at = now
        session.add(invite)

        companions = reconcile_companions(session, invite.id, validated.companion_emails)
        session.commit()
    except Exception:
        session.rollback()
        logger.exception(f"Failed to record RSVP for invite {invite.id}")
        raise

    session.refresh(invite)
    logger.info(
        f"RSVP recorded for invite {invite.id}: {validated.status.value}, "
        f"{validated.guest_count} companion(s)"
    )
    return RsvpOutcome(
        invite=invite,
        event=event,
        status=validated.status,
        guest_count=validated.guest_count,
        message=validated.message,
        companions=companions,
    )
