"""Guest-facing RSVP routes.

These endpoints are authorized by the invite or companion token in the
path; guests never sign in.
"""
import logging

from fastapi import APIRouter, Depends
from sqlmodel import Session

from wedvite.core.database import get_session
from wedvite.models import Event, Invite
from wedvite.notifications.dispatcher import NotificationDispatcher, get_dispatcher
from wedvite.rsvp.service import load_rsvp, submit_rsvp
from wedvite.rsvp.tokens import invite_token, resolve_companion_invite
from wedvite.rsvp.validation import effective_guest_limit
from wedvite.schemas import EventRead, RsvpSubmission

router = APIRouter(prefix="/api", tags=["rsvp"])

logger = logging.getLogger(__name__)


def guest_payload(invite: Invite) -> dict:
    return {
        "id": invite.id,
        "name": invite.guest_name,
        "email": invite.email,
        "rsvpStatus": invite.status.value,
        "invitationToken": invite_token(invite),
        "guestCount": invite.guest_count,
        "guestLimit": effective_guest_limit(invite, invite.event),
        "message": invite.message,
        "companions": [companion.email for companion in invite.companions],
    }


def event_payload(event: Event) -> dict:
    return EventRead.model_validate(event).model_dump(
        by_alias=True, mode="json", exclude={"created_at"}
    )


@router.get("/rsvp/{token}")
async def get_rsvp(token: str, session: Session = Depends(get_session)):
    """
    Load the invitation behind an RSVP link.

    Returns the guest's current response and the event details. 404 if the
    token does not resolve, 400 once the event has passed.
    """
    invite = load_rsvp(session, token)
    return {"guest": guest_payload(invite), "event": event_payload(invite.event)}


@router.post("/rsvp/{token}")
async def post_rsvp(
    token: str,
    submission: RsvpSubmission,
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Record a guest's RSVP.

    The response is committed before any email goes out. Confirmation,
    companion and owner emails are then attempted; their failures are
    logged and do not affect the response.
    """
    outcome = submit_rsvp(
        session,
        token,
        submission.response,
        bringing_guests=submission.bringing_guests,
        guest_count=submission.guest_count,
        guest_emails=submission.guest_emails,
        message=submission.message,
    )
    await dispatcher.notify_rsvp(outcome)

    return {
        "message": "RSVP updated successfully",
        "guest": guest_payload(outcome.invite),
    }


@router.get("/companion-invite/{token}")
async def get_companion_invite(token: str, session: Session = Depends(get_session)):
    """Load a companion's invitation: who invited them and to what."""
    companion = resolve_companion_invite(session, token)
    invite = companion.invite
    return {
        "companion": {"email": companion.email},
        "primaryGuest": {"id": invite.id, "name": invite.guest_name},
        "event": event_payload(invite.event),
    }
