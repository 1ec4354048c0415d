"""Event routes for owners: CRUD, adding guests, and event-wide sends."""
import logging
import math

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from wedvite.core.clock import as_utc, has_passed, utcnow
from wedvite.core.database import get_session
from wedvite.core.security import get_current_user
from wedvite.guests.service import new_invite
from wedvite.models import Event, Invite, RsvpStatus, User
from wedvite.notifications.bulk import send_invitations, send_reminders
from wedvite.notifications.dispatcher import NotificationDispatcher, get_dispatcher
from wedvite.routes.ownership import get_owned_event
from wedvite.schemas import (
    EventCreate,
    EventGuestCreate,
    EventRead,
    EventReminderRequest,
    EventUpdate,
    GuestRead,
)

router = APIRouter(prefix="/api/events", tags=["events"])

logger = logging.getLogger(__name__)


def rsvp_counts(invites: list[Invite]) -> dict:
    counts = {"totalInvites": len(invites), "pending": 0, "attending": 0, "notAttending": 0}
    for invite in invites:
        if invite.status == RsvpStatus.ATTENDING:
            counts["attending"] += 1
        elif invite.status == RsvpStatus.NOT_ATTENDING:
            counts["notAttending"] += 1
        else:
            counts["pending"] += 1
    return counts


@router.get("")
async def list_events(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """List the owner's events, soonest first, with RSVP counts."""
    statement = select(Event).where(Event.user_id == user.id).order_by(Event.date)
    events = session.exec(statement).all()
    return [
        {**EventRead.model_validate(event).model_dump(by_alias=True, mode="json"),
         "stats": rsvp_counts(event.invites)}
        for event in events
    ]


@router.post("", status_code=201)
async def create_event(
    body: EventCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Create an event owned by the signed-in user."""
    event = Event(**body.model_dump(), user_id=user.id)
    session.add(event)
    session.commit()
    session.refresh(event)

    logger.info(f"Created event {event.id} for user {user.id}")
    return EventRead.model_validate(event)


@router.get("/{event_id}")
async def get_event(
    event_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Event details with its guest list."""
    event = get_owned_event(session, event_id, user)
    guests = sorted(event.invites, key=lambda invite: invite.guest_name.lower())
    return {
        **EventRead.model_validate(event).model_dump(by_alias=True, mode="json"),
        "stats": rsvp_counts(event.invites),
        "guests": [GuestRead.from_invite(invite) for invite in guests],
    }


@router.put("/{event_id}")
async def update_event(
    event_id: str,
    body: EventUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Update the fields present in the body; omitted fields are left as they are."""
    event = get_owned_event(session, event_id, user)
    for key, value in body.model_dump(exclude_unset=True).items():
        if key in ("title", "date", "location") and value is None:
            continue
        setattr(event, key, value)

    session.add(event)
    session.commit()
    session.refresh(event)
    return EventRead.model_validate(event)


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Delete an event with all its guests, companion invites and reminders."""
    event = get_owned_event(session, event_id, user)
    session.delete(event)
    session.commit()

    logger.info(f"Deleted event {event_id}")
    return {"message": "Event deleted successfully"}


@router.post("/{event_id}/guests", status_code=201)
async def add_event_guest(
    event_id: str,
    body: EventGuestCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Add one guest to the event."""
    event = get_owned_event(session, event_id, user)
    invite = new_invite(event, body.name, body.email, body.guest_limit)
    session.add(invite)
    session.commit()
    session.refresh(invite)
    return {"message": "Guest added successfully", "guest": GuestRead.from_invite(invite)}


@router.post("/{event_id}/invites/send")
async def send_event_invitations(
    event_id: str,
    include_sent: bool = Query(False, alias="includeSent"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Email invitations to the event's guests.

    Only guests who have not been sent one yet, unless ``includeSent=true``.
    Guests without an email are reported as failed.
    """
    event = get_owned_event(session, event_id, user)
    invites = [invite for invite in event.invites if include_sent or invite.sent_at is None]
    if not invites:
        return {"message": "No invitations to send", "sent": 0, "failed": 0, "details": []}

    stats = await send_invitations(session, dispatcher, invites)
    return {"message": f"Sent {stats['sent']} invitation(s)", **stats}


@router.post("/{event_id}/reminders")
async def send_event_reminders(
    event_id: str,
    body: EventReminderRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Send a reminder to a slice of the guest list.

    ``targetAudience`` picks pending guests (default), attending guests, or
    everyone. Refused for events that have already happened.
    """
    event = get_owned_event(session, event_id, user)
    if has_passed(event.date):
        raise HTTPException(status_code=400, detail="Cannot send reminders for past events")

    if body.target_audience == "all":
        invites = list(event.invites)
    else:
        wanted = RsvpStatus(body.target_audience)
        invites = [invite for invite in event.invites if invite.status == wanted]

    if not invites:
        return {
            "message": "No invites found for the specified criteria",
            "sent": 0,
            "failed": 0,
            "details": [],
        }

    stats = await send_reminders(
        session, dispatcher, invites, body.reminder_type, body.custom_message
    )
    return {
        "message": f"Sent {stats['sent']} reminder(s) successfully",
        **stats,
        "targetAudience": body.target_audience,
        "reminderType": body.reminder_type.value,
    }


@router.get("/{event_id}/reminders")
async def event_reminder_stats(
    event_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """RSVP counts and days remaining, for deciding whether to send a reminder."""
    event = get_owned_event(session, event_id, user)
    stats = rsvp_counts(event.invites)
    seconds = (as_utc(event.date) - utcnow()).total_seconds()
    return {
        "event": {
            "id": event.id,
            "title": event.title,
            "date": as_utc(event.date).isoformat(),
            "daysUntilEvent": math.ceil(seconds / 86400),
        },
        "stats": stats,
        "remindersSent": len(event.reminders),
        "suggestions": {"sendReminder": stats["pending"] > 0},
    }
