"""Reminder routes: send to selected guests and browse the reminder log."""
import math

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlmodel import Session, select

from wedvite.core.database import get_session
from wedvite.core.security import get_current_user
from wedvite.models import Event, Invite, Reminder, User
from wedvite.notifications.bulk import send_reminders
from wedvite.notifications.dispatcher import NotificationDispatcher, get_dispatcher
from wedvite.routes.ownership import get_owned_event
from wedvite.schemas import ReminderCreate, ReminderRead

router = APIRouter(prefix="/api/reminders", tags=["reminders"])


@router.post("")
async def create_reminders(
    body: ReminderCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Send a reminder to the listed guests of one event.

    Ids that are not guests of the event are ignored. Every attempt,
    successful or not, is written to the reminder log.
    """
    event = get_owned_event(session, body.event_id, user)
    statement = (
        select(Invite)
        .where(Invite.event_id == event.id)
        .where(Invite.id.in_(body.invite_ids))
        .order_by(Invite.created_at)
    )
    invites = session.exec(statement).all()
    if not invites:
        raise HTTPException(status_code=400, detail="No valid guests found")

    stats = await send_reminders(
        session, dispatcher, list(invites), body.reminder_type, body.custom_message
    )
    return {
        "message": f"Sent {stats['sent']} reminder(s), {stats['failed']} failed",
        **stats,
    }


@router.get("")
async def list_reminders(
    event_id: str | None = Query(None, alias="eventId"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Reminder log, newest first, for one event or all of the owner's events."""
    if event_id:
        get_owned_event(session, event_id, user)
        condition = Reminder.event_id == event_id
    else:
        owned = select(Event.id).where(Event.user_id == user.id)
        condition = Reminder.event_id.in_(owned)

    total = session.exec(select(func.count()).select_from(Reminder).where(condition)).one()
    statement = (
        select(Reminder)
        .where(condition)
        .order_by(Reminder.sent_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    reminders = session.exec(statement).all()

    return {
        "reminders": [
            {
                **ReminderRead.model_validate(reminder).model_dump(by_alias=True, mode="json"),
                "invite": {
                    "id": reminder.invite.id,
                    "guestName": reminder.invite.guest_name,
                    "email": reminder.invite.email,
                },
                "event": {"id": reminder.event.id, "title": reminder.event.title},
            }
            for reminder in reminders
        ],
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit),
        },
    }
