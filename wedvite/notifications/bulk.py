"""Invitation and reminder sending with per-guest result aggregation.

Each function returns a stats dict shaped ``{"sent", "failed", "details"}``
where ``details`` holds one entry per guest. A failure for one guest is
recorded and the loop moves on.
"""
import logging
from datetime import datetime, timedelta

from sqlmodel import Session, select

from wedvite.core.clock import utcnow
from wedvite.models import (
    Event,
    Invite,
    Reminder,
    ReminderStatus,
    ReminderType,
    RsvpStatus,
)
from wedvite.notifications.dispatcher import NotificationDispatcher, reminder_copy

logger = logging.getLogger(__name__)


def _empty_stats() -> dict:
    return {"sent": 0, "failed": 0, "details": []}


def _detail(invite: Invite, status: str, error: str | None = None, **extra) -> dict:
    detail = {
        "inviteId": invite.id,
        "guestName": invite.guest_name,
        "email": invite.email,
        "status": status,
    }
    if error:
        detail["error"] = error
    detail.update(extra)
    return detail


async def send_invitations(
    session: Session,
    dispatcher: NotificationDispatcher,
    invites: list[Invite],
    now: datetime | None = None,
) -> dict:
    """Email invitations and stamp ``sent_at`` on each success."""
    now = now or utcnow()
    stats = _empty_stats()

    for invite in invites:
        if not invite.email:
            stats["failed"] += 1
            stats["details"].append(_detail(invite, "failed", "Guest has no email address on file"))
            continue

        result = await dispatcher.send_invitation(invite)
        if result.success:
            invite.sent_at = now
            session.add(invite)
            stats["sent"] += 1
            stats["details"].append(_detail(invite, "sent"))
        else:
            stats["failed"] += 1
            stats["details"].append(_detail(invite, "failed", result.error))

    session.commit()
    logger.info(f"Invitations processed: {stats['sent']} sent, {stats['failed']} failed")
    return stats


async def send_reminders(
    session: Session,
    dispatcher: NotificationDispatcher,
    invites: list[Invite],
    reminder_type: ReminderType = ReminderType.GENERAL,
    custom_message: str | None = None,
    now: datetime | None = None,
) -> dict:
    """Email reminders and append a Reminder row for every dispatch attempt."""
    now = now or utcnow()
    stats = _empty_stats()

    for invite in invites:
        subject, message = reminder_copy(reminder_type, invite.event.title, custom_message)

        if not invite.email:
            stats["failed"] += 1
            stats["details"].append(
                _detail(
                    invite, "failed", "Guest has no email address on file",
                    reminderType=reminder_type.value,
                )
            )
            continue

        result = await dispatcher.send_reminder(invite, subject, message)
        status = ReminderStatus.SENT if result.success else ReminderStatus.FAILED
        session.add(
            Reminder(
                invite_id=invite.id,
                event_id=invite.event_id,
                type=reminder_type.value,
                message=message,
                status=status.value,
                sent_at=now,
            )
        )

        if result.success:
            stats["sent"] += 1
            stats["details"].append(_detail(invite, "sent", reminderType=reminder_type.value))
        else:
            stats["failed"] += 1
            stats["details"].append(
                _detail(invite, "failed", result.error, reminderType=reminder_type.value)
            )

    session.commit()
    logger.info(
        f"Reminders ({reminder_type.value}) processed: "
        f"{stats['sent']} sent, {stats['failed']} failed"
    )
    return stats


def pending_deadline_invites(
    session: Session, lead_days: int, now: datetime | None = None
) -> list[Invite]:
    """
    Guests who still owe an RSVP for an event within the next ``lead_days``.

    Excludes guests without an email and guests who already received a
    deadline reminder.
    """
    now = now or utcnow()
    horizon = now + timedelta(days=lead_days)

    already_reminded = select(Reminder.invite_id).where(
        Reminder.type == ReminderType.DEADLINE.value
    )
    statement = (
        select(Invite)
        .join(Event)
        .where(Event.date > now)
        .where(Event.date <= horizon)
        .where(Invite.email.isnot(None))
        .where(Invite.id.not_in(already_reminded))
        .order_by(Event.date)
    )
    invites = session.exec(statement).all()
    return [invite for invite in invites if invite.status == RsvpStatus.PENDING]


async def send_deadline_reminders(
    session: Session,
    dispatcher: NotificationDispatcher,
    lead_days: int,
    now: datetime | None = None,
) -> dict:
    """Send one ``deadline`` reminder to every guest found by pending_deadline_invites."""
    invites = pending_deadline_invites(session, lead_days, now)
    if not invites:
        return _empty_stats()
    return await send_reminders(session, dispatcher, invites, ReminderType.DEADLINE, now=now)
