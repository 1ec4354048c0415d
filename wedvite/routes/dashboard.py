"""Owner dashboard summary and RSVP analytics."""
from datetime import timedelta

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlmodel import Session, select

from wedvite.core.clock import as_utc, utcnow
from wedvite.core.database import get_session
from wedvite.core.security import get_current_user
from wedvite.models import Event, Invite, Reminder, RsvpStatus, User
from wedvite.routes.ownership import owned_invites_query

router = APIRouter(prefix="/api", tags=["dashboard"])

TREND_DAYS = 30


def _iso(value):
    return as_utc(value).isoformat() if value else None


@router.get("/dashboard/stats")
async def dashboard_stats(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    Headline numbers for the owner's events.

    Head counts include each guest plus their confirmed companions.
    Response rate is the share of invites that have answered either way.
    Also returns the five latest RSVPs and three latest reminders.
    """
    total_events = session.exec(
        select(func.count()).select_from(Event).where(Event.user_id == user.id)
    ).one()
    invites = session.exec(owned_invites_query(user)).all()

    rsvp_stats = {"pending": 0, "attending": 0, "notAttending": 0}
    attending_headcount = 0
    for invite in invites:
        if invite.status == RsvpStatus.ATTENDING:
            rsvp_stats["attending"] += 1
            attending_headcount += 1 + invite.guest_count
        elif invite.status == RsvpStatus.NOT_ATTENDING:
            rsvp_stats["notAttending"] += 1
        else:
            rsvp_stats["pending"] += 1

    total_invites = len(invites)
    responded = rsvp_stats["attending"] + rsvp_stats["notAttending"]
    response_rate = round(responded / total_invites * 100) if total_invites else 0

    recent_rsvps = sorted(
        (invite for invite in invites if invite.rsvp_at is not None),
        key=lambda invite: as_utc(invite.rsvp_at),
        reverse=True,
    )[:5]

    recent_reminders = session.exec(
        select(Reminder)
        .join(Event)
        .where(Event.user_id == user.id)
        .order_by(Reminder.sent_at.desc())
        .limit(3)
    ).all()

    return {
        "stats": {
            "totalEvents": total_events,
            "totalInvites": total_invites,
            "attendingGuests": attending_headcount,
            "rsvpStats": rsvp_stats,
            "responseRate": response_rate,
        },
        "notifications": {
            "recentRsvps": [
                {
                    "guestName": invite.guest_name,
                    "rsvpStatus": invite.status.value,
                    "rsvpAt": _iso(invite.rsvp_at),
                    "eventTitle": invite.event.title,
                }
                for invite in recent_rsvps
            ],
            "recentReminders": [
                {
                    "type": reminder.type,
                    "status": reminder.status,
                    "sentAt": _iso(reminder.sent_at),
                    "guestName": reminder.invite.guest_name,
                    "eventTitle": reminder.event.title,
                }
                for reminder in recent_reminders
            ],
        },
    }


def _breakdown(invites: list[Invite]) -> dict:
    counts = {
        "totalInvites": len(invites),
        "attending": 0,
        "notAttending": 0,
        "pending": 0,
        "guestCount": 0,
    }
    for invite in invites:
        if invite.status == RsvpStatus.ATTENDING:
            counts["attending"] += 1
            counts["guestCount"] += 1 + invite.guest_count
        elif invite.status == RsvpStatus.NOT_ATTENDING:
            counts["notAttending"] += 1
        else:
            counts["pending"] += 1
    return counts


def _rate(responded: int, total: int) -> float:
    return round(responded / total * 100, 2) if total else 0


@router.get("/analytics")
async def analytics(
    event_id: str | None = Query(None, alias="eventId"),
    timeframe: int = Query(30, ge=1, le=365),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    RSVP analytics across the owner's events, or one event with ``eventId``.

    Returns an overview, a per-event breakdown, a daily RSVP trend for the
    last 30 days, the ten latest RSVPs within ``timeframe`` days and the
    next five upcoming events. ``guestCount`` is a head count: each
    attending guest plus their companions.
    """
    now = utcnow()

    statement = select(Event).where(Event.user_id == user.id)
    if event_id:
        statement = statement.where(Event.id == event_id)
    events = session.exec(statement.order_by(Event.date)).all()

    overview = {
        "totalEvents": len(events),
        "totalInvites": 0,
        "totalAttending": 0,
        "totalNotAttending": 0,
        "totalPending": 0,
        "totalGuests": 0,
    }
    event_breakdown = []
    for event in events:
        counts = _breakdown(event.invites)
        overview["totalInvites"] += counts["totalInvites"]
        overview["totalAttending"] += counts["attending"]
        overview["totalNotAttending"] += counts["notAttending"]
        overview["totalPending"] += counts["pending"]
        overview["totalGuests"] += counts["guestCount"]
        event_breakdown.append({
            "eventId": event.id,
            "eventTitle": event.title,
            "eventDate": _iso(event.date),
            **counts,
            "rsvpRate": _rate(counts["attending"] + counts["notAttending"], counts["totalInvites"]),
        })
    overview["rsvpRate"] = _rate(
        overview["totalAttending"] + overview["totalNotAttending"], overview["totalInvites"]
    )

    # Daily buckets keyed by UTC date, oldest first
    days = [(now - timedelta(days=offset)).date() for offset in range(TREND_DAYS - 1, -1, -1)]
    trend = {day: {"attending": 0, "notAttending": 0, "total": 0} for day in days}
    for invite in (invite for event in events for invite in event.invites):
        if invite.rsvp_at is None:
            continue
        bucket = trend.get(as_utc(invite.rsvp_at).date())
        if bucket is None:
            continue
        bucket["total"] += 1
        if invite.status == RsvpStatus.ATTENDING:
            bucket["attending"] += 1
        elif invite.status == RsvpStatus.NOT_ATTENDING:
            bucket["notAttending"] += 1

    since = now - timedelta(days=timeframe)
    recent = sorted(
        (
            invite for invite in session.exec(owned_invites_query(user)).all()
            if invite.rsvp_at is not None and as_utc(invite.rsvp_at) >= since
        ),
        key=lambda invite: as_utc(invite.rsvp_at),
        reverse=True,
    )[:10]

    upcoming = [
        event
        for event in session.exec(
            select(Event).where(Event.user_id == user.id).order_by(Event.date)
        ).all()
        if as_utc(event.date) >= now
    ][:5]

    return {
        "overview": overview,
        "trends": {
            "rsvpTrend": [{"date": day.isoformat(), **trend[day]} for day in days],
            "eventBreakdown": event_breakdown,
        },
        "recentActivity": [
            {
                "id": invite.id,
                "guestName": invite.guest_name,
                "eventTitle": invite.event.title,
                "rsvpStatus": invite.status.value,
                "rsvpAt": _iso(invite.rsvp_at),
                "guestCount": invite.guest_count,
            }
            for invite in recent
        ],
        "upcomingEvents": [
            {
                "id": event.id,
                "title": event.title,
                "date": _iso(event.date),
                "location": event.location,
                "inviteCount": len(event.invites),
            }
            for event in upcoming
        ],
        "timeframe": timeframe,
    }
