"""Invite routes: bulk guest creation, sending, reminders, QR codes and export."""
import logging
import math

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlmodel import Session, select

from wedvite.core.clock import utcnow
from wedvite.core.database import get_session
from wedvite.core.security import get_current_user
from wedvite.guests.csv_io import export_filename, export_invites_csv
from wedvite.guests.service import event_has_email, new_invite
from wedvite.models import Invite, ReminderType, RsvpStatus, User
from wedvite.notifications.bulk import send_invitations, send_reminders
from wedvite.notifications.dispatcher import NotificationDispatcher, get_dispatcher
from wedvite.notifications.qr import generate_qr_data_url
from wedvite.routes.ownership import get_owned_event, get_owned_invite, owned_invites_query
from wedvite.schemas import BulkInviteCreate, BulkInviteDelete, GuestRead, SendBulkRequest

router = APIRouter(prefix="/api/invites", tags=["invites"])

logger = logging.getLogger(__name__)


@router.get("")
async def list_invites(
    event_id: str | None = Query(None, alias="eventId"),
    status: RsvpStatus | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    Page through the owner's invites.

    Filters by event and by RSVP status (legacy status values count as
    their modern equivalent). Statistics cover the whole filtered set, not
    just the page.
    """
    statement = owned_invites_query(user)
    if event_id:
        statement = statement.where(Invite.event_id == event_id)
    statement = statement.order_by(Invite.created_at.desc(), Invite.guest_name)

    invites = session.exec(statement).all()
    if status is not None:
        invites = [invite for invite in invites if invite.status == status]

    statistics = {"total": len(invites), "attending": 0, "notAttending": 0, "pending": 0}
    for invite in invites:
        if invite.status == RsvpStatus.ATTENDING:
            statistics["attending"] += 1
        elif invite.status == RsvpStatus.NOT_ATTENDING:
            statistics["notAttending"] += 1
        else:
            statistics["pending"] += 1

    total = len(invites)
    start = (page - 1) * limit
    page_items = invites[start:start + limit]

    return {
        "invites": [
            {**GuestRead.from_invite(invite).model_dump(by_alias=True, mode="json"),
             "event": {"id": invite.event.id, "title": invite.event.title}}
            for invite in page_items
        ],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit),
        },
        "statistics": statistics,
    }


@router.post("", status_code=201)
async def create_invites(
    body: BulkInviteCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Create several invites at once, optionally emailing them straight away.

    Guests whose email is already on the event are skipped and listed in
    ``errors``.
    """
    event = get_owned_event(session, body.event_id, user)

    created: list[Invite] = []
    errors: list[dict] = []
    for guest in body.guests:
        if guest.email and event_has_email(session, event.id, guest.email):
            errors.append({"email": guest.email, "error": "Guest already invited to this event"})
            continue
        invite = new_invite(event, guest.name, guest.email, guest.guest_limit)
        session.add(invite)
        # Flush so later guests in the same request see this email
        session.flush()
        created.append(invite)
    session.commit()

    logger.info(f"Created {len(created)} invites for event {event.id}")

    stats = None
    if body.send_email and created:
        stats = await send_invitations(session, dispatcher, created)

    response = {
        "message": f"Created {len(created)} invites successfully",
        "invites": [GuestRead.from_invite(invite) for invite in created],
        "errors": errors,
    }
    if stats is not None:
        response.update(sent=stats["sent"], failed=stats["failed"], details=stats["details"])
    return response


@router.delete("")
async def delete_invites(
    body: BulkInviteDelete,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    Delete several invites.

    All-or-nothing: if any id is unknown or belongs to another owner,
    nothing is deleted and the response is 403.
    """
    ids = set(body.invite_ids)
    statement = owned_invites_query(user).where(Invite.id.in_(ids))
    invites = session.exec(statement).all()
    if len(invites) != len(ids):
        raise HTTPException(status_code=403, detail="Some invites not found or unauthorized")

    for invite in invites:
        session.delete(invite)
    session.commit()
    return {"message": f"Deleted {len(invites)} invites successfully", "deletedCount": len(invites)}


@router.post("/send-bulk")
async def send_bulk(
    body: SendBulkRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Email invitations to the chosen guests of one event."""
    event = get_owned_event(session, body.event_id, user)
    statement = (
        select(Invite)
        .where(Invite.event_id == event.id)
        .where(Invite.id.in_(body.guest_ids))
        .order_by(Invite.created_at)
    )
    invites = session.exec(statement).all()
    if not invites:
        raise HTTPException(status_code=400, detail="No valid invites found")

    stats = await send_invitations(session, dispatcher, list(invites))
    return {"message": f"Sent {stats['sent']} of {len(invites)} invitations", **stats}


@router.get("/export")
async def export_invites(
    event_id: str = Query(..., alias="eventId"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Download the event's guest list as CSV."""
    event = get_owned_event(session, event_id, user)
    invites = sorted(event.invites, key=lambda invite: invite.created_at)
    filename = export_filename(event.title, utcnow().date())
    return Response(
        content=export_invites_csv(invites),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-store",
        },
    )


@router.post("/{invite_id}/send")
async def send_invite(
    invite_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Email one invitation."""
    invite = get_owned_invite(session, invite_id, user)
    if not invite.email:
        raise HTTPException(status_code=400, detail="Guest email not provided for this invitation")

    stats = await send_invitations(session, dispatcher, [invite])
    if not stats["sent"]:
        raise HTTPException(
            status_code=500,
            detail=stats["details"][0].get("error") or "Failed to send email",
        )
    session.refresh(invite)
    return {"message": "Invitation sent successfully", "invite": GuestRead.from_invite(invite)}


@router.post("/{invite_id}/reminder")
async def send_invite_reminder(
    invite_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Send an RSVP reminder to a guest who has not responded yet."""
    invite = get_owned_invite(session, invite_id, user)
    if invite.has_responded:
        raise HTTPException(status_code=400, detail="Guest has already responded")
    if not invite.email:
        raise HTTPException(status_code=400, detail="Guest does not have an email address")

    stats = await send_reminders(session, dispatcher, [invite], ReminderType.RSVP)
    if not stats["sent"]:
        raise HTTPException(status_code=500, detail="Failed to send reminder email")
    return {"message": "Reminder sent successfully"}


@router.get("/{invite_id}/qr")
async def invite_qr(
    invite_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """QR code for printing: a PNG data URL encoding the invitation link."""
    invite = get_owned_invite(session, invite_id, user)
    link = dispatcher.invitation_link(invite)
    return {"inviteId": invite.id, "url": link, "qrCode": generate_qr_data_url(link)}
