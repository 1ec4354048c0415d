"""Guest routes: guest list management across the owner's events."""
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from sqlmodel import Session

from wedvite.core.database import get_session
from wedvite.core.security import get_current_user
from wedvite.guests.csv_io import CsvFormatError, parse_guest_csv
from wedvite.guests.service import import_guests, new_invite
from wedvite.models import Invite, RsvpStatus, User
from wedvite.notifications.bulk import send_invitations
from wedvite.notifications.dispatcher import NotificationDispatcher, get_dispatcher
from wedvite.routes.ownership import get_owned_event, get_owned_invite, owned_invites_query
from wedvite.rsvp.companions import reconcile_companions
from wedvite.rsvp.validation import effective_guest_limit
from wedvite.schemas import GuestCreate, GuestRead, GuestUpdate

router = APIRouter(prefix="/api/guests", tags=["guests"])

logger = logging.getLogger(__name__)


@router.get("")
async def list_guests(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Every guest across the owner's events, newest first, with event title."""
    statement = owned_invites_query(user).order_by(Invite.created_at.desc())
    invites = session.exec(statement).all()
    return [
        {**GuestRead.from_invite(invite).model_dump(by_alias=True, mode="json"),
         "eventTitle": invite.event.title}
        for invite in invites
    ]


@router.post("", status_code=201)
async def create_guest(
    body: GuestCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    event = get_owned_event(session, body.event_id, user)
    invite = new_invite(event, body.guest_name, body.email, body.guest_limit)
    session.add(invite)
    session.commit()
    session.refresh(invite)
    return {"message": "Guest created successfully", "guest": GuestRead.from_invite(invite)}


@router.post("/import", status_code=201)
async def import_guest_csv(
    file: UploadFile = File(...),
    event_id: str = Form(..., alias="eventId"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    Import guests from a CSV upload.

    The file needs a column whose header contains "name"; "email" and
    "phone" columns are optional. Invalid rows are reported by row number
    and the valid ones are still imported. Responds 400 when nothing in the
    file could be imported.
    """
    event = get_owned_event(session, event_id, user)

    raw = await file.read()
    try:
        parsed = parse_guest_csv(raw.decode("utf-8-sig"))
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV file must be UTF-8 encoded")
    except CsvFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not parsed.guests:
        return JSONResponse(
            status_code=400,
            content={"error": "No valid guests to import", "details": parsed.errors},
        )

    result = import_guests(session, event, parsed)
    return {"message": f"Successfully imported {result['importedCount']} guests", **result}


@router.get("/{guest_id}")
async def get_guest(
    guest_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    invite = get_owned_invite(session, guest_id, user)
    return {
        **GuestRead.from_invite(invite).model_dump(by_alias=True, mode="json"),
        "eventTitle": invite.event.title,
        "companions": [companion.email for companion in invite.companions],
    }


@router.patch("/{guest_id}")
async def update_guest(
    guest_id: str,
    body: GuestUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    Update the fields present in the body.

    An attending guest's companion count must stay within their effective
    guest limit, including when the limit itself is lowered. Moving a guest
    off attending clears the count and their companion invites.
    """
    invite = get_owned_invite(session, guest_id, user)
    for key, value in body.model_dump(exclude_unset=True).items():
        if key == "guest_name":
            if value is None:
                continue
            value = value.strip()
        setattr(invite, key, value)

    if invite.status == RsvpStatus.ATTENDING:
        limit = effective_guest_limit(invite, invite.event)
        if invite.guest_count > limit:
            session.rollback()
            raise HTTPException(
                status_code=400,
                detail=f"Guest count exceeds the limit of {limit} additional guests",
            )
    elif invite.guest_count or invite.companions:
        invite.guest_count = 0
        reconcile_companions(session, invite.id, [])

    session.add(invite)
    session.commit()
    session.refresh(invite)
    return {"message": "Guest updated successfully", "guest": GuestRead.from_invite(invite)}


@router.delete("/{guest_id}")
async def delete_guest(
    guest_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    invite = get_owned_invite(session, guest_id, user)
    session.delete(invite)
    session.commit()
    return {"message": "Guest deleted successfully"}


@router.post("/{guest_id}/resend-invite")
async def resend_invite(
    guest_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Send the invitation email again, regardless of earlier sends."""
    invite = get_owned_invite(session, guest_id, user)
    if not invite.email:
        raise HTTPException(status_code=400, detail="Guest does not have an email address")

    stats = await send_invitations(session, dispatcher, [invite])
    if not stats["sent"]:
        raise HTTPException(status_code=500, detail="Failed to send invitation")
    return {"message": "Invitation sent successfully", **stats}
