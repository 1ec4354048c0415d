"""Invitation link target.

QR codes on printed and emailed invitations encode ``/invitation/{token}``.
This route records the first view and forwards the guest to the right
frontend page for where they are in the RSVP flow.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from wedvite.core.clock import utcnow
from wedvite.core.database import get_session
from wedvite.rsvp.errors import InviteNotFound
from wedvite.rsvp.tokens import resolve_invite

router = APIRouter(prefix="/invitation", tags=["invitation"])

logger = logging.getLogger(__name__)


@router.get("/{token}")
async def open_invitation(token: str, request: Request, session: Session = Depends(get_session)):
    """
    Resolve an invitation link and redirect.

    - Unknown token: ``/404``
    - Still pending: ``/rsvp/{token}``
    - Already responded: ``/invite/{id}``
    """
    rp = request.scope.get("root_path", "")
    try:
        invite = resolve_invite(session, token)
    except InviteNotFound:
        logger.info("Invitation link with unknown token opened")
        return RedirectResponse(f"{rp}/404", status_code=307)

    if invite.viewed_at is None:
        invite.viewed_at = utcnow()
        session.add(invite)
        session.commit()
        session.refresh(invite)

    if invite.has_responded:
        return RedirectResponse(f"{rp}/invite/{invite.id}", status_code=307)
    return RedirectResponse(f"{rp}/rsvp/{token}", status_code=307)
