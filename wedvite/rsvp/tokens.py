"""Invite token generation and resolution.

Tokens have been stored three ways over the life of the product:

1. A bare random token in ``Invite.qr_code`` (current format).
2. A full URL in ``Invite.qr_code`` that ends with the token.
3. No token at all: the link carried the invite id.

``resolve_invite`` tries each in that order so every link ever sent keeps
working. New invites always get a bare token from ``generate_invite_token``,
and ``scripts/normalize_invite_tokens.py`` rewrites format 2 rows.
"""
import logging
import secrets

from sqlmodel import Session, select

from wedvite.models import CompanionInvite, Invite
from wedvite.rsvp.errors import CompanionInviteNotFound, InviteNotFound

logger = logging.getLogger(__name__)


def generate_invite_token() -> str:
    return secrets.token_urlsafe(16)


def generate_companion_token() -> str:
    return secrets.token_urlsafe(24)


def canonical_token(qr_code: str) -> str:
    """Return the bare token for a stored qr_code value.

    Legacy URL-style values yield their last path segment.
    """
    if "/" not in qr_code:
        return qr_code
    segments = [segment for segment in qr_code.split("/") if segment]
    return segments[-1] if segments else qr_code


def invite_token(invite: Invite) -> str:
    """Token to put in links for this invite."""
    return canonical_token(invite.qr_code) if invite.qr_code else invite.id


def resolve_invite(session: Session, token: str) -> Invite:
    """Find the invite a link token refers to.

    Raises:
        InviteNotFound: If no rule matches.
    """
    token = (token or "").strip()
    if not token:
        raise InviteNotFound()

    invite = session.exec(select(Invite).where(Invite.qr_code == token)).first()

    if invite is None:
        # Legacy rows stored a URL with the token as suffix
        statement = (
            select(Invite)
            .where(Invite.qr_code.contains(token, autoescape=True))
            .order_by(Invite.created_at)
        )
        invite = session.exec(statement).first()
        if invite is not None:
            logger.debug(f"Resolved invite {invite.id} by legacy URL token")

    if invite is None:
        invite = session.get(Invite, token)
        if invite is not None:
            logger.debug(f"Resolved invite {invite.id} by invite id")

    if invite is None:
        raise InviteNotFound()
    return invite


def resolve_companion_invite(session: Session, token: str) -> CompanionInvite:
    """Find a companion invite by its link token."""
    token = (token or "").strip()
    companion = None
    if token:
        statement = select(CompanionInvite).where(CompanionInvite.token == token)
        companion = session.exec(statement).first()

    if companion is None or companion.invite is None or companion.invite.event is None:
        raise CompanionInviteNotFound()
    return companion
