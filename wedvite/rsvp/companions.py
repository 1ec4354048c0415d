"""Reconcile a guest's companion invites with their latest RSVP."""
import logging
from dataclasses import dataclass

from sqlmodel import Session, select

from wedvite.models import CompanionInvite
from wedvite.rsvp.tokens import generate_companion_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompanionLink:
    """A companion to notify: the email as the guest typed it, and its token."""
    email: str
    token: str


def reconcile_companions(
    session: Session, invite_id: str, emails: list[str]
) -> list[CompanionLink]:
    """
    Converge the invite's companion rows onto ``emails``.

    Rows whose (lowercased) email is still listed keep their token, so links
    already mailed to those companions stay valid. New emails get a row with
    a fresh token, and rows no longer listed are deleted. An empty list
    removes every companion.

    Does not commit; the caller owns the transaction.

    Returns:
        One CompanionLink per requested email, in request order.
    """
    statement = select(CompanionInvite).where(CompanionInvite.invite_id == invite_id)
    existing = {companion.email: companion for companion in session.exec(statement).all()}

    links: list[CompanionLink] = []
    wanted: set[str] = set()
    stats = {"kept": 0, "created": 0, "deleted": 0}

    for original in emails:
        email = original.strip().lower()
        wanted.add(email)
        companion = existing.get(email)
        if companion is None:
            companion = CompanionInvite(
                invite_id=invite_id,
                email=email,
                token=generate_companion_token(),
            )
            session.add(companion)
            existing[email] = companion
            stats["created"] += 1
        else:
            stats["kept"] += 1
        links.append(CompanionLink(email=original, token=companion.token))

    for email, companion in existing.items():
        if email not in wanted:
            session.delete(companion)
            stats["deleted"] += 1

    logger.debug(f"Companions reconciled for invite {invite_id}: {stats}")
    return links
