"""Lookups scoped to the signed-in owner.

Resources belonging to another owner are reported exactly like missing
ones, so ids cannot be probed across accounts.
"""
from fastapi import HTTPException
from sqlmodel import Session, select

from wedvite.models import Event, Invite, User


def get_owned_event(session: Session, event_id: str, user: User) -> Event:
    event = session.get(Event, event_id)
    if not event or event.user_id != user.id:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def get_owned_invite(session: Session, invite_id: str, user: User) -> Invite:
    invite = session.get(Invite, invite_id)
    if not invite or invite.event is None or invite.event.user_id != user.id:
        raise HTTPException(status_code=404, detail="Guest not found")
    return invite


def owned_invites_query(user: User):
    """Base select for every invite under the user's events."""
    return select(Invite).join(Event).where(Event.user_id == user.id)
