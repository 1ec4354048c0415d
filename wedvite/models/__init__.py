from wedvite.models.companion import CompanionInvite
from wedvite.models.event import Event
from wedvite.models.invite import Invite, RsvpStatus, normalize_rsvp_status
from wedvite.models.reminder import Reminder, ReminderStatus, ReminderType
from wedvite.models.user import User

__all__ = [
    "CompanionInvite",
    "Event",
    "Invite",
    "Reminder",
    "ReminderStatus",
    "ReminderType",
    "RsvpStatus",
    "User",
    "normalize_rsvp_status",
]
