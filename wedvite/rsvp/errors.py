"""Errors raised by the guest-facing RSVP workflow.

Each error carries the HTTP status it maps to; ``wedvite.main`` turns any
InvitationError into ``{"error": message}`` with that status.
"""


class InvitationError(Exception):
    status_code = 400
    default_message = "Invalid request"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InviteNotFound(InvitationError):
    status_code = 404
    default_message = "Invalid invitation token"


class CompanionInviteNotFound(InvitationError):
    status_code = 404
    default_message = "Invalid companion invite link"


class EventExpired(InvitationError):
    default_message = "This event has already passed"


class RsvpValidationError(InvitationError):
    """Client-correctable problem with an RSVP submission."""


class NoGuestsAllowed(RsvpValidationError):
    default_message = "Additional guests are not allowed for this invitation."


class GuestCountRequired(RsvpValidationError):
    default_message = "Please tell us how many guests you are bringing."


class GuestLimitExceeded(RsvpValidationError):
    def __init__(self, limit: int):
        self.limit = limit
        plural = "" if limit == 1 else "s"
        super().__init__(f"You can bring at most {limit} additional guest{plural}.")


class GuestEmailCountMismatch(RsvpValidationError):
    def __init__(self, expected: int):
        self.expected = expected
        plural = "" if expected == 1 else "s"
        super().__init__(f"Please provide exactly {expected} guest email{plural}.")


class InvalidGuestEmail(RsvpValidationError):
    def __init__(self, emails: list[str]):
        self.emails = emails
        plural = "" if len(emails) == 1 else "s"
        super().__init__(f"Invalid guest email{plural} supplied: {', '.join(emails)}")


class DuplicateGuestEmail(RsvpValidationError):
    def __init__(self, emails: list[str]):
        self.emails = emails
        super().__init__(f"Each guest needs a different email address: {', '.join(emails)}")
