"""Outbound guest and owner notifications.

Every email the service sends goes through ``NotificationDispatcher.send``
as an ``EmailRequest``. Delivery is best-effort: ``send`` never raises, it
logs failures and reports them in the returned ``DeliveryResult`` so bulk
operations can aggregate per-guest outcomes.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

from fastapi import Depends
from fastapi.concurrency import run_in_threadpool

from wedvite.core.config import settings
from wedvite.models import Event, Invite, ReminderType, RsvpStatus
from wedvite.notifications.mailer import ResendMailer, get_mailer
from wedvite.notifications.qr import generate_qr_data_url
from wedvite.notifications.rendering import format_event_date, render_email
from wedvite.rsvp.tokens import invite_token

logger = logging.getLogger(__name__)


class EmailType(str, Enum):
    INVITATION = "invitation"
    RSVP_CONFIRMATION = "rsvp-confirmation"
    COMPANION_INVITE = "companion-invite"
    RSVP_NOTIFICATION = "rsvp-notification"
    REMINDER = "reminder"


TEMPLATES = {
    EmailType.INVITATION: "invitation",
    EmailType.RSVP_CONFIRMATION: "rsvp_confirmation",
    EmailType.COMPANION_INVITE: "companion_invite",
    EmailType.RSVP_NOTIFICATION: "rsvp_notification",
    EmailType.REMINDER: "reminder",
}

# (subject, default body) per reminder type; "{title}" is the event title
REMINDER_COPY = {
    ReminderType.GENERAL: (
        "Reminder: {title}",
        "This is a friendly reminder about {title}. We look forward to celebrating with you!",
    ),
    ReminderType.RSVP: (
        "RSVP Reminder: {title}",
        "We haven't received your RSVP yet for {title}. Please let us know if you'll be joining us!",
    ),
    ReminderType.DEADLINE: (
        "RSVP Deadline Approaching: {title}",
        "The RSVP deadline for {title} is approaching. Please respond soon to help us with planning.",
    ),
    ReminderType.FINAL: (
        "Final Reminder: {title}",
        "This is our final reminder about {title}. We're excited to celebrate with you soon!",
    ),
    ReminderType.URGENT: (
        "URGENT: Please respond - {title}",
        "We still need your response for {title}. Please RSVP as soon as possible.",
    ),
}


def reminder_copy(
    reminder_type: ReminderType, title: str, custom_message: str | None = None
) -> tuple[str, str]:
    """Return (subject, message) for a reminder."""
    subject, body = REMINDER_COPY.get(reminder_type, REMINDER_COPY[ReminderType.GENERAL])
    message = custom_message.strip() if custom_message and custom_message.strip() else None
    return subject.format(title=title), message or body.format(title=title)


@dataclass
class EmailRequest:
    """One message for the email collaborator."""
    type: EmailType
    to: str
    subject: str
    template_data: dict = field(default_factory=dict)


@dataclass
class DeliveryResult:
    type: EmailType
    to: str
    success: bool
    message_id: str | None = None
    error: str | None = None


class NotificationDispatcher:
    """Builds and sends every email the application produces."""

    def __init__(self, mailer: ResendMailer, base_url: str):
        self.mailer = mailer
        self.base_url = base_url.rstrip("/")

    # Links

    def rsvp_link(self, invite: Invite) -> str:
        return f"{self.base_url}/rsvp/{invite_token(invite)}"

    def invitation_link(self, invite: Invite) -> str:
        """Smart link encoded in QR codes; redirects based on RSVP state."""
        return f"{self.base_url}/invitation/{invite_token(invite)}"

    def companion_link(self, token: str) -> str:
        return f"{self.base_url}/invitation/companion/{token}"

    # Delivery

    async def send(self, request: EmailRequest) -> DeliveryResult:
        """Render and deliver one email. Never raises."""
        try:
            html = render_email(
                TEMPLATES[request.type],
                base_url=self.base_url,
                **request.template_data,
            )
            message_id = await run_in_threadpool(
                self.mailer.send, request.to, request.subject, html
            )
        except Exception as e:
            logger.error(f"Failed to send {request.type.value} email to {request.to}: {e}")
            return DeliveryResult(request.type, request.to, success=False, error=str(e))
        return DeliveryResult(request.type, request.to, success=True, message_id=message_id)

    # Builders

    def _event_data(self, event: Event) -> dict:
        return {
            "event_title": event.title,
            "event_date": format_event_date(event.date),
            "event_time": event.time or "",
            "event_location": event.location,
            "event_description": event.description or "",
            "dress_code": event.dress_code or "",
            "hashtag": event.hashtag or "",
        }

    async def send_invitation(self, invite: Invite) -> DeliveryResult:
        """Email the guest their invitation with RSVP link and QR code."""
        event = invite.event
        data = self._event_data(event)
        data.update(
            guest_name=invite.guest_name,
            rsvp_link=self.rsvp_link(invite),
            qr_code=generate_qr_data_url(self.invitation_link(invite)),
        )
        return await self.send(
            EmailRequest(
                type=EmailType.INVITATION,
                to=invite.email,
                subject=f"You're Invited: {event.title}",
                template_data=data,
            )
        )

    async def send_reminder(
        self, invite: Invite, subject: str, message: str
    ) -> DeliveryResult:
        data = self._event_data(invite.event)
        data.update(
            guest_name=invite.guest_name,
            message=message,
            rsvp_link=self.rsvp_link(invite),
        )
        return await self.send(
            EmailRequest(type=EmailType.REMINDER, to=invite.email, subject=subject, template_data=data)
        )

    async def notify_rsvp(self, outcome) -> list[DeliveryResult]:
        """
        Send the post-RSVP emails for a committed RsvpOutcome.

        - Confirmation to the guest, if they have an email.
        - An invitation to each companion, sent concurrently.
        - A notification to the event owner.
        """
        invite = outcome.invite
        event = outcome.event
        event_data = self._event_data(event)
        attending = outcome.status == RsvpStatus.ATTENDING
        results: list[DeliveryResult] = []

        if invite.email:
            results.append(
                await self.send(
                    EmailRequest(
                        type=EmailType.RSVP_CONFIRMATION,
                        to=invite.email,
                        subject=f"RSVP Confirmation - {event.title}",
                        template_data={
                            **event_data,
                            "guest_name": invite.guest_name,
                            "attending": attending,
                            "guest_count": outcome.guest_count,
                            "companions": [link.email for link in outcome.companions],
                        },
                    )
                )
            )

        if attending and outcome.companions:
            companion_requests = [
                EmailRequest(
                    type=EmailType.COMPANION_INVITE,
                    to=link.email,
                    subject=f"{invite.guest_name} invited you to {event.title}",
                    template_data={
                        **event_data,
                        "primary_guest_name": invite.guest_name,
                        "companion_link": self.companion_link(link.token),
                        "message": outcome.message or "",
                    },
                )
                for link in outcome.companions
            ]
            results.extend(await asyncio.gather(*(self.send(r) for r in companion_requests)))

        owner = event.owner
        if owner is not None and owner.email:
            results.append(
                await self.send(
                    EmailRequest(
                        type=EmailType.RSVP_NOTIFICATION,
                        to=owner.email,
                        subject=f"New RSVP Response - {event.title}",
                        template_data={
                            "owner_name": owner.name,
                            "guest_name": invite.guest_name,
                            "event_title": event.title,
                            "attending": attending,
                            "guest_count": outcome.guest_count,
                            "companions": [link.email for link in outcome.companions],
                            "message": outcome.message or "",
                        },
                    )
                )
            )

        failed = [r for r in results if not r.success]
        if failed:
            logger.error(
                f"{len(failed)} of {len(results)} RSVP notifications failed for invite {invite.id}"
            )
        return results


def get_dispatcher(mailer: ResendMailer = Depends(get_mailer)) -> NotificationDispatcher:
    """Dependency for the notification dispatcher."""
    return NotificationDispatcher(mailer, settings.app_base_url)
