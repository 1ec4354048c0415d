"""Background job scheduler for RSVP deadline reminders."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlmodel import Session

from wedvite.core.config import settings
from wedvite.core.database import engine
from wedvite.notifications.bulk import send_deadline_reminders
from wedvite.notifications.dispatcher import NotificationDispatcher
from wedvite.notifications.mailer import get_mailer, has_email_credentials

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


async def deadline_reminder_job():
    """Remind guests who have not answered and whose event is close."""
    if not has_email_credentials():
        logger.warning("Skipping deadline reminders: email delivery is not configured")
        return
    try:
        dispatcher = NotificationDispatcher(get_mailer(), settings.app_base_url)
        with Session(engine) as session:
            stats = await send_deadline_reminders(
                session, dispatcher, settings.reminder_lead_days
            )
            logger.info(
                f"Deadline reminder sweep completed: {stats['sent']} sent, {stats['failed']} failed"
            )
    except Exception as e:
        logger.error(f"Deadline reminder sweep failed: {e}")


def start_scheduler():
    """Start the background scheduler."""
    if not settings.reminder_sweep_enabled:
        logger.info("Deadline reminder sweep disabled")
        return
    scheduler.add_job(
        deadline_reminder_job,
        trigger=IntervalTrigger(hours=settings.reminder_sweep_hours),
        id="deadline_reminders",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started, sweeping for deadline reminders every "
        f"{settings.reminder_sweep_hours} hours"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down")
