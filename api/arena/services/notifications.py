"""Notification delivery via SMTP."""

import logging
from email.message import EmailMessage

import aiosmtplib

from arena.core.config import settings
from arena.models.member import User
from arena.models.waitlist import WaitlistEntry
from arena.services.clock import local

logger = logging.getLogger(__name__)


async def send_email(to: str, subject: str, body: str) -> None:
    """Send a plain-text email via SMTP."""
    message = EmailMessage()
    message["From"] = settings.smtp_from
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)

    await aiosmtplib.send(message, hostname=settings.smtp_host, port=settings.smtp_port)


async def notify_slot_available(user: User, entry: WaitlistEntry) -> None:
    """Tell a waitlisted user that the slot they wanted has been released."""
    start = local(entry.start_time)
    end = local(entry.end_time)
    link = f"{settings.frontend_url}/book?court={entry.court_id}&start={entry.start_time.isoformat()}"
    body = (
        f"Hi {user.name},\n\n"
        f"Good news: the slot you were waiting for is free again.\n\n"
        f"Court #{entry.court_id}, {start:%A %d %B} from {start:%H:%M} to {end:%H:%M}.\n\n"
        f"Slots are first come, first served, so book soon:\n"
        f"{link}\n\n"
        f"{settings.app_name}"
    )
    await send_email(user.email, "A court slot you wanted is available", body)
    logger.info("Waitlist notification sent to user %s for entry %s", user.id, entry.id)
