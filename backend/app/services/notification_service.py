"""
Notification Service.

Driver assignment emails for fleet tasks. Sending is fire-and-forget: it
runs after the task transaction has committed and never raises, so a mail
outage cannot fail or roll back a task.
"""

import asyncio
import html
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.reliability import email_circuit_breaker
from backend.app.models.fleet_task import FleetTask
from backend.app.models.task import Task
from backend.app.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class EmailNotification:
    to: str
    subject: str
    html: str


def _format_time(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


def _deliver(notification: EmailNotification) -> None:
    """Blocking SMTP delivery, run in a worker thread."""
    message = EmailMessage()
    message["From"] = f'"{settings.smtp_from_name}" <{settings.smtp_user}>'
    message["To"] = notification.to
    message["Subject"] = notification.subject
    message.set_content("This message requires an HTML capable mail client.")
    message.add_alternative(notification.html, subtype="html")

    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout) as smtp:
        if settings.smtp_use_tls:
            smtp.starttls()
        if settings.smtp_user and settings.smtp_password:
            smtp.login(settings.smtp_user, settings.smtp_password)
        smtp.send_message(message)


async def send_email_notification(notification: EmailNotification) -> bool:
    """
    Send an email without raising.

    Returns:
        True if the message was handed to the SMTP server
    """
    if not settings.email_notifications_enabled:
        return False
    if not settings.smtp_host:
        logger.info("SMTP not configured, skipping email to %s", notification.to)
        return False

    try:
        await email_circuit_breaker.call(asyncio.to_thread, _deliver, notification)
    except Exception:
        logger.exception("Email sending failed for %s", notification.to)
        return False

    logger.info("Email sent to %s", notification.to)
    return True


class NotificationService:

    @staticmethod
    async def build_driver_assignment_email(db: AsyncSession, fleet_task_id: int) -> Optional[EmailNotification]:
        """
        Render the "new trip assigned" email for a fleet task's driver.

        Returns None when the fleet task has no driver or the driver has
        no active user record to mail.
        """
        result = await db.execute(
            select(FleetTask, Task)
            .join(Task, Task.id == FleetTask.task_id)
            .where(FleetTask.id == fleet_task_id)
        )
        row = result.first()
        if not row:
            return None
        fleet_task, task = row

        if fleet_task.driver_id is None:
            return None

        user_result = await db.execute(
            select(User).where(User.id == fleet_task.driver_id, User.is_active == True)
        )
        driver = user_result.scalar_one_or_none()
        if not driver:
            logger.info("No active user for driver %s, skipping trip email", fleet_task.driver_id)
            return None

        task_name = html.escape(task.task_name or f"Task {task.id}")
        subject = f"New Trip Assigned - {task.task_name or f'Task {task.id}'}"
        body = f"""
      <h2>New Trip Assigned</h2>
      <p>Hello {html.escape(driver.name)},</p>
      <p>You have been assigned a new transport trip.</p>
      <ul>
        <li><strong>Task:</strong> {task_name}</li>
        <li><strong>Vehicle:</strong> {fleet_task.vehicle_id if fleet_task.vehicle_id is not None else '-'}</li>
        <li><strong>Pickup:</strong> {html.escape(fleet_task.pickup_location or '-')} at {_format_time(fleet_task.planned_pickup_time)}</li>
        <li><strong>Drop:</strong> {html.escape(fleet_task.drop_location or '-')} at {_format_time(fleet_task.planned_drop_time)}</li>
      </ul>
      <p><a href="{settings.driver_app_url}/tasks">View My Tasks</a></p>
      <p>Regards,<br/>{html.escape(settings.smtp_from_name)}</p>
    """
        return EmailNotification(to=driver.email, subject=subject, html=body)
