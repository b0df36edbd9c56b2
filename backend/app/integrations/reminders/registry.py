from __future__ import annotations

import logging

from app.core.config import ReminderConfig, settings
from app.integrations.reminders.base import ReminderRequest, ReminderScheduler
from app.integrations.reminders.native import LogReminderScheduler
from app.integrations.reminders.sms import SmsReminderScheduler
from app.integrations.twilio_client import TwilioClient

logger = logging.getLogger(__name__)


def resolve_scheduler(config: ReminderConfig) -> ReminderScheduler:
    if config.provider == "sms":
        return SmsReminderScheduler(
            TwilioClient(
                account_sid=config.twilio_account_sid,
                auth_token=config.twilio_auth_token,
                phone_number=config.twilio_phone_number,
            )
        )
    return LogReminderScheduler()


def dispatch_reminder(scheduler: ReminderScheduler, request: ReminderRequest) -> None:
    """Hand a committed booking to the reminder collaborator.

    Runs after the response is sent; a failure here never undoes a booking.
    """
    try:
        scheduler.schedule(request)
    except Exception as e:
        logger.error(f"Reminder scheduling failed for reservation {request.reservation_id}: {e}")


def get_reminder_scheduler() -> ReminderScheduler:
    """FastAPI dependency returning the configured scheduler."""
    return resolve_scheduler(settings.reminders)
