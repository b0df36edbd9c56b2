from __future__ import annotations

import logging

from app.integrations.reminders.base import ReminderRequest

logger = logging.getLogger(__name__)


class LogReminderScheduler:
    """Default scheduler: records the reminder without sending anything."""

    name = "log"

    def schedule(self, request: ReminderRequest) -> None:
        logger.info(
            f"Reminder queued for reservation {request.reservation_id}: "
            f"{request.client_name} with {request.professional_name} "
            f"on {request.date.isoformat()} at {request.time.strftime('%H:%M')}"
        )
