from __future__ import annotations

import logging

from app.integrations.reminders.base import ReminderRequest
from app.integrations.twilio_client import TwilioClient

logger = logging.getLogger(__name__)


def confirmation_message(request: ReminderRequest) -> str:
    human_date = request.date.strftime("%A %d %b %Y")
    return (
        f"Hi {request.client_name}, your {request.service_name} with "
        f"{request.professional_name} at {request.business_name} is booked for "
        f"{human_date} at {request.time.strftime('%H:%M')}. "
        f"Booking ID: {request.reservation_id}."
    )


class SmsReminderScheduler:
    """Sends a booking confirmation SMS through Twilio."""

    name = "sms"

    def __init__(self, client: TwilioClient):
        self.client = client

    def schedule(self, request: ReminderRequest) -> None:
        if not request.client_phone:
            logger.info(f"No phone for reservation {request.reservation_id}; skipping SMS")
            return
        if not self.client.configured:
            logger.warning("Twilio is not configured; skipping confirmation SMS")
            return
        self.client.send_sms(to=request.client_phone, message=confirmation_message(request))
        logger.info(f"Confirmation SMS sent for reservation {request.reservation_id}")
