from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import BookingConfig
from app.core.errors import InvalidProfessional, InvalidService, ValidationError
from app.models import Business, Professional, Service
from app.services.availability import (
    ExistingReservation,
    OperatingWindow,
    calculate_available_slots,
)
from app.services.db_service import DBService

logger = logging.getLogger(__name__)


def window_for(business: Business, professional: Professional, config: BookingConfig) -> OperatingWindow:
    """Business hours narrowed by the professional's own schedule, if any."""
    window = OperatingWindow.from_settings(
        business.opening_time,
        business.closing_time,
        business.working_days,
        config,
    )
    return window.narrowed_to(
        opening=professional.start_time,
        closing=professional.end_time,
        working_days=professional.working_days,
    )


async def load_reservations(
    db: DBService,
    professional_id: uuid.UUID,
    day: date,
) -> List[ExistingReservation]:
    appointments = await db.get_active_appointments(professional_id, day)
    return [
        ExistingReservation(
            start=appointment.start_time,
            duration_minutes=appointment.duration_minutes,
            status=appointment.status,
        )
        for appointment in appointments
    ]


class AvailabilityService:
    """Read path: loads fresh state and runs the slot calculator.

    Results are advisory. Nothing is cached, and a slot shown here can be
    taken before the client confirms; the booking handler re-checks.
    """

    def __init__(self, session: AsyncSession, config: BookingConfig):
        self.db = DBService(session)
        self.config = config

    async def get_available_slots(
        self,
        business_id: str,
        professional_id: str,
        service_id: str,
        day: date,
    ) -> List[str]:
        business = await self.db.get_business(business_id)
        if business is None:
            raise ValidationError("Business not found")

        professional = await self.db.get_professional(business_id, professional_id)
        if professional is None:
            raise InvalidProfessional()

        service = await self.db.get_service(business_id, service_id)
        if service is None or not service.active:
            raise InvalidService()

        if not professional.active:
            return []

        window = window_for(business, professional, self.config)
        reservations = await load_reservations(self.db, professional.id, day)

        slots = calculate_available_slots(
            window,
            service.duration_minutes,
            reservations,
            day=day,
            policy=self.config.conflict_policy,
            granularity=self.config.sample_granularity_minutes,
        )
        logger.debug(
            f"{len(slots)} slots for professional {professional.id} on {day.isoformat()} "
            f"({len(reservations)} existing reservations)"
        )
        return slots
