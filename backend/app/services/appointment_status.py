from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AppointmentNotFound, InvalidStatusTransition
from app.models import Appointment, AppointmentStatus
from app.services.db_service import DBService

logger = logging.getLogger(__name__)

# Business-side moves. Cancelled and completed are terminal, so a freed
# slot can never be silently re-occupied by reviving an old row.
ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED},
    AppointmentStatus.CONFIRMED: {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED},
    AppointmentStatus.CANCELLED: set(),
    AppointmentStatus.COMPLETED: set(),
}


async def change_status(
    session: AsyncSession,
    business_id: str,
    appointment_id: str,
    new_status: str,
) -> Appointment:
    db = DBService(session)
    appointment = await db.get_appointment(business_id, appointment_id)
    if appointment is None:
        raise AppointmentNotFound()

    allowed = ALLOWED_TRANSITIONS.get(appointment.status, set())
    if new_status not in allowed:
        raise InvalidStatusTransition(
            f"Cannot change appointment from {appointment.status} to {new_status}"
        )

    previous = appointment.status
    appointment.status = new_status
    await session.commit()
    await session.refresh(appointment)
    logger.info(f"Appointment {appointment.id} moved from {previous} to {new_status}")
    return appointment
