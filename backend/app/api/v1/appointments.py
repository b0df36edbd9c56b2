from __future__ import annotations

import datetime as dt
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models import Appointment
from app.services.appointment_status import change_status
from app.services.db_service import DBService


router = APIRouter(tags=["appointments"])


class StatusUpdatePayload(BaseModel):
    status: Literal["pending", "confirmed", "cancelled", "completed"]


def _serialize(appointment: Appointment) -> dict:
    return {
        "id": str(appointment.id),
        "professional_id": str(appointment.professional_id),
        "service_id": str(appointment.service_id),
        "client_id": str(appointment.client_id),
        "date": appointment.date.isoformat(),
        "time": appointment.start_time.strftime("%H:%M"),
        "duration_minutes": appointment.duration_minutes,
        "status": appointment.status,
        "notes": appointment.notes,
        "created_at": appointment.created_at.isoformat() if appointment.created_at else None,
    }


@router.get("/{business_id}/appointments")
async def list_appointments(
    business_id: str,
    date: Optional[dt.date] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """Appointments for a business, optionally for a single date"""
    db_service = DBService(db)
    appointments = await db_service.get_business_appointments(business_id, date, limit)

    return {
        "business_id": business_id,
        "total": len(appointments),
        "appointments": [_serialize(appointment) for appointment in appointments],
    }


@router.patch("/{business_id}/appointments/{appointment_id}/status")
async def update_appointment_status(
    business_id: str,
    appointment_id: str,
    payload: StatusUpdatePayload,
    db: AsyncSession = Depends(get_db),
):
    """Confirm, complete or cancel an appointment"""
    appointment = await change_status(db, business_id, appointment_id, payload.status)
    return {"ok": True, "appointment": _serialize(appointment)}
