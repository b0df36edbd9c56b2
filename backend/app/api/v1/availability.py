from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import BookingConfig, get_booking_config
from app.core.database import get_db
from app.services.availability_service import AvailabilityService

router = APIRouter()


@router.get("/{business_id}/availability")
async def get_availability(
    business_id: str,
    professional_id: str = Query(..., min_length=1),
    service_id: str = Query(..., min_length=1),
    date: dt.date = Query(...),
    db: AsyncSession = Depends(get_db),
    config: BookingConfig = Depends(get_booking_config),
):
    """Bookable start times for a professional, service and date.

    Advisory only: the booking endpoint re-checks the slot before writing.
    """
    service = AvailabilityService(db, config)
    slots = await service.get_available_slots(business_id, professional_id, service_id, date)

    return {
        "business_id": business_id,
        "professional_id": professional_id,
        "service_id": service_id,
        "date": date.isoformat(),
        "slots": slots,
    }
