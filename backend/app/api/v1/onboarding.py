from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.errors import ValidationError
from app.models import Professional, Service
from app.models.business import WEEKDAYS
from app.services.db_service import DBService

router = APIRouter()


class ServiceItem(BaseModel):
    name: str = Field(..., min_length=1)
    duration_minutes: int = Field(..., gt=0)
    price: Optional[Decimal] = None


class ProfessionalItem(BaseModel):
    display_name: str = Field(..., min_length=1)
    working_days: Optional[list[str]] = None
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None


class BusinessOnboardingPayload(BaseModel):
    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1, max_length=100)
    business_type: str = "barbershop"
    phone: Optional[str] = None
    email: Optional[str] = None
    opening_time: Optional[dt.time] = None
    closing_time: Optional[dt.time] = None
    working_days: list[str] = Field(default_factory=lambda: list(WEEKDAYS[:6]))
    services: list[ServiceItem] = Field(default_factory=list)
    professionals: list[ProfessionalItem] = Field(default_factory=list)


class BusinessHoursPayload(BaseModel):
    opening_time: dt.time
    closing_time: dt.time
    working_days: Optional[list[str]] = None


def _check_hours(opening: Optional[dt.time], closing: Optional[dt.time], label: str) -> None:
    if (opening is None) != (closing is None):
        raise ValidationError(f"{label}: opening and closing time must be set together")
    if opening is not None and opening >= closing:
        raise ValidationError(f"{label}: opening time must be earlier than closing time")


def _normalize_days(days: Optional[list[str]], label: str) -> Optional[list[str]]:
    if days is None:
        return None
    normalized = [day.strip().lower() for day in days]
    unknown = [day for day in normalized if day not in WEEKDAYS]
    if unknown:
        raise ValidationError(f"{label}: unknown weekday(s) {', '.join(unknown)}")
    return [day for day in WEEKDAYS if day in normalized]


@router.post("/businesses")
async def create_business_onboarding(
    payload: BusinessOnboardingPayload,
    db: AsyncSession = Depends(get_db),
):
    """Create a new tenant with its hours, services and professionals."""
    _check_hours(payload.opening_time, payload.closing_time, "Business")
    working_days = _normalize_days(payload.working_days, "Business")
    professional_days = []
    for item in payload.professionals:
        _check_hours(item.start_time, item.end_time, item.display_name)
        professional_days.append(_normalize_days(item.working_days, item.display_name))

    db_service = DBService(db)
    if await db_service.get_business_by_slug(payload.slug):
        raise ValidationError(f"Slug '{payload.slug}' is already in use")

    try:
        business = await db_service.create_business(
            {
                "name": payload.name,
                "slug": payload.slug,
                "business_type": payload.business_type,
                "phone": payload.phone,
                "email": payload.email,
                "opening_time": payload.opening_time,
                "closing_time": payload.closing_time,
                "working_days": working_days,
            }
        )

        services = [
            Service(
                business_id=business.id,
                name=item.name,
                duration_minutes=item.duration_minutes,
                price=item.price,
            )
            for item in payload.services
        ]
        professionals = [
            Professional(
                business_id=business.id,
                display_name=item.display_name,
                working_days=days,
                start_time=item.start_time,
                end_time=item.end_time,
            )
            for item, days in zip(payload.professionals, professional_days)
        ]
        await db_service.add_all(services + professionals)
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ValidationError(f"Slug '{payload.slug}' is already in use") from exc

    return {
        "status": "ok",
        "business_id": str(business.id),
        "services": [
            {"id": str(s.id), "name": s.name, "duration_minutes": s.duration_minutes}
            for s in services
        ],
        "professionals": [
            {"id": str(p.id), "display_name": p.display_name}
            for p in professionals
        ],
    }


@router.put("/businesses/{business_id}/hours")
async def update_business_hours(
    business_id: str,
    payload: BusinessHoursPayload,
    db: AsyncSession = Depends(get_db),
):
    """Replace a tenant's operating window."""
    _check_hours(payload.opening_time, payload.closing_time, "Business")

    data = {
        "opening_time": payload.opening_time,
        "closing_time": payload.closing_time,
    }
    working_days = _normalize_days(payload.working_days, "Business")
    if working_days is not None:
        data["working_days"] = working_days

    db_service = DBService(db)
    business = await db_service.update_business(business_id, data)
    if not business:
        raise ValidationError("Business not found")
    await db.commit()

    return {
        "status": "ok",
        "business_id": str(business.id),
        "opening_time": business.opening_time.strftime("%H:%M"),
        "closing_time": business.closing_time.strftime("%H:%M"),
        "working_days": business.working_days,
    }
