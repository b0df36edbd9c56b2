from __future__ import annotations

import datetime as dt
import re
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import BookingConfig, get_booking_config, parse_clock
from app.core.database import get_db
from app.core.errors import IdentityResolutionError, ValidationError
from app.integrations.reminders import (
    ReminderRequest,
    ReminderScheduler,
    dispatch_reminder,
    get_reminder_scheduler,
)
from app.services.booking_service import BookingRequest, BookingService
from app.services.db_service import DBService
from app.services.identity import ClientInfo, IdentityRace, resolve_client_identity


router = APIRouter(tags=["public-booking"])

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_TIME_RE = re.compile(r"[0-9]{2}:[0-9]{2}")


class _PublicPayload(BaseModel):
    """Public booking payloads use the camelCase names of the web client."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PublicBookingPayload(_PublicPayload):
    business_id: str = Field(..., alias="businessId", min_length=1)
    professional_id: str = Field(..., alias="professionalId", min_length=1)
    service_id: str = Field(..., alias="serviceId", min_length=1)
    date: dt.date
    time: dt.time
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v):
        if not isinstance(v, str) or not _DATE_RE.fullmatch(v):
            raise ValueError("expected a YYYY-MM-DD date")
        return dt.date.fromisoformat(v)

    @field_validator("time", mode="before")
    @classmethod
    def validate_time(cls, v):
        # Local wall-clock minutes only; offsets and seconds are refused
        if not isinstance(v, str) or not _TIME_RE.fullmatch(v):
            raise ValueError("expected an HH:MM (24h) time")
        return parse_clock(v)


class RegisterClientPayload(_PublicPayload):
    business_id: str = Field(..., alias="businessId", min_length=1)
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: EmailStr


@router.post("/public-booking")
async def create_public_booking(
    payload: PublicBookingPayload,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    config: BookingConfig = Depends(get_booking_config),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
):
    """Book a slot for a client; the single authoritative write path.

    On success the reservation is pending and the reminder collaborator
    receives it after the response is sent.
    """
    service = BookingService(db, config)
    result = await service.book(
        BookingRequest(
            business_id=payload.business_id,
            professional_id=payload.professional_id,
            service_id=payload.service_id,
            date=payload.date,
            time=payload.time,
            name=payload.name,
            email=payload.email,
            phone=payload.phone,
            notes=payload.notes,
        )
    )

    background_tasks.add_task(
        dispatch_reminder,
        scheduler,
        ReminderRequest(
            reservation_id=str(result.reservation_id),
            business_name=result.business_name,
            professional_name=result.professional_name,
            service_name=result.service_name,
            client_name=result.client_name,
            client_phone=result.client_phone,
            date=result.date,
            time=result.time,
        ),
    )

    return {"ok": True, "reservationId": str(result.reservation_id)}


@router.post("/public-booking/register-client")
async def register_client(
    payload: RegisterClientPayload,
    db: AsyncSession = Depends(get_db),
):
    """Find or create a client profile without booking anything."""
    db_service = DBService(db)
    business = await db_service.get_business(payload.business_id)
    if not business:
        raise ValidationError("Business not found")

    business_uuid = business.id
    info = ClientInfo(name=payload.name, email=payload.email, phone=payload.phone)
    try:
        client = await resolve_client_identity(db_service, business_uuid, info)
        await db.commit()
    except IdentityRace:
        # The concurrent insert is committed now; the lookup will find it
        await db.rollback()
        try:
            client = await resolve_client_identity(db_service, business_uuid, info)
            await db.commit()
        except IdentityRace as exc:
            await db.rollback()
            raise IdentityResolutionError() from exc

    return {
        "data": {
            "id": str(client.id),
            "name": client.name,
            "phone": client.phone,
            "email": client.email,
        }
    }
