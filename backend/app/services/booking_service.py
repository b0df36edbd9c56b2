"""Booking transaction handler.

Availability shown to clients is only advisory. This module is the
authoritative write path: it revalidates every reference, resolves the
client identity, re-checks the slot, and inserts the appointment inside a
single transaction. Nothing is committed unless the appointment row is.

Three layers keep two live appointments of one professional from
overlapping:

1. the professional row is read ``FOR UPDATE`` so concurrent bookings for
   the same professional queue up on PostgreSQL;
2. the slot is re-checked against fresh reservations right before insert;
3. the partial unique index ``uq_appointments_active_slot`` rejects a second
   live appointment at the same professional/date/start time.

Violations at layer 3, and lock or serialization failures, are reported as
``SlotConflict`` so the client re-fetches availability and picks again.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import BookingConfig
from app.core.errors import (
    BookingError,
    IdentityResolutionError,
    InvalidProfessional,
    InvalidService,
    SlotConflict,
    UnexpectedError,
    ValidationError,
)
from app.models.appointment import ACTIVE_SLOT_INDEX, AppointmentStatus
from app.services.availability import (
    ExistingReservation,
    conflicts_with,
    minutes_from_midnight,
    slot_fits_window,
)
from app.services.availability_service import load_reservations, window_for
from app.services.db_service import DBService, as_uuid
from app.services.identity import ClientInfo, IdentityRace, resolve_client_identity

logger = logging.getLogger(__name__)

# One retry covers a client identity created concurrently by another booking.
MAX_ATTEMPTS = 2

_LOCK_SQLSTATES = {"40001", "40P01", "55P03"}
_LOCK_MESSAGES = (
    "deadlock detected",
    "could not serialize",
    "could not obtain lock",
    "database is locked",
)


@dataclass
class BookingRequest:
    business_id: str
    professional_id: str
    service_id: str
    date: date
    time: time
    name: str
    email: str
    phone: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class BookingResult:
    """What the caller needs to confirm the booking and hand it downstream."""

    reservation_id: uuid.UUID
    client_id: uuid.UUID
    business_name: str
    professional_name: str
    service_name: str
    client_name: str
    client_phone: Optional[str]
    date: date
    time: time


def _is_slot_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", "") if diag is not None else ""
    if constraint_name:
        return constraint_name == ACTIVE_SLOT_INDEX
    message = str(orig or exc)
    # PostgreSQL names the index, SQLite lists the indexed columns
    return ACTIVE_SLOT_INDEX in message or "appointments.professional_id" in message


def _is_lock_contention(exc: OperationalError) -> bool:
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in _LOCK_SQLSTATES:
        return True
    message = str(exc).lower()
    return any(fragment in message for fragment in _LOCK_MESSAGES)


class BookingService:
    def __init__(self, session: AsyncSession, config: BookingConfig):
        self.session = session
        self.db = DBService(session)
        self.config = config

    async def book(self, request: BookingRequest) -> BookingResult:
        """Validate and commit one booking, or raise a ``BookingError``."""
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                result = await self._attempt(request)
                await self.session.commit()
            except IdentityRace as exc:
                await self.session.rollback()
                if attempt == MAX_ATTEMPTS:
                    logger.error(f"Client identity kept colliding: {exc}")
                    raise IdentityResolutionError() from exc
                logger.info("Client identity created concurrently, retrying booking")
                continue
            except BookingError:
                await self.session.rollback()
                raise
            except IntegrityError as exc:
                await self.session.rollback()
                if _is_slot_violation(exc):
                    logger.info(
                        f"Slot {request.date} {request.time} for professional "
                        f"{request.professional_id} taken at commit"
                    )
                    raise SlotConflict() from exc
                logger.exception("Booking insert violated a constraint")
                raise UnexpectedError() from exc
            except OperationalError as exc:
                await self.session.rollback()
                if _is_lock_contention(exc):
                    logger.info(f"Lock contention while booking professional {request.professional_id}")
                    raise SlotConflict() from exc
                logger.exception("Database failure while booking")
                raise UnexpectedError() from exc
            except SQLAlchemyError as exc:
                await self.session.rollback()
                logger.exception("Database failure while booking")
                raise UnexpectedError() from exc

            logger.info(
                f"Appointment {result.reservation_id} booked for professional "
                f"{request.professional_id} on {result.date.isoformat()} at {result.time.strftime('%H:%M')}"
            )
            return result

        raise IdentityResolutionError()

    def _validate_input(self, request: BookingRequest) -> None:
        if not (request.name or "").strip():
            raise ValidationError("Name is required")
        if not (request.email or "").strip():
            raise ValidationError("Email is required")
        if request.notes and len(request.notes) > self.config.notes_max_length:
            raise ValidationError(
                f"Notes must be at most {self.config.notes_max_length} characters"
            )
        if as_uuid(request.business_id) is None:
            raise ValidationError("Invalid business id")

    async def _attempt(self, request: BookingRequest) -> BookingResult:
        self._validate_input(request)
        start = request.time.replace(second=0, microsecond=0)

        business = await self.db.get_business(request.business_id)
        if business is None:
            raise ValidationError("Business not found")

        professional = await self.db.get_professional(
            request.business_id, request.professional_id, for_update=True
        )
        if professional is None or not professional.active:
            raise InvalidProfessional()

        service = await self.db.get_service(request.business_id, request.service_id)
        if service is None or not service.active:
            raise InvalidService()

        start_minute = minutes_from_midnight(start)
        duration = service.duration_minutes

        if self.config.enforce_operating_hours:
            window = window_for(business, professional, self.config)
            if not window.is_open_on(request.date) or not slot_fits_window(
                window, start_minute, duration
            ):
                raise ValidationError("Requested time is outside operating hours")

        client = await resolve_client_identity(
            self.db,
            business.id,
            ClientInfo(name=request.name, email=request.email, phone=request.phone),
        )

        reservations = await load_reservations(self.db, professional.id, request.date)
        if self._slot_taken(start_minute, duration, reservations):
            raise SlotConflict()

        appointment = await self.db.create_appointment(
            {
                "business_id": business.id,
                "professional_id": professional.id,
                "service_id": service.id,
                "client_id": client.id,
                "date": request.date,
                "start_time": start,
                "duration_minutes": duration,
                "status": AppointmentStatus.PENDING,
                "notes": request.notes or None,
            }
        )

        return BookingResult(
            reservation_id=appointment.id,
            client_id=client.id,
            business_name=business.name,
            professional_name=professional.display_name,
            service_name=service.name,
            client_name=client.name,
            client_phone=client.phone,
            date=request.date,
            time=start,
        )

    def _slot_taken(
        self,
        start_minute: int,
        duration: int,
        reservations: list[ExistingReservation],
    ) -> bool:
        if self.config.conflict_policy == "sampled":
            # Legacy parity: only an identical start time blocks the write
            return any(r.start_minute == start_minute for r in reservations if r.is_active)
        return conflicts_with(start_minute, duration, reservations)
