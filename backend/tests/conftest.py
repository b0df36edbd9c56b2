"""Shared test fixtures and helpers."""

from datetime import date, time
from types import SimpleNamespace
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.config import BookingConfig
from app.core.database import Base
from app.models import Appointment, AppointmentStatus, Business, ClientProfile, Professional, Service

# 2026-10-19 is a Monday
MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)
SUNDAY = date(2026, 10, 25)


def make_config(**overrides) -> BookingConfig:
    """BookingConfig with fixed values so tests never depend on the environment."""
    values = {
        "notes_max_length": 500,
        "default_opening_time": "09:00",
        "default_closing_time": "19:00",
        "conflict_policy": "exact",
        "sample_granularity_minutes": 30,
        "enforce_operating_hours": True,
    }
    values.update(overrides)
    return BookingConfig(**values)


class RecordingScheduler:
    name = "recording"

    def __init__(self):
        self.requests = []

    def schedule(self, request) -> None:
        self.requests.append(request)


@pytest.fixture
def booking_config() -> BookingConfig:
    return make_config()


@pytest.fixture
async def engine(tmp_path):
    db_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'agenda_test.db'}",
        poolclass=NullPool,
    )
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as db:
        yield db


@pytest.fixture
async def seed(session_factory):
    """Two businesses; the first open 09:00-15:00 Monday to Saturday."""
    async with session_factory() as db:
        business = Business(
            name="Barbearia Centro",
            slug="barbearia-centro",
            opening_time=time(9, 0),
            closing_time=time(15, 0),
            working_days=["monday", "tuesday", "wednesday", "thursday", "friday", "saturday"],
        )
        other_business = Business(name="Salao Norte", slug="salao-norte")
        db.add_all([business, other_business])
        await db.flush()

        ana = Professional(business_id=business.id, display_name="Ana")
        bruno = Professional(business_id=business.id, display_name="Bruno", active=False)
        carla = Professional(
            business_id=business.id,
            display_name="Carla",
            working_days=["tuesday"],
            start_time=time(10, 0),
        )
        haircut = Service(business_id=business.id, name="Corte", duration_minutes=60)
        beard = Service(business_id=business.id, name="Barba", duration_minutes=30)
        retired = Service(business_id=business.id, name="Relaxamento", duration_minutes=30, active=False)

        outsider = Professional(business_id=other_business.id, display_name="Diego")
        outsider_service = Service(business_id=other_business.id, name="Escova", duration_minutes=45)

        db.add_all([ana, bruno, carla, haircut, beard, retired, outsider, outsider_service])
        await db.commit()

        return SimpleNamespace(
            business_id=str(business.id),
            business_uuid=business.id,
            other_business_id=str(other_business.id),
            professional_id=str(ana.id),
            professional_uuid=ana.id,
            inactive_professional_id=str(bruno.id),
            tuesday_professional_id=str(carla.id),
            service_id=str(haircut.id),
            service_uuid=haircut.id,
            short_service_id=str(beard.id),
            short_service_uuid=beard.id,
            inactive_service_id=str(retired.id),
            foreign_professional_id=str(outsider.id),
            foreign_service_id=str(outsider_service.id),
        )


async def add_client(db, business_id, name="Maria", email="maria@example.com", phone=None) -> ClientProfile:
    client = ClientProfile(business_id=business_id, name=name, email=email, phone=phone)
    db.add(client)
    await db.flush()
    return client


async def add_appointment(
    db,
    seed,
    day: date,
    start: time,
    duration: int,
    status: str = AppointmentStatus.CONFIRMED,
    service_id=None,
    client: Optional[ClientProfile] = None,
) -> Appointment:
    """Insert an appointment directly, bypassing the booking handler."""
    if client is None:
        client = await add_client(db, seed.business_uuid, email=f"seed-{start:%H%M}-{status}@example.com")
    appointment = Appointment(
        business_id=seed.business_uuid,
        professional_id=seed.professional_uuid,
        service_id=service_id or seed.service_uuid,
        client_id=client.id,
        date=day,
        start_time=start,
        duration_minutes=duration,
        status=status,
    )
    db.add(appointment)
    await db.commit()
    return appointment


@pytest.fixture
def scheduler():
    return RecordingScheduler()


@pytest.fixture
async def client(session_factory, booking_config, scheduler, seed):
    """HTTP client against the app with storage, config and reminders overridden."""
    from app.core.config import get_booking_config
    from app.core.database import get_db
    from app.integrations.reminders import get_reminder_scheduler
    from app.main import app

    async def override_get_db():
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_booking_config] = lambda: booking_config
    app.dependency_overrides[get_reminder_scheduler] = lambda: scheduler

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http

    app.dependency_overrides.clear()
