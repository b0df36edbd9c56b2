from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from app.models import Business, Professional, Service, ClientProfile, Appointment, AppointmentStatus
from typing import Optional, List, Union
from datetime import date
import uuid


def as_uuid(value: Union[str, uuid.UUID, None]) -> Optional[uuid.UUID]:
    """Parse an id coming from a request; None when it is not a UUID."""
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class DBService:
    """
    Service for database operations

    Writes only add and flush; the caller owns the transaction and decides
    when to commit, so a booking persists all of its rows or none.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # ==================== BUSINESSES ====================

    async def get_business(self, business_id: str) -> Optional[Business]:
        """Get business by ID"""
        b_uuid = as_uuid(business_id)
        if b_uuid is None:
            return None

        result = await self.session.execute(
            select(Business).where(Business.id == b_uuid)
        )
        return result.scalar_one_or_none()

    async def get_business_by_slug(self, slug: str) -> Optional[Business]:
        """Get business by its public booking slug"""
        result = await self.session.execute(
            select(Business).where(Business.slug == slug)
        )
        return result.scalar_one_or_none()

    async def create_business(self, data: dict) -> Business:
        """Create new business"""
        business = Business(**data)
        self.session.add(business)
        await self.session.flush()
        return business

    async def update_business(self, business_id: str, data: dict) -> Optional[Business]:
        """Update business fields by ID."""
        business = await self.get_business(business_id)
        if business:
            for key, value in data.items():
                setattr(business, key, value)
            await self.session.flush()
        return business

    # ==================== PROFESSIONALS & SERVICES ====================

    async def get_professional(
        self,
        business_id: str,
        professional_id: str,
        for_update: bool = False,
    ) -> Optional[Professional]:
        """Get a professional scoped to its business.

        With ``for_update`` the row stays locked until the transaction ends,
        which serializes concurrent bookings for the same professional.
        """
        b_uuid = as_uuid(business_id)
        p_uuid = as_uuid(professional_id)
        if b_uuid is None or p_uuid is None:
            return None

        if for_update and self.session.get_bind().dialect.name == "sqlite":
            # SQLite has no row locks; a no-op write takes the database write lock
            await self.session.execute(
                update(Professional)
                .where(Professional.id == p_uuid)
                .values(updated_at=Professional.updated_at)
                .execution_options(synchronize_session=False)
            )

        query = select(Professional).where(
            Professional.id == p_uuid,
            Professional.business_id == b_uuid,
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_service(self, business_id: str, service_id: str) -> Optional[Service]:
        """Get a service scoped to its business"""
        b_uuid = as_uuid(business_id)
        s_uuid = as_uuid(service_id)
        if b_uuid is None or s_uuid is None:
            return None

        result = await self.session.execute(
            select(Service).where(
                Service.id == s_uuid,
                Service.business_id == b_uuid,
            )
        )
        return result.scalar_one_or_none()

    async def add_all(self, rows: list) -> None:
        self.session.add_all(rows)
        await self.session.flush()

    # ==================== CLIENTS ====================

    async def get_client_by_phone(self, business_id: uuid.UUID, phone: str) -> Optional[ClientProfile]:
        """Get a client in the business pool by normalized phone"""
        result = await self.session.execute(
            select(ClientProfile).where(
                ClientProfile.business_id == business_id,
                ClientProfile.phone == phone,
            )
        )
        return result.scalars().first()

    async def get_client_by_email(self, business_id: uuid.UUID, email: str) -> Optional[ClientProfile]:
        """Get a client in the business pool by lower-cased email"""
        result = await self.session.execute(
            select(ClientProfile).where(
                ClientProfile.business_id == business_id,
                ClientProfile.email == email,
            )
        )
        return result.scalars().first()

    async def create_client(self, data: dict) -> ClientProfile:
        """Create new client profile"""
        client = ClientProfile(**data)
        self.session.add(client)
        await self.session.flush()
        return client

    # ==================== APPOINTMENTS ====================

    async def get_active_appointments(
        self,
        professional_id: uuid.UUID,
        day: date,
    ) -> List[Appointment]:
        """Pending and confirmed appointments of a professional on a date"""
        result = await self.session.execute(
            select(Appointment)
            .where(
                Appointment.professional_id == professional_id,
                Appointment.date == day,
                Appointment.status.in_(AppointmentStatus.ACTIVE),
            )
            .order_by(Appointment.start_time)
        )
        return list(result.scalars().all())

    async def create_appointment(self, data: dict) -> Appointment:
        """Create new appointment"""
        appointment = Appointment(**data)
        self.session.add(appointment)
        await self.session.flush()
        return appointment

    async def get_appointment(
        self,
        business_id: str,
        appointment_id: str,
    ) -> Optional[Appointment]:
        """Get appointment by ID within a business"""
        b_uuid = as_uuid(business_id)
        a_uuid = as_uuid(appointment_id)
        if b_uuid is None or a_uuid is None:
            return None

        result = await self.session.execute(
            select(Appointment).where(
                Appointment.id == a_uuid,
                Appointment.business_id == b_uuid,
            )
        )
        return result.scalar_one_or_none()

    async def get_business_appointments(
        self,
        business_id: str,
        day: Optional[date] = None,
        limit: int = 50
    ) -> List[Appointment]:
        """Get appointments for business, optionally for one date"""
        b_uuid = as_uuid(business_id)
        if b_uuid is None:
            return []

        query = select(Appointment).where(Appointment.business_id == b_uuid)
        if day is not None:
            query = query.where(Appointment.date == day)
        query = query.order_by(Appointment.date, Appointment.start_time).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())
