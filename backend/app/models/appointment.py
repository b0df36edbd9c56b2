from sqlalchemy import Column, String, Integer, Date, DateTime, Time, ForeignKey, Text, Index, Uuid, text
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from app.core.database import Base


class AppointmentStatus:
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    # Statuses that occupy the professional's time
    ACTIVE = (PENDING, CONFIRMED)


ACTIVE_SLOT_INDEX = "uq_appointments_active_slot"
_ACTIVE_WHERE = text("status IN ('pending', 'confirmed')")


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # At most one live reservation per professional/date/start time
        Index(
            ACTIVE_SLOT_INDEX,
            "professional_id",
            "date",
            "start_time",
            unique=True,
            postgresql_where=_ACTIVE_WHERE,
            sqlite_where=_ACTIVE_WHERE,
        ),
        Index("idx_appointments_professional_date", "professional_id", "date"),
    )
    
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id"), nullable=False, index=True)
    professional_id = Column(Uuid(as_uuid=True), ForeignKey("professionals.id"), nullable=False)
    service_id = Column(Uuid(as_uuid=True), ForeignKey("services.id"), nullable=False)
    client_id = Column(Uuid(as_uuid=True), ForeignKey("client_profiles.id"), nullable=False)
    
    # Slot
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)  # service duration at booking time
    
    # Status
    status = Column(String, nullable=False, default=AppointmentStatus.PENDING)
    
    # Notes
    notes = Column(Text, nullable=True)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    business = relationship("Business", backref="appointments")
    professional = relationship("Professional", backref="appointments")
    service = relationship("Service")
    client = relationship("ClientProfile", backref="appointments")
    
    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, professional={self.professional_id}, "
            f"date={self.date}, start={self.start_time}, status={self.status})>"
        )
