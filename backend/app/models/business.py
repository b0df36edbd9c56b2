from sqlalchemy import Column, String, JSON, DateTime, Time, Uuid
from datetime import datetime
import uuid
from app.core.database import Base

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class Business(Base):
    __tablename__ = "businesses"
    
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False)
    business_type = Column(String, default="barbershop")  # barbershop, salon, clinic, spa, ...
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    
    # Operating window
    opening_time = Column(Time, nullable=True)
    closing_time = Column(Time, nullable=True)
    working_days = Column(JSON, default=lambda: list(WEEKDAYS[:6]))  # lowercase weekday names
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    def __repr__(self):
        return f"<Business(id={self.id}, name={self.name})>"
