from sqlalchemy import Column, String, JSON, DateTime, Time, Boolean, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from app.core.database import Base


class Professional(Base):
    __tablename__ = "professionals"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id"), nullable=False, index=True)

    display_name = Column(String, nullable=False)
    active = Column(Boolean, nullable=False, default=True)

    # Optional personal schedule; narrows the business window when set
    working_days = Column(JSON, nullable=True)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    business = relationship("Business", backref="professionals")

    def __repr__(self):
        return f"<Professional(id={self.id}, name={self.display_name}, active={self.active})>"
