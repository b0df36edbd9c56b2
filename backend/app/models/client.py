from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from app.core.database import Base


class ClientProfile(Base):
    """A person in a business's client pool, keyed by phone then email."""

    __tablename__ = "client_profiles"
    __table_args__ = (
        UniqueConstraint("business_id", "phone", name="uq_client_profiles_business_phone"),
        UniqueConstraint("business_id", "email", name="uq_client_profiles_business_email"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id"), nullable=False)

    name = Column(String, nullable=False)
    email = Column(String, nullable=False)  # stored lower-cased
    phone = Column(String, nullable=True)  # stored normalized, e.g. +5511999990000

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    business = relationship("Business", backref="clients")

    def __repr__(self):
        return f"<ClientProfile(id={self.id}, name={self.name}, phone={self.phone})>"
