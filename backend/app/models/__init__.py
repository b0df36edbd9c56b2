from app.models.business import Business
from app.models.professional import Professional
from app.models.service import Service
from app.models.client import ClientProfile
from app.models.appointment import Appointment, AppointmentStatus

__all__ = [
    "Business",
    "Professional",
    "Service",
    "ClientProfile",
    "Appointment",
    "AppointmentStatus",
]
