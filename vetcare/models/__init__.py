from vetcare.models.user import User
from vetcare.models.pet import Pet
from vetcare.models.clinic import Clinic, Veterinarian
from vetcare.models.availability import VetAvailability
from vetcare.models.appointment import (
    Appointment,
    AppointmentStatus,
    AppointmentType,
)
from vetcare.models.notification import Notification

__all__ = [
    "User",
    "Pet",
    "Clinic",
    "Veterinarian",
    "VetAvailability",
    "Appointment",
    "AppointmentStatus",
    "AppointmentType",
    "Notification",
]
