"""Services package - Business logic layer."""

from vetcare.services.user_service import UserService
from vetcare.services.appointment_service import AppointmentService
from vetcare.services.availability_service import AvailabilityService
from vetcare.services.directory_service import DirectoryService
from vetcare.services.notification_service import NotificationService
from vetcare.services.email_service import EmailService
from vetcare.services.calendar_service import CalendarSyncService, GoogleCalendarClient
from vetcare.services.booking_service import BookingService

__all__ = [
    "UserService",
    "AppointmentService",
    "AvailabilityService",
    "DirectoryService",
    "NotificationService",
    "EmailService",
    "CalendarSyncService",
    "GoogleCalendarClient",
    "BookingService",
]
