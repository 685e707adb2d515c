from vetcare.schemas.user import CalendarSettingsUpdate, CalendarSettingsResponse
from vetcare.schemas.appointment import (
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentStatusUpdate,
    AppointmentResponse,
    AppointmentReference,
    AppointmentTypeOption,
    AppointmentMetadata,
    AppointmentDetails,
    AvailabilityWindowResponse,
    TimeSlot,
)
from vetcare.schemas.result import ActionResult, ErrorKind

__all__ = [
    "CalendarSettingsUpdate",
    "CalendarSettingsResponse",
    "AppointmentCreate",
    "AppointmentReschedule",
    "AppointmentStatusUpdate",
    "AppointmentResponse",
    "AppointmentReference",
    "AppointmentTypeOption",
    "AppointmentMetadata",
    "AppointmentDetails",
    "AvailabilityWindowResponse",
    "TimeSlot",
    "ActionResult",
    "ErrorKind",
]
