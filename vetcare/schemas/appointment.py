from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime, date, time, timedelta, timezone
from vetcare.models.appointment import AppointmentStatus, AppointmentType, DEFAULT_DURATION_MINUTES

MAX_NOTES_LENGTH = 1000
CALENDAR_EVENT_KEY = "googleCalendarEventId"


def _normalize_notes(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    if len(normalized) > MAX_NOTES_LENGTH:
        raise ValueError(f"Notes must be {MAX_NOTES_LENGTH} characters or fewer.")
    return normalized


def _to_naive_utc(value: datetime) -> datetime:
    """Stored times are naive UTC; convert offset-carrying input to match."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment."""
    pet_uuid: str = Field(..., description="Public identifier of the pet")
    vet_id: int = Field(..., description="Veterinarian ID")
    clinic_id: int = Field(..., description="Clinic ID")
    appointment_date: datetime = Field(..., description="Start of the appointment")
    appointment_type: AppointmentType
    notes: str | None = Field(None, description="Optional notes")
    duration_minutes: int = Field(DEFAULT_DURATION_MINUTES, gt=0)

    @field_validator("appointment_date")
    @classmethod
    def validate_appointment_date(cls, value: datetime) -> datetime:
        return _to_naive_utc(value)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_notes(value)


class AppointmentReschedule(BaseModel):
    """Schema for moving an appointment to a new start time."""
    appointment_date: datetime
    notes: str | None = None

    @field_validator("appointment_date")
    @classmethod
    def validate_appointment_date(cls, value: datetime) -> datetime:
        return _to_naive_utc(value)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_notes(value)


class AppointmentStatusUpdate(BaseModel):
    """Schema for the administrative status overwrite."""
    status: AppointmentStatus


class AppointmentResponse(BaseModel):
    """Schema for appointment response. The internal id is never exposed."""
    appointment_uuid: str
    pet_id: int | None
    vet_id: int | None
    clinic_id: int | None
    appointment_date: datetime
    duration_minutes: int
    appointment_type: str
    notes: str | None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AppointmentReference(BaseModel):
    """Public identifier returned by the orchestrator operations."""
    appointment_uuid: str
    status: str | None = None


class AppointmentTypeOption(BaseModel):
    appointment_type: AppointmentType
    duration_minutes: int


class TimeSlot(BaseModel):
    """Candidate appointment start on a specific date."""
    start_time: datetime
    available: bool = True
    status: str | None = Field(None, description="e.g. 'booked'")
    appointment_uuid: str | None = Field(None, description="Conflicting appointment, if any")

    @property
    def label(self) -> str:
        return self.start_time.strftime("%I:%M %p").lstrip("0")


class AvailabilityWindowResponse(BaseModel):
    vet_id: int
    clinic_id: int
    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool

    model_config = ConfigDict(from_attributes=True)


class SlotQuery(BaseModel):
    """Query parameters of the daily slot table."""
    vet_id: int
    clinic_id: int
    date: date


class AppointmentMetadata(BaseModel):
    """Typed view of the JSON metadata bag on an appointment.

    Only the calendar event id is owned by the scheduling core. Any other keys
    already present in the stored bag are carried through untouched by
    ``merge_into``.
    """
    calendar_event_id: str | None = None

    @classmethod
    def from_bag(cls, bag: dict | None) -> "AppointmentMetadata":
        if not isinstance(bag, dict):
            return cls()
        event_id = bag.get(CALENDAR_EVENT_KEY)
        return cls(calendar_event_id=event_id if isinstance(event_id, str) else None)

    def merge_into(self, bag: dict | None) -> dict:
        merged = dict(bag) if isinstance(bag, dict) else {}
        merged[CALENDAR_EVENT_KEY] = self.calendar_event_id
        return merged


class AppointmentDetails(BaseModel):
    """Display snapshot of an appointment and its related records.

    Side effects work from this snapshot, so they never touch ORM instances
    after the appointment change has been committed.
    """
    appointment_id: int
    appointment_uuid: str
    appointment_date: datetime
    duration_minutes: int
    appointment_type: str
    status: str
    notes: str | None = None
    metadata: dict | None = None
    pet_id: int | None = None
    pet_name: str | None = None
    owner_id: int | None = None
    owner_email: str | None = None
    owner_name: str | None = None
    owner_calendar_sync: bool = False
    owner_calendar_token: str | None = None
    vet_name: str | None = None
    vet_email: str | None = None
    clinic_name: str | None = None
    clinic_location: str | None = None
    clinic_phone: str | None = None

    @classmethod
    def from_appointment(cls, appointment) -> "AppointmentDetails":
        """Build from an Appointment loaded with pet.owner, veterinarian.user and clinic."""
        pet = appointment.pet
        owner = pet.owner if pet is not None else None
        vet = appointment.veterinarian
        vet_user = vet.user if vet is not None else None
        clinic = appointment.clinic
        return cls(
            appointment_id=appointment.id,
            appointment_uuid=appointment.appointment_uuid,
            appointment_date=appointment.appointment_date,
            duration_minutes=appointment.duration_minutes or DEFAULT_DURATION_MINUTES,
            appointment_type=appointment.appointment_type,
            status=appointment.status,
            notes=appointment.notes,
            metadata=appointment.metadata_,
            pet_id=pet.id if pet is not None else None,
            pet_name=pet.name if pet is not None else None,
            owner_id=owner.id if owner is not None else None,
            owner_email=owner.email if owner is not None else None,
            owner_name=owner.full_name if owner is not None else None,
            owner_calendar_sync=bool(owner.google_calendar_sync) if owner is not None else False,
            owner_calendar_token=owner.google_calendar_token if owner is not None else None,
            vet_name=vet_user.full_name if vet_user is not None else None,
            vet_email=vet_user.email if vet_user is not None else None,
            clinic_name=clinic.name if clinic is not None else None,
            clinic_location=clinic.location if clinic is not None else None,
            clinic_phone=clinic.phone_number if clinic is not None else None,
        )

    @property
    def end_time(self) -> datetime:
        return self.appointment_date + timedelta(minutes=self.duration_minutes)

    @property
    def calendar_event_id(self) -> str | None:
        return AppointmentMetadata.from_bag(self.metadata).calendar_event_id

    @property
    def formatted_date(self) -> str:
        return self.appointment_date.strftime("%A, %B %d, %Y")

    @property
    def formatted_time(self) -> str:
        return self.appointment_date.strftime("%I:%M %p").lstrip("0")

    @property
    def type_label(self) -> str:
        return self.appointment_type.replace("_", " ").title()

    def email_data(self, recipient_name: str | None) -> dict:
        return {
            "recipient_name": recipient_name,
            "pet_name": self.pet_name,
            "vet_name": f"Dr. {self.vet_name}" if self.vet_name else None,
            "clinic_name": self.clinic_name,
            "clinic_location": self.clinic_location,
            "date": self.formatted_date,
            "time": self.formatted_time,
            "appointment_type": self.type_label,
            "notes": self.notes,
        }
