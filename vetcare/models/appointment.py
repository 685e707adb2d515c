import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import JSON, CheckConstraint, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from vetcare.database import Base


DEFAULT_DURATION_MINUTES = 30


class AppointmentStatus(str, Enum):
    """Appointment status enum."""
    REQUESTED = "requested"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class AppointmentType(str, Enum):
    """Appointment category enum."""
    WELLNESS_EXAM = "wellness_exam"
    VACCINATION = "vaccination"
    SICK_VISIT = "sick_visit"
    FOLLOW_UP = "follow_up"
    SURGERY = "surgery"
    DENTAL_CLEANING = "dental_cleaning"
    EMERGENCY = "emergency"
    LABORATORY_WORK = "laboratory_work"
    IMAGING = "imaging"
    GROOMING = "grooming"
    PHYSICAL_THERAPY = "physical_therapy"
    BEHAVIORAL_CONSULTATION = "behavioral_consultation"
    NUTRITION_CONSULTATION = "nutrition_consultation"
    EUTHANASIA = "euthanasia"
    NEW_PET_CONSULTATION = "new_pet_consultation"
    SENIOR_PET_CARE = "senior_pet_care"
    PARASITE_CONTROL = "parasite_control"
    MICROCHIPPING = "microchipping"
    MEDICATION_REFILL = "medication_refill"
    SPAY_NEUTER = "spay_neuter"
    ALLERGY_TESTING = "allergy_testing"
    ORTHOPEDIC_EVALUATION = "orthopedic_evaluation"
    OPHTHALMOLOGY = "ophthalmology"
    DERMATOLOGY = "dermatology"
    CARDIOLOGY = "cardiology"
    NEUROLOGY = "neurology"
    ONCOLOGY = "oncology"
    HOSPICE_CARE = "hospice_care"


# Typical visit length per type, offered to clients as a suggestion
APPOINTMENT_DURATIONS = {
    AppointmentType.VACCINATION: 15,
    AppointmentType.FOLLOW_UP: 20,
    AppointmentType.SURGERY: 120,
    AppointmentType.DENTAL_CLEANING: 60,
    AppointmentType.EMERGENCY: 45,
    AppointmentType.GROOMING: 60,
    AppointmentType.SPAY_NEUTER: 60,
}


def suggested_duration(appointment_type: AppointmentType) -> int:
    return APPOINTMENT_DURATIONS.get(appointment_type, DEFAULT_DURATION_MINUTES)


class Appointment(Base):
    """Appointment model."""

    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    appointment_uuid: Mapped[str] = mapped_column(
        String(36),
        unique=True,
        nullable=False,
        index=True,
        default=lambda: str(uuid.uuid4()),
    )
    pet_id: Mapped[int | None] = mapped_column(
        ForeignKey("pets.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    vet_id: Mapped[int | None] = mapped_column(
        ForeignKey("veterinarians.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    clinic_id: Mapped[int | None] = mapped_column(
        ForeignKey("clinics.id", ondelete="SET NULL"),
        nullable=True,
    )
    appointment_date: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        index=True,
    )
    duration_minutes: Mapped[int] = mapped_column(
        Integer,
        default=DEFAULT_DURATION_MINUTES,
        nullable=False,
    )
    appointment_type: Mapped[str] = mapped_column(
        String(50),
        default=AppointmentType.WELLNESS_EXAM.value,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=AppointmentStatus.REQUESTED.value,
    )
    # "metadata" is reserved on declarative classes
    metadata_: Mapped[dict | None] = mapped_column(
        "metadata",
        JSON,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    pet: Mapped["Pet | None"] = relationship("Pet", back_populates="appointments")
    veterinarian: Mapped["Veterinarian | None"] = relationship("Veterinarian")
    clinic: Mapped["Clinic | None"] = relationship("Clinic")

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="positive_duration"),
    )

    def __repr__(self) -> str:
        return f"<Appointment {self.appointment_uuid} {self.appointment_date} {self.status}>"
