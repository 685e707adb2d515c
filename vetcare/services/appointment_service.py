"""Appointment service - Persistence queries for appointments."""

from datetime import date, datetime, time, timedelta

from sqlalchemy import select, update, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from vetcare.models.appointment import Appointment, AppointmentStatus, DEFAULT_DURATION_MINUTES
from vetcare.models.clinic import Veterinarian
from vetcare.models.pet import Pet
from vetcare.scheduling.conflicts import booking_window

# Longest stretch an appointment from the previous day may still run into the next
OVERNIGHT_LOOKBACK = timedelta(days=1)


def _with_relations(query):
    return query.options(
        selectinload(Appointment.pet).selectinload(Pet.owner),
        selectinload(Appointment.veterinarian).selectinload(Veterinarian.user),
        selectinload(Appointment.clinic),
    )


class AppointmentService:
    """Service class for appointment storage."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_appointment(
        self,
        pet_id: int,
        vet_id: int,
        clinic_id: int,
        appointment_date: datetime,
        appointment_type: str,
        notes: str | None = None,
        duration_minutes: int | None = None,
    ) -> Appointment:
        """Insert a new appointment in the requested state."""
        appointment = Appointment(
            pet_id=pet_id,
            vet_id=vet_id,
            clinic_id=clinic_id,
            appointment_date=appointment_date,
            appointment_type=appointment_type,
            notes=notes,
            duration_minutes=duration_minutes or DEFAULT_DURATION_MINUTES,
            status=AppointmentStatus.REQUESTED.value,
            metadata_={},
        )
        self.db.add(appointment)
        await self.db.flush()
        await self.db.refresh(appointment)
        return appointment

    async def get_appointment_by_uuid(self, appointment_uuid: str) -> Appointment | None:
        """Get an appointment by public id with pet, owner, vet and clinic loaded."""
        query = _with_relations(
            select(Appointment).where(Appointment.appointment_uuid == appointment_uuid)
        ).execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def find_in_booking_window(
        self,
        candidate_start: datetime,
        vet_id: int | None = None,
        owner_id: int | None = None,
    ) -> list[Appointment]:
        """Non-cancelled appointments starting strictly inside the booking window.

        Filter by veterinarian, by owner (across all their pets), or both.
        """
        window_start, window_end = booking_window(candidate_start)
        query = select(Appointment).where(
            and_(
                Appointment.appointment_date > window_start,
                Appointment.appointment_date < window_end,
                Appointment.status != AppointmentStatus.CANCELLED.value,
            )
        )

        if vet_id is not None:
            query = query.where(Appointment.vet_id == vet_id)
        if owner_id is not None:
            query = query.join(Pet, Appointment.pet_id == Pet.id).where(Pet.user_id == owner_id)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def find_for_vet_on_day(self, vet_id: int, on_date: date) -> list[Appointment]:
        """All of a vet's appointments that occupy any part of the given day.

        Includes appointments from the day before that run past midnight.
        """
        day_start = datetime.combine(on_date, time.min)
        day_end = day_start + timedelta(days=1)
        result = await self.db.execute(
            select(Appointment)
            .where(
                and_(
                    Appointment.vet_id == vet_id,
                    Appointment.appointment_date >= day_start - OVERNIGHT_LOOKBACK,
                    Appointment.appointment_date < day_end,
                )
            )
            .order_by(Appointment.appointment_date)
        )
        return [
            appointment
            for appointment in result.scalars().all()
            if appointment.appointment_date + timedelta(minutes=appointment.duration_minutes) > day_start
        ]

    async def get_user_appointments(
        self, user_id: int, status: AppointmentStatus | None = None
    ) -> list[Appointment]:
        """Get all appointments for the pets of a user."""
        query = (
            select(Appointment)
            .join(Pet, Appointment.pet_id == Pet.id)
            .where(Pet.user_id == user_id)
        )

        if status:
            query = query.where(Appointment.status == status.value)

        query = query.order_by(Appointment.appointment_date)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_upcoming_for_owner(self, user_id: int, now: datetime | None = None) -> list[Appointment]:
        """Future, non-cancelled appointments of a user with relations loaded."""
        now = now or datetime.utcnow()
        query = _with_relations(
            select(Appointment)
            .join(Pet, Appointment.pet_id == Pet.id)
            .where(
                and_(
                    Pet.user_id == user_id,
                    Appointment.appointment_date >= now,
                    Appointment.status != AppointmentStatus.CANCELLED.value,
                )
            )
            .order_by(Appointment.appointment_date)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update_schedule(
        self,
        appointment: Appointment,
        appointment_date: datetime,
        notes: str | None = None,
    ) -> Appointment:
        """Move an appointment; notes are replaced only when given."""
        appointment.appointment_date = appointment_date
        if notes is not None:
            appointment.notes = notes
        await self.db.flush()
        return appointment

    async def set_status(self, appointment: Appointment, status: AppointmentStatus) -> Appointment:
        appointment.status = status.value
        await self.db.flush()
        return appointment

    async def set_calendar_metadata(self, appointment_id: int, metadata: dict) -> None:
        """Write the metadata bag and commit it on its own."""
        await self.db.execute(
            update(Appointment)
            .where(Appointment.id == appointment_id)
            .values({Appointment.metadata_: metadata})
        )
        await self.db.commit()
