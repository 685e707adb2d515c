"""Availability service - Weekly working hours and the daily slot table."""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vetcare.models.availability import VetAvailability
from vetcare.scheduling.availability import SLOT_INTERVAL_MINUTES, resolve_slots
from vetcare.scheduling.conflicts import SLOT_TABLE_NON_BLOCKING_STATUSES, find_overlapping
from vetcare.schemas.appointment import TimeSlot
from vetcare.services.appointment_service import AppointmentService

BOOKED = "booked"


class AvailabilityService:
    """Service class for availability and slot operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.appointments = AppointmentService(db)

    async def list_availability(self, vet_id: int) -> list[VetAvailability]:
        """Get the recurring weekly windows of a veterinarian."""
        result = await self.db.execute(
            select(VetAvailability)
            .where(VetAvailability.vet_id == vet_id)
            .order_by(VetAvailability.clinic_id, VetAvailability.day_of_week)
        )
        return list(result.scalars().all())

    async def get_time_slots(self, vet_id: int, clinic_id: int, on_date: date) -> list[TimeSlot]:
        """Slot table for one day: every candidate slot, flagged when booked.

        A slot is booked when any appointment that is neither cancelled nor a
        no-show overlaps it.
        """
        windows = await self.list_availability(vet_id)
        slots = list(resolve_slots(windows, vet_id, clinic_id, on_date))
        if not slots:
            return []

        existing = await self.appointments.find_for_vet_on_day(vet_id, on_date)

        table = []
        for slot in slots:
            check = find_overlapping(
                slot.start_time,
                SLOT_INTERVAL_MINUTES,
                existing,
                ignored_statuses=SLOT_TABLE_NON_BLOCKING_STATUSES,
            )
            if check.has_conflict:
                slot = slot.model_copy(update={
                    "available": False,
                    "status": BOOKED,
                    "appointment_uuid": check.appointment_uuids[0],
                })
            table.append(slot)
        return table
