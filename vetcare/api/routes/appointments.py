"""Appointment routes - API endpoints for appointment operations."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from vetcare.api.deps import DBSession, RequesterId
from vetcare.models.appointment import AppointmentStatus, AppointmentType, suggested_duration
from vetcare.schemas.appointment import (
    AppointmentCreate,
    AppointmentReference,
    AppointmentReschedule,
    AppointmentResponse,
    AppointmentStatusUpdate,
    AppointmentTypeOption,
    SlotQuery,
    TimeSlot,
)
from vetcare.schemas.result import ActionResult, ErrorKind
from vetcare.services.appointment_service import AppointmentService
from vetcare.services.availability_service import AvailabilityService
from vetcare.services.booking_service import BookingService, APPOINTMENT_NOT_FOUND

router = APIRouter()

STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INVALID_STATE: 400,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.SIDE_EFFECT: 502,
    ErrorKind.UNEXPECTED: 500,
}


def _unwrap(result: ActionResult[AppointmentReference]) -> AppointmentReference:
    if not result.success:
        raise HTTPException(status_code=STATUS_CODES.get(result.kind, 500), detail=result.error)
    return result.data


@router.get("/types", response_model=list[AppointmentTypeOption])
async def list_appointment_types():
    """Appointment types with their typical length in minutes."""
    return [
        AppointmentTypeOption(appointment_type=appointment_type, duration_minutes=suggested_duration(appointment_type))
        for appointment_type in AppointmentType
    ]


@router.get("/slots", response_model=list[TimeSlot])
async def get_time_slots(query: Annotated[SlotQuery, Depends()], db: DBSession):
    """Get the slot table of a veterinarian at a clinic for one day."""
    service = AvailabilityService(db)
    return await service.get_time_slots(query.vet_id, query.clinic_id, query.date)


@router.post("/", response_model=AppointmentReference, status_code=201)
async def create_appointment(appointment_data: AppointmentCreate, requester_id: RequesterId, db: DBSession):
    """Book a new appointment for one of the requester's pets."""
    service = BookingService(db)
    return _unwrap(await service.create(requester_id, appointment_data))


@router.get("/mine", response_model=list[AppointmentResponse])
async def get_my_appointments(
    requester_id: RequesterId,
    db: DBSession,
    status: AppointmentStatus | None = None,
):
    """Get all appointments for the requester's pets."""
    service = AppointmentService(db)
    return await service.get_user_appointments(requester_id, status)


@router.get("/{appointment_uuid}", response_model=AppointmentResponse)
async def get_appointment(appointment_uuid: str, db: DBSession):
    """Get an appointment by its public id."""
    service = AppointmentService(db)
    appointment = await service.get_appointment_by_uuid(appointment_uuid)

    if not appointment:
        raise HTTPException(status_code=404, detail=APPOINTMENT_NOT_FOUND)

    return appointment


@router.post("/{appointment_uuid}/reschedule", response_model=AppointmentReference)
async def reschedule_appointment(
    appointment_uuid: str,
    reschedule_data: AppointmentReschedule,
    requester_id: RequesterId,
    db: DBSession,
):
    """Move an appointment to a new start time."""
    service = BookingService(db)
    return _unwrap(await service.reschedule(requester_id, appointment_uuid, reschedule_data))


@router.post("/{appointment_uuid}/cancel", response_model=AppointmentReference)
async def cancel_appointment(appointment_uuid: str, db: DBSession):
    """Cancel an appointment (status change, the record is kept)."""
    service = BookingService(db)
    return _unwrap(await service.cancel(appointment_uuid))


@router.post("/{appointment_uuid}/confirm", response_model=AppointmentReference)
async def confirm_appointment(appointment_uuid: str, db: DBSession):
    service = BookingService(db)
    return _unwrap(await service.confirm(appointment_uuid))


@router.post("/{appointment_uuid}/check-in", response_model=AppointmentReference)
async def check_in_appointment(appointment_uuid: str, db: DBSession):
    service = BookingService(db)
    return _unwrap(await service.check_in(appointment_uuid))


@router.post("/{appointment_uuid}/complete", response_model=AppointmentReference)
async def complete_appointment(appointment_uuid: str, db: DBSession):
    service = BookingService(db)
    return _unwrap(await service.complete(appointment_uuid))


@router.patch("/{appointment_uuid}/status", response_model=AppointmentReference)
async def change_appointment_status(
    appointment_uuid: str,
    status_data: AppointmentStatusUpdate,
    requester_id: RequesterId,
    db: DBSession,
):
    """Overwrite the status directly (administrators only)."""
    service = BookingService(db)
    return _unwrap(await service.change_status(requester_id, appointment_uuid, status_data.status))
