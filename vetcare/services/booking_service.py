"""Booking service - Create, reschedule, cancel and confirm appointments.

Every operation returns an ``ActionResult``. Business-rule failures found
before the write abort with nothing changed. The core write is committed on
its own before emails, notifications and calendar sync run, so a failure in
those steps is reported with ``ErrorKind.SIDE_EFFECT`` while the change
stays in place.
"""

from datetime import datetime

import logfire
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vetcare.config import settings
from vetcare.exceptions import SideEffectError
from vetcare.models.appointment import Appointment, AppointmentStatus
from vetcare.scheduling.conflicts import find_booking_conflicts
from vetcare.scheduling.locks import VetBookingLocks
from vetcare.scheduling.state_machine import AppointmentAction, InvalidTransition, coerce_status, next_status
from vetcare.schemas.appointment import (
    AppointmentCreate,
    AppointmentDetails,
    AppointmentReference,
    AppointmentReschedule,
)
from vetcare.schemas.result import ActionResult, ErrorKind, UNEXPECTED_ERROR
from vetcare.services.appointment_service import AppointmentService
from vetcare.services.calendar_service import CalendarSyncService
from vetcare.services.directory_service import DirectoryService
from vetcare.services.email_service import EmailService
from vetcare.services.notification_service import NotificationService, NotificationType

PET_NOT_FOUND = "Pet not found"
VET_NOT_FOUND = "Veterinarian not found"
CLINIC_NOT_FOUND = "Clinic not found"
APPOINTMENT_NOT_FOUND = "Appointment not found."
VET_CONFLICT = "The veterinarian already has an appointment at this time."
OWNER_CONFLICT = "You already have another appointment scheduled at this time."
NOT_PET_OWNER = "You are not authorized to book appointments for this pet."
NOT_AUTHORIZED_TO_RESCHEDULE = "You are not authorized to reschedule this appointment."
ADMIN_ONLY = "Only administrators can change appointment status."
RESCHEDULE_SIDE_EFFECT_FAILED = "Failed to send reschedule notifications."
CANCEL_SIDE_EFFECT_FAILED = "Failed to send cancellation notifications."
CONFIRM_EMAIL_FAILED = "Failed to send confirmation email."
CONFIRM_NOTIFICATION_FAILED = "Failed to send confirmation notification."

ADMIN_ROLE = "admin"

# Shared by every request handled in this process
booking_locks = VetBookingLocks(enabled=settings.booking_lock_enabled)


def _reference(appointment_uuid: str, status: AppointmentStatus | str) -> AppointmentReference:
    value = status.value if isinstance(status, AppointmentStatus) else status
    return AppointmentReference(appointment_uuid=appointment_uuid, status=value)


def _action_url(appointment_uuid: str) -> str:
    return f"/appointments/{appointment_uuid}"


class BookingService:
    """Orchestrates appointment changes and the side effects that follow them."""

    def __init__(
        self,
        db: AsyncSession,
        email: EmailService | None = None,
        notifications: NotificationService | None = None,
        calendar: CalendarSyncService | None = None,
        locks: VetBookingLocks | None = None,
    ):
        self.db = db
        self.appointments = AppointmentService(db)
        self.directory = DirectoryService(db)
        self.email = email or EmailService()
        self.notifications = notifications or NotificationService(db)
        self.calendar = calendar or CalendarSyncService(db)
        self.locks = locks or booking_locks

    # ==================== CREATE ====================

    async def create(self, requester_id: int, data: AppointmentCreate) -> ActionResult[AppointmentReference]:
        logfire.info(
            "booking_create",
            requester_id=requester_id,
            pet_uuid=data.pet_uuid,
            vet_id=data.vet_id,
            date=data.appointment_date.isoformat(),
        )
        try:
            async with self.locks.hold(data.vet_id):
                pet = await self.directory.get_pet_by_uuid(data.pet_uuid)
                if pet is None:
                    return ActionResult.fail(PET_NOT_FOUND, ErrorKind.NOT_FOUND)
                if pet.user_id != requester_id:
                    return ActionResult.fail(NOT_PET_OWNER, ErrorKind.UNAUTHORIZED)
                if await self.directory.get_veterinarian(data.vet_id) is None:
                    return ActionResult.fail(VET_NOT_FOUND, ErrorKind.NOT_FOUND)
                if await self.directory.get_clinic(data.clinic_id) is None:
                    return ActionResult.fail(CLINIC_NOT_FOUND, ErrorKind.NOT_FOUND)

                rejection = await self._check_conflicts(data.appointment_date, data.vet_id, pet.user_id)
                if rejection is not None:
                    return rejection

                appointment = await self.appointments.create_appointment(
                    pet_id=pet.id,
                    vet_id=data.vet_id,
                    clinic_id=data.clinic_id,
                    appointment_date=data.appointment_date,
                    appointment_type=data.appointment_type.value,
                    notes=data.notes,
                    duration_minutes=data.duration_minutes,
                )
                appointment_uuid = appointment.appointment_uuid
                await self.db.commit()
        except SQLAlchemyError as e:
            return await self._unexpected("booking_create_error", e)

        logfire.info("booking_created", appointment_uuid=appointment_uuid)
        await self._after_create(appointment_uuid)
        return ActionResult.ok(_reference(appointment_uuid, AppointmentStatus.REQUESTED))

    async def _after_create(self, appointment_uuid: str) -> None:
        """Best-effort: every step is tried and failures are only logged."""
        try:
            details = await self._load_details(appointment_uuid)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logfire.error("booking_create_details_error", appointment_uuid=appointment_uuid, error=str(e))
            return
        if details is None:
            return

        await self.calendar.add_event(details)

        try:
            await self.email.send(
                "appointment-requested",
                details.email_data(details.owner_name),
                to=details.owner_email,
                subject="Appointment Request Received",
            )
        except SideEffectError as e:
            logfire.error("booking_create_email_error", appointment_uuid=appointment_uuid, error=str(e))

        try:
            await self._notify_owner(
                details,
                title="Appointment Requested",
                content=(
                    f"Your appointment for {details.pet_name} on {details.formatted_date} "
                    f"at {details.formatted_time} has been requested."
                ),
                type=NotificationType.APPOINTMENT_CONFIRMATION,
            )
        except SideEffectError as e:
            logfire.error("booking_create_notification_error", appointment_uuid=appointment_uuid, error=str(e))

    # ==================== RESCHEDULE ====================

    async def reschedule(
        self,
        requester_id: int,
        appointment_uuid: str,
        data: AppointmentReschedule,
    ) -> ActionResult[AppointmentReference]:
        logfire.info(
            "booking_reschedule",
            requester_id=requester_id,
            appointment_uuid=appointment_uuid,
            new_date=data.appointment_date.isoformat(),
        )
        try:
            appointment = await self.appointments.get_appointment_by_uuid(appointment_uuid)
            if appointment is None:
                return ActionResult.fail(APPOINTMENT_NOT_FOUND, ErrorKind.NOT_FOUND)

            try:
                status = next_status(appointment.status, AppointmentAction.RESCHEDULE)
            except InvalidTransition as e:
                return ActionResult.fail(str(e), ErrorKind.INVALID_STATE)

            owner_id = appointment.pet.user_id if appointment.pet is not None else None

            async with self.locks.hold(appointment.vet_id):
                rejection = await self._check_conflicts(
                    data.appointment_date,
                    appointment.vet_id,
                    owner_id,
                    exclude_id=appointment.id,
                )
                if rejection is not None:
                    return rejection

                if owner_id is None or owner_id != requester_id:
                    return ActionResult.fail(NOT_AUTHORIZED_TO_RESCHEDULE, ErrorKind.UNAUTHORIZED)

                previous = AppointmentDetails.from_appointment(appointment)
                await self.appointments.update_schedule(appointment, data.appointment_date, data.notes)
                details = AppointmentDetails.from_appointment(appointment)
                await self.db.commit()
        except SQLAlchemyError as e:
            return await self._unexpected("booking_reschedule_error", e)

        logfire.info("booking_rescheduled", appointment_uuid=appointment_uuid)

        await self.calendar.update_event(details)
        try:
            await self._notify_owner(
                details,
                title="Appointment Rescheduled",
                content=(
                    f"Your appointment for {details.pet_name} has been moved to "
                    f"{details.formatted_date} at {details.formatted_time}."
                ),
                type=NotificationType.APPOINTMENT_RESCHEDULED,
            )
            extra = {"previous_date": previous.formatted_date, "previous_time": previous.formatted_time}
            await self.email.send(
                "appointment-rescheduled",
                {**details.email_data(details.owner_name), **extra},
                to=details.owner_email,
                subject="Appointment Rescheduled",
            )
            await self.email.send(
                "appointment-rescheduled",
                {**details.email_data(details.vet_name), **extra},
                to=details.vet_email,
                subject="Appointment Rescheduled",
            )
        except SideEffectError as e:
            logfire.error("booking_reschedule_side_effect_error", appointment_uuid=appointment_uuid, error=str(e))
            return ActionResult.fail(RESCHEDULE_SIDE_EFFECT_FAILED, ErrorKind.SIDE_EFFECT)

        return ActionResult.ok(_reference(appointment_uuid, status))

    # ==================== CANCEL ====================

    async def cancel(self, appointment_uuid: str) -> ActionResult[AppointmentReference]:
        """Cancel regardless of the current status.

        Cancelling an already cancelled appointment succeeds again without
        repeating the owner notification and emails.
        """
        logfire.info("booking_cancel", appointment_uuid=appointment_uuid)
        try:
            appointment = await self.appointments.get_appointment_by_uuid(appointment_uuid)
            if appointment is None:
                return ActionResult.fail(APPOINTMENT_NOT_FOUND, ErrorKind.NOT_FOUND)

            already_cancelled = appointment.status == AppointmentStatus.CANCELLED.value
            await self.appointments.set_status(appointment, AppointmentStatus.CANCELLED)
            details = AppointmentDetails.from_appointment(appointment)
            await self.db.commit()
        except SQLAlchemyError as e:
            return await self._unexpected("booking_cancel_error", e)

        logfire.info("booking_cancelled", appointment_uuid=appointment_uuid, already_cancelled=already_cancelled)

        await self.calendar.delete_event(details)
        if already_cancelled:
            return ActionResult.ok(_reference(appointment_uuid, AppointmentStatus.CANCELLED))

        try:
            await self._notify_owner(
                details,
                title="Appointment Cancelled",
                content=(
                    f"Your appointment for {details.pet_name} on {details.formatted_date} "
                    f"at {details.formatted_time} has been cancelled."
                ),
                type=NotificationType.APPOINTMENT_CANCELLED,
                priority="high",
            )
            await self.email.send(
                "appointment-cancelled",
                details.email_data(details.owner_name),
                to=details.owner_email,
                subject="Appointment Cancelled",
            )
            await self.email.send(
                "appointment-cancelled",
                details.email_data(details.vet_name),
                to=details.vet_email,
                subject="Appointment Cancelled",
            )
        except SideEffectError as e:
            logfire.error("booking_cancel_side_effect_error", appointment_uuid=appointment_uuid, error=str(e))
            return ActionResult.fail(CANCEL_SIDE_EFFECT_FAILED, ErrorKind.SIDE_EFFECT)

        return ActionResult.ok(_reference(appointment_uuid, AppointmentStatus.CANCELLED))

    # ==================== CONFIRM ====================

    async def confirm(self, appointment_uuid: str) -> ActionResult[AppointmentReference]:
        logfire.info("booking_confirm", appointment_uuid=appointment_uuid)
        try:
            appointment = await self.appointments.get_appointment_by_uuid(appointment_uuid)
            if appointment is None:
                return ActionResult.fail(APPOINTMENT_NOT_FOUND, ErrorKind.NOT_FOUND)

            try:
                status = next_status(appointment.status, AppointmentAction.CONFIRM)
            except InvalidTransition as e:
                return ActionResult.fail(str(e), ErrorKind.INVALID_STATE)

            await self.appointments.set_status(appointment, status)
            details = AppointmentDetails.from_appointment(appointment)
            await self.db.commit()
        except SQLAlchemyError as e:
            return await self._unexpected("booking_confirm_error", e)

        logfire.info("booking_confirmed", appointment_uuid=appointment_uuid)

        missing = _missing_confirmation_data(details)
        if missing:
            logfire.error("booking_confirm_data_missing", appointment_uuid=appointment_uuid, missing=missing)
            return ActionResult.fail(f"Failed to send confirmation: {missing} data missing.", ErrorKind.SIDE_EFFECT)

        try:
            await self.email.send(
                "appointment-confirmation",
                details.email_data(details.owner_name),
                to=details.owner_email,
                subject="Appointment Confirmed",
            )
        except SideEffectError as e:
            logfire.error("booking_confirm_email_error", appointment_uuid=appointment_uuid, error=str(e))
            return ActionResult.fail(CONFIRM_EMAIL_FAILED, ErrorKind.SIDE_EFFECT)

        await self.calendar.update_event(details)

        try:
            await self._notify_owner(
                details,
                title="Appointment Confirmed",
                content=(
                    f"Your appointment for {details.pet_name} on {details.formatted_date} "
                    f"at {details.formatted_time} has been confirmed."
                ),
                type=NotificationType.APPOINTMENT_CONFIRMATION,
            )
        except SideEffectError as e:
            logfire.error("booking_confirm_notification_error", appointment_uuid=appointment_uuid, error=str(e))
            return ActionResult.fail(CONFIRM_NOTIFICATION_FAILED, ErrorKind.SIDE_EFFECT)

        return ActionResult.ok(_reference(appointment_uuid, status))

    # ==================== CHECK-IN / COMPLETE ====================

    async def check_in(self, appointment_uuid: str) -> ActionResult[AppointmentReference]:
        return await self._advance(appointment_uuid, AppointmentAction.CHECK_IN, "checked in")

    async def complete(self, appointment_uuid: str) -> ActionResult[AppointmentReference]:
        return await self._advance(appointment_uuid, AppointmentAction.COMPLETE, "completed")

    async def _advance(
        self,
        appointment_uuid: str,
        action: AppointmentAction,
        past_tense: str,
    ) -> ActionResult[AppointmentReference]:
        """Guarded transition with a best-effort owner notification."""
        logfire.info(f"booking_{action.value}", appointment_uuid=appointment_uuid)
        try:
            appointment = await self.appointments.get_appointment_by_uuid(appointment_uuid)
            if appointment is None:
                return ActionResult.fail(APPOINTMENT_NOT_FOUND, ErrorKind.NOT_FOUND)

            try:
                status = next_status(appointment.status, action)
            except InvalidTransition as e:
                return ActionResult.fail(str(e), ErrorKind.INVALID_STATE)

            await self.appointments.set_status(appointment, status)
            details = AppointmentDetails.from_appointment(appointment)
            await self.db.commit()
        except SQLAlchemyError as e:
            return await self._unexpected(f"booking_{action.value}_error", e)

        if status == AppointmentStatus.COMPLETED:
            await self.calendar.update_event(details)

        try:
            await self._notify_owner(
                details,
                title=f"Appointment {past_tense.title()}",
                content=f"{details.pet_name}'s appointment has been {past_tense}.",
                type=NotificationType.APPOINTMENT_CONFIRMATION,
            )
        except SideEffectError as e:
            logfire.error(f"booking_{action.value}_notification_error", appointment_uuid=appointment_uuid, error=str(e))

        return ActionResult.ok(_reference(appointment_uuid, status))

    # ==================== ADMIN ====================

    async def change_status(
        self,
        admin_id: int,
        appointment_uuid: str,
        status: AppointmentStatus | str,
    ) -> ActionResult[AppointmentReference]:
        """Overwrite the status directly. Administrators only; no transition rules apply."""
        try:
            status = coerce_status(status)
        except ValueError as e:
            return ActionResult.fail(str(e), ErrorKind.INVALID_STATE)

        logfire.info("booking_change_status", admin_id=admin_id, appointment_uuid=appointment_uuid, status=status.value)
        try:
            admin = await self.directory.get_user(admin_id)
            if admin is None or admin.role != ADMIN_ROLE:
                return ActionResult.fail(ADMIN_ONLY, ErrorKind.UNAUTHORIZED)

            appointment = await self.appointments.get_appointment_by_uuid(appointment_uuid)
            if appointment is None:
                return ActionResult.fail(APPOINTMENT_NOT_FOUND, ErrorKind.NOT_FOUND)

            await self.appointments.set_status(appointment, status)
            await self.db.commit()
        except SQLAlchemyError as e:
            return await self._unexpected("booking_change_status_error", e)

        return ActionResult.ok(_reference(appointment_uuid, status))

    # ==================== HELPERS ====================

    async def _check_conflicts(
        self,
        candidate_start: datetime,
        vet_id: int | None,
        owner_id: int | None,
        exclude_id: int | None = None,
    ) -> ActionResult | None:
        """Vet check first, then the owner across all of their pets."""
        if vet_id is not None:
            existing = await self.appointments.find_in_booking_window(candidate_start, vet_id=vet_id)
            if find_booking_conflicts(candidate_start, existing, exclude_id).has_conflict:
                return ActionResult.fail(VET_CONFLICT, ErrorKind.CONFLICT)

        if owner_id is not None:
            existing = await self.appointments.find_in_booking_window(candidate_start, owner_id=owner_id)
            if find_booking_conflicts(candidate_start, existing, exclude_id).has_conflict:
                return ActionResult.fail(OWNER_CONFLICT, ErrorKind.CONFLICT)

        return None

    async def _load_details(self, appointment_uuid: str) -> AppointmentDetails | None:
        appointment: Appointment | None = await self.appointments.get_appointment_by_uuid(appointment_uuid)
        if appointment is None:
            return None
        return AppointmentDetails.from_appointment(appointment)

    async def _notify_owner(self, details: AppointmentDetails, **kwargs) -> None:
        if details.owner_id is None:
            return
        await self.notifications.create_notification(
            user_id=details.owner_id,
            pet_id=details.pet_id,
            appointment_id=details.appointment_id,
            action_url=_action_url(details.appointment_uuid),
            **kwargs,
        )

    async def _unexpected(self, event: str, error: SQLAlchemyError) -> ActionResult:
        await self.db.rollback()
        logfire.error(event, error=str(error))
        return ActionResult.fail(UNEXPECTED_ERROR, ErrorKind.UNEXPECTED)


def _missing_confirmation_data(details: AppointmentDetails) -> str | None:
    if details.pet_id is None:
        return "Pet"
    if details.vet_name is None:
        return "Veterinarian"
    if details.owner_email is None:
        return "Owner"
    return None
