"""
Google Calendar sync for appointments.

Events live in the owner's primary calendar. The event id is kept in the
appointment metadata bag under ``googleCalendarEventId``. Sync is best-effort:
every failure is logged and swallowed so it never affects the booking flow.
"""

import json
import logging
import time as clock

import httpx
import logfire
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vetcare.config import settings
from vetcare.exceptions import CalendarSyncError
from vetcare.models.appointment import AppointmentStatus, AppointmentType
from vetcare.schemas.appointment import AppointmentDetails, AppointmentMetadata
from vetcare.services.appointment_service import AppointmentService
from vetcare.services.user_service import UserService

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"
CALENDAR_ID = "primary"

# Refresh this long before the stored expiry
TOKEN_EXPIRY_BUFFER_MS = 60_000

# Google Calendar color ids: 1 blue, 2 green, 3 purple, 4 red
EVENT_COLORS = {
    AppointmentType.EMERGENCY.value: "4",
    AppointmentType.SURGERY.value: "3",
    AppointmentType.SPAY_NEUTER.value: "3",
    AppointmentType.WELLNESS_EXAM.value: "2",
    AppointmentType.VACCINATION.value: "2",
}
DEFAULT_EVENT_COLOR = "1"


def _title(value: str) -> str:
    return value.replace("_", " ").title()


def build_event_payload(details: AppointmentDetails, time_zone: str | None = None) -> dict:
    """Google Calendar v3 event body for an appointment."""
    time_zone = time_zone or settings.calendar_time_zone
    pet_name = details.pet_name or "Unknown Pet"

    lines = [
        f"Veterinarian: Dr. {details.vet_name or 'Unknown Veterinarian'}",
        f"Type: {_title(details.appointment_type)}",
        f"Pet Name: {pet_name}",
        f"Status: {_title(details.status)}",
    ]
    if details.notes:
        lines.append(f"Notes: {details.notes}")
    if details.clinic_phone:
        lines.append(f"Phone: {details.clinic_phone}")

    return {
        "summary": f"Vet Appointment for {pet_name}",
        "description": "\n".join(lines),
        "location": details.clinic_location or "",
        "start": {"dateTime": details.appointment_date.isoformat(), "timeZone": time_zone},
        "end": {"dateTime": details.end_time.isoformat(), "timeZone": time_zone},
        "status": "cancelled" if details.status == AppointmentStatus.CANCELLED.value else "confirmed",
        "colorId": EVENT_COLORS.get(details.appointment_type, DEFAULT_EVENT_COLOR),
        "reminders": {
            "useDefault": False,
            "overrides": [
                {"method": "email", "minutes": 24 * 60},
                {"method": "popup", "minutes": 60},
            ],
        },
    }


class GoogleCalendarClient:
    """Thin httpx wrapper over the token endpoint and the events API."""

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client_id = settings.google_client_id if client_id is None else client_id
        self.client_secret = settings.google_client_secret if client_secret is None else client_secret
        self.timeout = timeout or settings.calendar_api_timeout_seconds
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def refresh_if_needed(self, token: dict) -> tuple[dict, bool]:
        """Return a usable token and whether it was refreshed."""
        now_ms = int(clock.time() * 1000)
        expiry = token.get("expiry_date")
        if expiry is None or now_ms < int(expiry) - TOKEN_EXPIRY_BUFFER_MS:
            return token, False

        refresh_token = token.get("refresh_token")
        if not refresh_token:
            raise CalendarSyncError("Cannot refresh token: no refresh token available")

        async with self._client() as client:
            response = await client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "refresh_token": refresh_token,
                    "grant_type": "refresh_token",
                },
            )

        if response.status_code != 200:
            raise CalendarSyncError("Token refresh failed", status_code=response.status_code)

        tokens = response.json()
        if not tokens.get("access_token"):
            raise CalendarSyncError("No access token in refresh response")

        refreshed = {
            **token,
            "access_token": tokens["access_token"],
            "refresh_token": refresh_token,
            "expiry_date": now_ms + int(tokens.get("expires_in", 3600)) * 1000,
        }
        return refreshed, True

    async def create_event(self, access_token: str, payload: dict) -> str:
        async with self._client() as client:
            response = await client.post(
                f"{GOOGLE_CALENDAR_API}/calendars/{CALENDAR_ID}/events",
                headers={"Authorization": f"Bearer {access_token}"},
                json=payload,
            )

        if response.status_code not in (200, 201):
            raise CalendarSyncError("Failed to create calendar event", status_code=response.status_code)

        event_id = response.json().get("id")
        if not event_id:
            raise CalendarSyncError("Calendar response carried no event id")
        return event_id

    async def update_event(self, access_token: str, event_id: str, payload: dict) -> None:
        async with self._client() as client:
            response = await client.patch(
                f"{GOOGLE_CALENDAR_API}/calendars/{CALENDAR_ID}/events/{event_id}",
                headers={"Authorization": f"Bearer {access_token}"},
                json=payload,
            )

        if response.status_code != 200:
            raise CalendarSyncError("Failed to update calendar event", status_code=response.status_code)

    async def delete_event(self, access_token: str, event_id: str) -> None:
        """Delete an event. An event that is already gone counts as deleted."""
        async with self._client() as client:
            response = await client.delete(
                f"{GOOGLE_CALENDAR_API}/calendars/{CALENDAR_ID}/events/{event_id}",
                headers={"Authorization": f"Bearer {access_token}"},
            )

        if response.status_code not in (200, 204, 404, 410):
            raise CalendarSyncError("Failed to delete calendar event", status_code=response.status_code)


class CalendarSyncService:
    """Keeps an owner's Google Calendar in step with their appointments."""

    def __init__(self, db: AsyncSession, client: GoogleCalendarClient | None = None):
        self.db = db
        self.client = client or GoogleCalendarClient()
        self.appointments = AppointmentService(db)
        self.users = UserService(db)

    async def _access_token(self, details: AppointmentDetails) -> str | None:
        if not details.owner_calendar_sync or not details.owner_calendar_token:
            return None

        token = json.loads(details.owner_calendar_token)
        if not isinstance(token, dict):
            raise CalendarSyncError("Stored calendar token is malformed")

        token, refreshed = await self.client.refresh_if_needed(token)
        if refreshed and details.owner_id is not None:
            await self.users.store_calendar_token(details.owner_id, token)
            details.owner_calendar_token = json.dumps(token)
        return token.get("access_token")

    async def _store_event_id(self, details: AppointmentDetails, event_id: str | None) -> None:
        metadata = AppointmentMetadata(calendar_event_id=event_id).merge_into(details.metadata)
        await self.appointments.set_calendar_metadata(details.appointment_id, metadata)
        details.metadata = metadata

    async def _log_failure(self, event: str, details: AppointmentDetails, error: Exception) -> None:
        if isinstance(error, SQLAlchemyError):
            await self.db.rollback()
        logfire.error(event, appointment_uuid=details.appointment_uuid, error=str(error))

    async def add_event(self, details: AppointmentDetails) -> str | None:
        """Create the event and remember its id; None when nothing was synced."""
        try:
            access_token = await self._access_token(details)
            if not access_token:
                return None

            event_id = await self.client.create_event(access_token, build_event_payload(details))
            await self._store_event_id(details, event_id)
        except (CalendarSyncError, httpx.HTTPError, SQLAlchemyError, ValueError) as e:
            await self._log_failure("calendar_add_error", details, e)
            return None

        logfire.info("calendar_event_added", appointment_uuid=details.appointment_uuid, event_id=event_id)
        return event_id

    async def update_event(self, details: AppointmentDetails) -> bool:
        """Update the event, or add one when the appointment has none yet."""
        event_id = details.calendar_event_id
        if not event_id:
            return await self.add_event(details) is not None

        try:
            access_token = await self._access_token(details)
            if not access_token:
                return False

            await self.client.update_event(access_token, event_id, build_event_payload(details))
        except (CalendarSyncError, httpx.HTTPError, SQLAlchemyError, ValueError) as e:
            await self._log_failure("calendar_update_error", details, e)
            return False

        logfire.info("calendar_event_updated", appointment_uuid=details.appointment_uuid, event_id=event_id)
        return True

    async def delete_event(self, details: AppointmentDetails) -> bool:
        """Delete the event and clear the stored id. No event means nothing to do."""
        event_id = details.calendar_event_id
        if not event_id:
            return False

        try:
            access_token = await self._access_token(details)
            if not access_token:
                return False

            await self.client.delete_event(access_token, event_id)
            await self._store_event_id(details, None)
        except (CalendarSyncError, httpx.HTTPError, SQLAlchemyError, ValueError) as e:
            await self._log_failure("calendar_delete_error", details, e)
            return False

        logfire.info("calendar_event_deleted", appointment_uuid=details.appointment_uuid, event_id=event_id)
        return True

    async def resync_user(self, user_id: int) -> int:
        """Push every upcoming appointment of a user, one at a time.

        Returns the number of appointments synced.
        """
        appointments = await self.appointments.list_upcoming_for_owner(user_id)
        snapshots = [AppointmentDetails.from_appointment(appointment) for appointment in appointments]

        synced = 0
        for details in snapshots:
            if await self.update_event(details):
                synced += 1

        logger.info("Calendar resync for user %s: %s/%s appointments", user_id, synced, len(snapshots))
        return synced
