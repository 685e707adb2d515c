"""User routes - API endpoints for user operations."""

from fastapi import APIRouter, HTTPException

from vetcare.api.deps import DBSession, RequesterId
from vetcare.schemas.user import CalendarSettingsUpdate, CalendarSettingsResponse
from vetcare.services.calendar_service import CalendarSyncService
from vetcare.services.user_service import UserService

router = APIRouter()


@router.put("/{user_id}/calendar-settings", response_model=CalendarSettingsResponse)
async def update_calendar_settings(
    user_id: int,
    settings_data: CalendarSettingsUpdate,
    requester_id: RequesterId,
    db: DBSession,
):
    """Enable or disable Google Calendar sync.

    Enabling pushes every upcoming appointment of the user to the calendar.
    """
    if requester_id != user_id:
        raise HTTPException(status_code=403, detail="You can only change your own calendar settings.")

    service = UserService(db)
    user = await service.get_user_by_id(user_id)

    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user = await service.update_calendar_settings(user, settings_data)
    await db.commit()

    synced = 0
    if user.google_calendar_sync:
        synced = await CalendarSyncService(db).resync_user(user_id)

    return CalendarSettingsResponse(
        user_id=user_id,
        google_calendar_sync=settings_data.google_calendar_sync,
        synced_appointments=synced,
    )
