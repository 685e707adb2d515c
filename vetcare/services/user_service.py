"""User service - Business logic for user operations."""

import json

from sqlalchemy.ext.asyncio import AsyncSession

from vetcare.models.user import User
from vetcare.schemas.user import CalendarSettingsUpdate


class UserService:
    """Service class for user operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: int) -> User | None:
        """Get a user by ID."""
        return await self.db.get(User, user_id)

    async def update_calendar_settings(self, user: User, settings_data: CalendarSettingsUpdate) -> User:
        """Enable or disable calendar sync. Disabling drops the stored token."""
        user.google_calendar_sync = settings_data.google_calendar_sync
        if settings_data.google_calendar_sync:
            user.google_calendar_token = json.dumps(settings_data.google_calendar_token)
        else:
            user.google_calendar_token = None
        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def store_calendar_token(self, user_id: int, token: dict) -> None:
        """Persist a refreshed OAuth token and commit it on its own."""
        user = await self.db.get(User, user_id)
        if user is None:
            return
        user.google_calendar_token = json.dumps(token)
        await self.db.commit()
