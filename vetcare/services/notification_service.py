"""Notification service - In-app notifications for users."""

from enum import Enum

import logfire
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vetcare.exceptions import NotificationError
from vetcare.models.notification import Notification


class NotificationType(str, Enum):
    APPOINTMENT_REMINDER = "appointment_reminder"
    APPOINTMENT_CONFIRMATION = "appointment_confirmation"
    APPOINTMENT_CANCELLED = "appointment_cancelled"
    APPOINTMENT_RESCHEDULED = "appointment_rescheduled"


class NotificationService:
    """Persists notifications, each in its own commit."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_notification(
        self,
        user_id: int,
        title: str,
        content: str,
        type: NotificationType | str,
        priority: str = "normal",
        pet_id: int | None = None,
        appointment_id: int | None = None,
        action_url: str | None = None,
    ) -> Notification:
        """Create a notification; raises ``NotificationError`` if it cannot be stored."""
        notification = Notification(
            user_id=user_id,
            title=title,
            content=content,
            type=type.value if isinstance(type, NotificationType) else type,
            priority=priority,
            pet_id=pet_id,
            appointment_id=appointment_id,
            action_url=action_url,
        )
        try:
            self.db.add(notification)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logfire.error("notification_failed", user_id=user_id, type=notification.type, error=str(e))
            raise NotificationError("Failed to create notification.") from e

        logfire.info("notification_created", user_id=user_id, type=notification.type)
        return notification
