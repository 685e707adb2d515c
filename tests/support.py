"""Shared test helpers and fake collaborators."""

import json
from datetime import datetime

from vetcare.exceptions import EmailDeliveryError, NotificationError
from vetcare.models import User

# 2030-06-03 is a Monday
MONDAY = datetime(2030, 6, 3)
MONDAY_WEEKDAY = 1


def at(hour: int, minute: int = 0, day: datetime = MONDAY) -> datetime:
    return day.replace(hour=hour, minute=minute)


async def enable_calendar(session, user: User, token: dict | None = None) -> None:
    user.google_calendar_sync = True
    user.google_calendar_token = json.dumps(token or {"access_token": "access-token"})
    await session.commit()


class FakeEmail:
    """Records sent emails; templates listed in ``failing`` raise."""

    def __init__(self, failing: set[str] | None = None):
        self.sent = []
        self.failing = failing or set()

    async def send(self, template, data, to, subject):
        if template in self.failing:
            raise EmailDeliveryError("Email failed")
        self.sent.append({"template": template, "data": data, "to": to, "subject": subject})
        return True

    def templates(self) -> list[str]:
        return [item["template"] for item in self.sent]


class FailingNotifications:
    async def create_notification(self, **kwargs):
        raise NotificationError("Failed to create notification.")


class FakeGoogleClient:
    """Stands in for GoogleCalendarClient without any HTTP."""

    def __init__(self):
        self.created = []
        self.updated = []
        self.deleted = []

    async def refresh_if_needed(self, token):
        return token, False

    async def create_event(self, access_token, payload):
        event_id = f"evt-{len(self.created) + 1}"
        self.created.append((event_id, payload))
        return event_id

    async def update_event(self, access_token, event_id, payload):
        self.updated.append((event_id, payload))

    async def delete_event(self, access_token, event_id):
        self.deleted.append(event_id)
