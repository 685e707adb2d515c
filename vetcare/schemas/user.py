from pydantic import BaseModel, Field, model_validator


class CalendarSettingsUpdate(BaseModel):
    """Schema for enabling or disabling Google Calendar sync."""
    google_calendar_sync: bool
    google_calendar_token: dict | None = Field(
        None,
        description="OAuth token payload (access_token, refresh_token, expiry_date, ...)",
    )

    @model_validator(mode="after")
    def require_token_when_enabling(self) -> "CalendarSettingsUpdate":
        if self.google_calendar_sync and not self.google_calendar_token:
            raise ValueError("A calendar token is required to enable sync.")
        return self


class CalendarSettingsResponse(BaseModel):
    """Schema for calendar settings response."""
    user_id: int
    google_calendar_sync: bool
    synced_appointments: int = 0
