class SideEffectError(Exception):
    """A step that runs after an appointment change was committed failed."""


class EmailDeliveryError(SideEffectError):
    pass


class NotificationError(SideEffectError):
    pass


class CalendarSyncError(SideEffectError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
