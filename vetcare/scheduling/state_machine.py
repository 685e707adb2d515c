"""Appointment lifecycle.

    requested -> confirmed -> checked_in -> completed
    requested | confirmed | checked_in  -> cancelled

Rescheduling keeps the current status and is refused only from a terminal
status. ``completed`` and ``cancelled`` are terminal. The administrative
status overwrite in the booking service does not go through this module.
"""

from enum import Enum

from vetcare.models.appointment import AppointmentStatus

TERMINAL_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})


class AppointmentAction(str, Enum):
    CONFIRM = "confirm"
    CHECK_IN = "check_in"
    COMPLETE = "complete"
    CANCEL = "cancel"
    RESCHEDULE = "reschedule"

    @property
    def verb(self) -> str:
        return self.value.replace("_", " ")


# action -> (allowed source statuses, target status; None keeps the current one)
TRANSITIONS: dict[AppointmentAction, tuple[frozenset[AppointmentStatus], AppointmentStatus | None]] = {
    AppointmentAction.CONFIRM: (
        frozenset({AppointmentStatus.REQUESTED}),
        AppointmentStatus.CONFIRMED,
    ),
    AppointmentAction.CHECK_IN: (
        frozenset({AppointmentStatus.CONFIRMED}),
        AppointmentStatus.CHECKED_IN,
    ),
    AppointmentAction.COMPLETE: (
        frozenset({AppointmentStatus.CHECKED_IN}),
        AppointmentStatus.COMPLETED,
    ),
    AppointmentAction.CANCEL: (
        frozenset({AppointmentStatus.REQUESTED, AppointmentStatus.CONFIRMED, AppointmentStatus.CHECKED_IN}),
        AppointmentStatus.CANCELLED,
    ),
    AppointmentAction.RESCHEDULE: (
        frozenset(AppointmentStatus) - TERMINAL_STATUSES,
        None,
    ),
}


class InvalidTransition(Exception):
    """Raised when an action is not permitted from the current status."""

    def __init__(self, status: AppointmentStatus, action: AppointmentAction):
        self.status = status
        self.action = action
        super().__init__(f"Cannot {action.verb} a {status_label(status)} appointment.")


def status_label(status: AppointmentStatus | str) -> str:
    return coerce_status(status).value.replace("_", " ")


def coerce_status(status: AppointmentStatus | str) -> AppointmentStatus:
    return status if isinstance(status, AppointmentStatus) else AppointmentStatus(status)


def is_terminal(status: AppointmentStatus | str) -> bool:
    return coerce_status(status) in TERMINAL_STATUSES


def can_apply(status: AppointmentStatus | str, action: AppointmentAction) -> bool:
    sources, _ = TRANSITIONS[action]
    return coerce_status(status) in sources


def next_status(status: AppointmentStatus | str, action: AppointmentAction) -> AppointmentStatus:
    """Status after ``action``; raises ``InvalidTransition`` when not permitted."""
    current = coerce_status(status)
    sources, target = TRANSITIONS[action]
    if current not in sources:
        raise InvalidTransition(current, action)
    return target or current
