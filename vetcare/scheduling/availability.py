"""Slot generation from a veterinarian's recurring weekly availability."""

from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, Protocol

from vetcare.schemas.appointment import TimeSlot

SLOT_INTERVAL_MINUTES = 30


class AvailabilityWindow(Protocol):
    vet_id: int
    clinic_id: int
    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool


def day_of_week(on_date: date) -> int:
    """Weekday index with Sunday as 0, the convention windows are stored in."""
    return (on_date.weekday() + 1) % 7


def find_window(
    windows: Iterable[AvailabilityWindow],
    vet_id: int,
    clinic_id: int,
    on_date: date,
) -> AvailabilityWindow | None:
    weekday = day_of_week(on_date)
    for window in windows:
        if window.vet_id == vet_id and window.clinic_id == clinic_id and window.day_of_week == weekday:
            return window
    return None


def iter_slot_starts(window: AvailabilityWindow, on_date: date) -> Iterator[datetime]:
    """Yield slot starts from the window start, stopping strictly before its end."""
    current = datetime.combine(on_date, window.start_time)
    window_end = datetime.combine(on_date, window.end_time)
    step = timedelta(minutes=SLOT_INTERVAL_MINUTES)

    while current < window_end:
        yield current
        current += step


def resolve_slots(
    windows: Iterable[AvailabilityWindow],
    vet_id: int,
    clinic_id: int,
    on_date: date | datetime,
) -> Iterator[TimeSlot]:
    """Candidate slots for a vet at a clinic on one calendar day.

    Bookings are not consulted here. A missing window or one flagged as
    unavailable yields nothing.
    """
    if isinstance(on_date, datetime):
        on_date = on_date.date()

    window = find_window(windows, vet_id, clinic_id, on_date)
    if window is None or not window.is_available:
        return iter(())

    return (TimeSlot(start_time=start) for start in iter_slot_starts(window, on_date))
