"""Double-booking detection.

Two rules live here:

* ``find_overlapping`` uses true interval overlap with each appointment's own
  duration. The slot table is built with it.
* ``find_booking_conflicts`` uses a fixed window of ``BOOKING_WINDOW_MINUTES``
  on either side of the candidate start, ignoring durations. Create and
  reschedule check against it.

A long appointment (e.g. a 120 minute surgery at 09:00) therefore blocks the
10:00 slot in the table but does not stop a 10:00 booking.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Protocol

from vetcare.models.appointment import AppointmentStatus, DEFAULT_DURATION_MINUTES

BOOKING_WINDOW_MINUTES = 30

NON_BLOCKING_STATUSES = frozenset({AppointmentStatus.CANCELLED.value})
# The slot table also frees the time of a missed visit
SLOT_TABLE_NON_BLOCKING_STATUSES = frozenset({
    AppointmentStatus.CANCELLED.value,
    AppointmentStatus.NO_SHOW.value,
})


class ScheduledItem(Protocol):
    id: int
    appointment_uuid: str
    appointment_date: datetime
    duration_minutes: int | None
    status: str


@dataclass
class ConflictCheck:
    conflicts: list = field(default_factory=list)

    @property
    def has_conflict(self) -> bool:
        return bool(self.conflicts)

    @property
    def appointment_uuids(self) -> list[str]:
        return [item.appointment_uuid for item in self.conflicts]


def appointment_end(item: ScheduledItem) -> datetime:
    return item.appointment_date + timedelta(minutes=item.duration_minutes or DEFAULT_DURATION_MINUTES)


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open intervals [start, end) overlap."""
    return start_a < end_b and start_b < end_a


def _candidates(
    existing: Iterable[ScheduledItem],
    exclude_id: int | None,
    ignored_statuses: frozenset[str],
) -> Iterable[ScheduledItem]:
    for item in existing:
        if exclude_id is not None and item.id == exclude_id:
            continue
        if _status_value(item.status) in ignored_statuses:
            continue
        yield item


def _status_value(status) -> str:
    return status.value if isinstance(status, AppointmentStatus) else status


def find_overlapping(
    candidate_start: datetime,
    candidate_duration_minutes: int | None,
    existing: Iterable[ScheduledItem],
    exclude_id: int | None = None,
    ignored_statuses: frozenset[str] = NON_BLOCKING_STATUSES,
) -> ConflictCheck:
    candidate_end = candidate_start + timedelta(
        minutes=candidate_duration_minutes or DEFAULT_DURATION_MINUTES
    )
    return ConflictCheck(conflicts=[
        item
        for item in _candidates(existing, exclude_id, ignored_statuses)
        if intervals_overlap(candidate_start, candidate_end, item.appointment_date, appointment_end(item))
    ])


def booking_window(candidate_start: datetime, window_minutes: int = BOOKING_WINDOW_MINUTES) -> tuple[datetime, datetime]:
    """Open interval around the candidate start that an existing start must fall in."""
    delta = timedelta(minutes=window_minutes)
    return candidate_start - delta, candidate_start + delta


def find_booking_conflicts(
    candidate_start: datetime,
    existing: Iterable[ScheduledItem],
    exclude_id: int | None = None,
    window_minutes: int = BOOKING_WINDOW_MINUTES,
) -> ConflictCheck:
    window_start, window_end = booking_window(candidate_start, window_minutes)
    return ConflictCheck(conflicts=[
        item
        for item in _candidates(existing, exclude_id, NON_BLOCKING_STATUSES)
        if window_start < item.appointment_date < window_end
    ])


def has_conflict(
    candidate_start: datetime,
    candidate_duration_minutes: int | None,
    existing: Iterable[ScheduledItem],
    exclude_id: int | None = None,
) -> tuple[bool, list]:
    """True interval-overlap check returning the flag and the conflicting items."""
    check = find_overlapping(candidate_start, candidate_duration_minutes, existing, exclude_id)
    return check.has_conflict, check.conflicts
