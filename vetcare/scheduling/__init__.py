"""Scheduling core - slot resolution, conflict detection and lifecycle rules."""

from vetcare.scheduling.availability import resolve_slots, day_of_week, SLOT_INTERVAL_MINUTES
from vetcare.scheduling.conflicts import (
    find_booking_conflicts,
    find_overlapping,
    has_conflict,
    intervals_overlap,
    BOOKING_WINDOW_MINUTES,
)
from vetcare.scheduling.state_machine import (
    AppointmentAction,
    InvalidTransition,
    next_status,
    can_apply,
    is_terminal,
)
from vetcare.scheduling.locks import VetBookingLocks

__all__ = [
    "resolve_slots",
    "day_of_week",
    "SLOT_INTERVAL_MINUTES",
    "find_booking_conflicts",
    "find_overlapping",
    "has_conflict",
    "intervals_overlap",
    "BOOKING_WINDOW_MINUTES",
    "AppointmentAction",
    "InvalidTransition",
    "next_status",
    "can_apply",
    "is_terminal",
    "VetBookingLocks",
]
