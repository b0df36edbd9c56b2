"""Slot availability calculator.

Pure functions only: callers load the operating window and the existing
reservations and pass them in, so the same inputs always produce the same
slots and nothing here needs locking.

Slots are aligned to the requested service's duration, starting at the
opening time. A candidate ``[m, m + duration)`` is rejected when it
overlaps any live reservation ``[r, r + its_own_duration)``.

The ``sampled`` policy reproduces the older behaviour of probing the
candidate every ``granularity`` minutes and only rejecting it when a probe
lands exactly on a reservation start. It misses overlaps between services
of unequal length that are not offset by a multiple of the granularity and
is kept only for parity checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Iterable, Optional

from app.core.config import BookingConfig, parse_clock
from app.models.appointment import AppointmentStatus
from app.models.business import WEEKDAYS


@dataclass(frozen=True)
class OperatingWindow:
    opening: time
    closing: time
    working_days: frozenset[str] = field(default_factory=lambda: frozenset(WEEKDAYS))

    @property
    def start_minute(self) -> int:
        return minutes_from_midnight(self.opening)

    @property
    def end_minute(self) -> int:
        return minutes_from_midnight(self.closing)

    def is_open_on(self, day: date) -> bool:
        return WEEKDAYS[day.weekday()] in self.working_days

    def narrowed_to(
        self,
        opening: Optional[time] = None,
        closing: Optional[time] = None,
        working_days: Optional[Iterable[str]] = None,
    ) -> "OperatingWindow":
        """Intersect this window with a narrower personal schedule."""
        new_opening = max(self.opening, opening) if opening else self.opening
        new_closing = min(self.closing, closing) if closing else self.closing
        days = self.working_days
        if working_days is not None:
            days = days & frozenset(d.lower() for d in working_days)
        return OperatingWindow(opening=new_opening, closing=new_closing, working_days=days)

    @classmethod
    def from_settings(
        cls,
        opening: Optional[time],
        closing: Optional[time],
        working_days: Optional[Iterable[str]],
        config: BookingConfig,
    ) -> "OperatingWindow":
        """Build a window from business settings, falling back to configured defaults."""
        return cls(
            opening=opening or parse_clock(config.default_opening_time),
            closing=closing or parse_clock(config.default_closing_time),
            working_days=(
                frozenset(d.lower() for d in working_days)
                if working_days is not None
                else frozenset(WEEKDAYS)
            ),
        )


@dataclass(frozen=True)
class ExistingReservation:
    """A reservation already on the books, with its own service duration."""

    start: time
    duration_minutes: int
    status: str = AppointmentStatus.PENDING

    @property
    def start_minute(self) -> int:
        return minutes_from_midnight(self.start)

    @property
    def is_active(self) -> bool:
        return self.status in AppointmentStatus.ACTIVE


def minutes_from_midnight(value: time | str) -> int:
    if isinstance(value, str):
        value = parse_clock(value)
    return value.hour * 60 + value.minute


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def intervals_overlap(a_start: int, a_length: int, b_start: int, b_length: int) -> bool:
    """Half-open interval test: ``[a, a+len)`` vs ``[b, b+len)``."""
    return a_start < b_start + b_length and b_start < a_start + a_length


def _occupied(reservations: Iterable[ExistingReservation]) -> list[tuple[int, int]]:
    return [
        (r.start_minute, r.duration_minutes)
        for r in reservations
        if r.is_active and r.duration_minutes > 0
    ]


def _sampled_conflict(
    candidate: int, duration: int, reserved_starts: set[int], granularity: int
) -> bool:
    return any(
        offset in reserved_starts
        for offset in range(candidate, candidate + duration, granularity)
    )


def _taken(
    candidate: int,
    duration: int,
    occupied: list[tuple[int, int]],
    policy: str,
    granularity: int,
) -> bool:
    if policy == "sampled":
        return _sampled_conflict(
            candidate, duration, {start for start, _ in occupied}, granularity
        )
    return any(
        intervals_overlap(candidate, duration, start, length)
        for start, length in occupied
    )


def conflicts_with(
    candidate: int,
    duration: int,
    reservations: Iterable[ExistingReservation],
    policy: str = "exact",
    granularity: int = 30,
) -> bool:
    """Return True when a candidate slot collides with a live reservation."""
    return _taken(candidate, duration, _occupied(reservations), policy, granularity)


def slot_fits_window(window: OperatingWindow, start_minute: int, duration: int) -> bool:
    return (
        duration > 0
        and window.start_minute <= start_minute
        and start_minute + duration <= window.end_minute
    )


def calculate_available_slots(
    window: OperatingWindow,
    service_duration: int,
    reservations: Iterable[ExistingReservation],
    day: Optional[date] = None,
    policy: str = "exact",
    granularity: int = 30,
) -> list[str]:
    """Ordered ``HH:MM`` start times that fit the window and collide with nothing.

    An empty list means "no availability", never an error: a non-positive
    duration, an empty or inverted window, or a closed weekday all yield ``[]``.
    """
    start_min = window.start_minute
    end_min = window.end_minute
    if service_duration <= 0 or start_min >= end_min:
        return []
    if day is not None and not window.is_open_on(day):
        return []

    occupied = _occupied(reservations)

    slots: list[str] = []
    for candidate in range(start_min, end_min - service_duration + 1, service_duration):
        if not _taken(candidate, service_duration, occupied, policy, granularity):
            slots.append(format_minutes(candidate))
    return slots
