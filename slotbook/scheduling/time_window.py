"""
Date/time primitives for timeslots.

Times of day are carried as integer minutes since midnight; the zero-padded
``HH:MM`` form only exists at the storage and display edges. Calendar dates
are always interpreted in the single reference timezone from settings.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from slotbook.core.config import settings

REFERENCE_TZ = ZoneInfo(settings.REFERENCE_TIMEZONE)

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_hhmm(value: str) -> int:
    """'09:30' -> 570. Raises ValueError for anything but strict 24h HH:MM."""
    match = _HHMM.match(value or "")
    if not match:
        raise ValueError(f"Invalid time of day: {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def to_reference(instant: datetime) -> datetime:
    """Express an instant in the reference timezone (naive input is taken as UTC)."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=ZoneInfo("UTC"))
    return instant.astimezone(REFERENCE_TZ)


def normalize_to_reference_midnight(instant: datetime) -> date:
    """Calendar day of ``instant`` in the reference timezone."""
    return to_reference(instant).date()


def reference_midnight(day: date) -> datetime:
    """Start-of-day instant for ``day`` in the reference timezone."""
    return datetime.combine(day, time.min, tzinfo=REFERENCE_TZ)


def next_reference_midnight(day: date) -> datetime:
    return reference_midnight(day + timedelta(days=1))


def minute_of_day(instant: datetime) -> int:
    """Reference-timezone time of day of ``instant``, truncated to the minute."""
    local = to_reference(instant)
    return local.hour * 60 + local.minute


@dataclass(frozen=True, order=True)
class TimeWindow:
    """One day's half-open ``[start, end)`` occupancy, in minutes."""

    day: date
    start: int
    end: int

    @classmethod
    def from_strings(cls, day: date, start_time: str, end_time: str) -> "TimeWindow":
        return cls(day, parse_hhmm(start_time), parse_hhmm(end_time))

    @property
    def start_time(self) -> str:
        return format_hhmm(self.start)

    @property
    def end_time(self) -> str:
        return format_hhmm(self.end)


def overlaps(a: TimeWindow, b: TimeWindow) -> bool:
    # Touching endpoints (a.end == b.start) are not an overlap
    return a.day == b.day and a.start < b.end and b.start < a.end


def is_before(window: TimeWindow, instant: datetime) -> bool:
    """True once ``window`` has fully elapsed at ``instant``."""
    today = normalize_to_reference_midnight(instant)
    if window.day < today:
        return True
    return window.day == today and window.end <= minute_of_day(instant)
