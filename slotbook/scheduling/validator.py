import re
from datetime import date, datetime, time, timezone
from typing import Dict, List, Optional

from slotbook.core.errors import BookingValidationError
from slotbook.models.booking import BookingDraft
from slotbook.scheduling.time_window import (
    REFERENCE_TZ,
    minute_of_day,
    normalize_to_reference_midnight,
    parse_hhmm,
)

MSG_DATE_REQUIRED = "Date is required."
MSG_START_REQUIRED = "Start time is required."
MSG_END_REQUIRED = "End time is required."
MSG_INVALID_FORMAT = "Invalid date or time format."
MSG_PAST_DATE = "Cannot book appointments in the past."
MSG_PAST_START = "Start time cannot be in the past for today."
MSG_END_BEFORE_START = "End time must be after start time."

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _add(errors: Dict[str, List[str]], field: str, message: str):
    errors.setdefault(field, []).append(message)


def _parse_minutes(value: Optional[str]) -> Optional[int]:
    try:
        return parse_hhmm(value)
    except ValueError:
        return None


def _parse_day(value: str) -> date:
    """Strict YYYY-MM-DD; other ISO 8601 spellings are rejected."""
    if not _ISO_DATE.match(value):
        raise ValueError(f"Invalid date: {value!r}")
    return date.fromisoformat(value)


def _exists_locally(day: date, minutes: int) -> bool:
    """False for wall-clock times skipped by a DST jump in the reference timezone."""
    local = datetime.combine(day, time(minutes // 60, minutes % 60), tzinfo=REFERENCE_TZ)
    return local.astimezone(timezone.utc).astimezone(REFERENCE_TZ).replace(tzinfo=None) == local.replace(tzinfo=None)


def _check_order(errors: Dict[str, List[str]], start: Optional[int], end: Optional[int]):
    if start is not None and end is not None and start >= end:
        _add(errors, "end_time", MSG_END_BEFORE_START)


class BookingValidator:
    """
    Checks raw booking input against a single snapshot of "now".

    Every rule runs independently, so a caller sees all problems at once.
    """

    def validate(
        self,
        date_str: Optional[str],
        start_time: Optional[str],
        end_time: Optional[str],
        details: Optional[str],
        now: datetime,
    ) -> BookingDraft:
        errors: Dict[str, List[str]] = {}

        if not date_str:
            _add(errors, "date", MSG_DATE_REQUIRED)
        if not start_time:
            _add(errors, "start_time", MSG_START_REQUIRED)
        if not end_time:
            _add(errors, "end_time", MSG_END_REQUIRED)

        start = _parse_minutes(start_time)
        end = _parse_minutes(end_time)
        if end_time and end is None:
            _add(errors, "end_time", MSG_INVALID_FORMAT)

        booking_day: Optional[date] = None
        if date_str:
            try:
                booking_day = _parse_day(date_str)
                if start is None or not _exists_locally(booking_day, start):
                    raise ValueError(start_time)
            except ValueError:
                booking_day = None
                _add(errors, "date", MSG_INVALID_FORMAT)

        if booking_day is not None:
            today = normalize_to_reference_midnight(now)
            if booking_day < today:
                _add(errors, "date", MSG_PAST_DATE)
            elif booking_day == today and start <= minute_of_day(now):
                _add(errors, "start_time", MSG_PAST_START)

        _check_order(errors, start, end)

        if errors:
            raise BookingValidationError(errors)

        return BookingDraft(day=booking_day, start_time=start_time, end_time=end_time, details=details)

    def validate_times(self, start_time: Optional[str], end_time: Optional[str]):
        """Time-only rules used when editing an existing booking."""
        errors: Dict[str, List[str]] = {}

        if not start_time:
            _add(errors, "start_time", MSG_START_REQUIRED)
        elif _parse_minutes(start_time) is None:
            _add(errors, "start_time", MSG_INVALID_FORMAT)
        if not end_time:
            _add(errors, "end_time", MSG_END_REQUIRED)
        elif _parse_minutes(end_time) is None:
            _add(errors, "end_time", MSG_INVALID_FORMAT)

        _check_order(errors, _parse_minutes(start_time), _parse_minutes(end_time))

        if errors:
            raise BookingValidationError(errors)
