from datetime import datetime

import pytest

from factories import CHICAGO, TODAY, TOMORROW
from slotbook.core.errors import BookingValidationError
from slotbook.scheduling.validator import (
    MSG_DATE_REQUIRED,
    MSG_END_BEFORE_START,
    MSG_END_REQUIRED,
    MSG_INVALID_FORMAT,
    MSG_PAST_DATE,
    MSG_PAST_START,
    MSG_START_REQUIRED,
    BookingValidator,
)

validator = BookingValidator()


def errors_for(date_str, start, end, now):
    with pytest.raises(BookingValidationError) as exc_info:
        validator.validate(date_str, start, end, None, now)
    return exc_info.value.errors


def test_valid_future_booking_returns_draft(now):
    draft = validator.validate("2025-06-13", "09:00", "10:00", "Haircut", now)
    assert draft.day == TOMORROW
    assert draft.start_time == "09:00"
    assert draft.end_time == "10:00"
    assert draft.details == "Haircut"
    assert draft.window.start == 540


def test_later_today_is_allowed(now):
    draft = validator.validate(TODAY.isoformat(), "09:31", "10:00", None, now)
    assert draft.day == TODAY


def test_missing_fields_are_all_reported(now):
    errors = errors_for(None, None, None, now)
    assert errors == {
        "date": [MSG_DATE_REQUIRED],
        "start_time": [MSG_START_REQUIRED],
        "end_time": [MSG_END_REQUIRED],
    }


def test_start_one_minute_ago_today_is_rejected(now):
    errors = errors_for(TODAY.isoformat(), "09:29", "10:00", now)
    assert errors == {"start_time": [MSG_PAST_START]}


def test_start_in_current_minute_is_rejected(now):
    errors = errors_for(TODAY.isoformat(), "09:30", "10:00", now)
    assert errors["start_time"] == [MSG_PAST_START]


def test_end_before_start_is_rejected(now):
    errors = errors_for("2025-06-13", "10:00", "09:00", now)
    assert errors == {"end_time": [MSG_END_BEFORE_START]}


def test_equal_start_and_end_is_rejected(now):
    errors = errors_for("2025-06-13", "10:00", "10:00", now)
    assert errors["end_time"] == [MSG_END_BEFORE_START]


def test_past_date_and_bad_order_reported_together(now):
    errors = errors_for("2025-06-11", "10:00", "09:00", now)
    assert errors == {"date": [MSG_PAST_DATE], "end_time": [MSG_END_BEFORE_START]}


@pytest.mark.parametrize("date_str", ["2025-13-40", "20250613", "2025-W24-5", "2025-164", "2025-6-13"])
def test_unparseable_date(date_str, now):
    errors = errors_for(date_str, "09:00", "10:00", now)
    assert errors == {"date": [MSG_INVALID_FORMAT]}


def test_messages_accumulate_per_field(now):
    # Missing start makes the combined date/time unparseable too
    errors = errors_for("2025-06-13", None, "10:00", now)
    assert errors == {"date": [MSG_INVALID_FORMAT], "start_time": [MSG_START_REQUIRED]}


def test_malformed_time_is_a_date_format_error(now):
    errors = errors_for("2025-06-13", "9am", "10:00", now)
    assert errors == {"date": [MSG_INVALID_FORMAT]}


def test_validate_times_for_updates():
    validator.validate_times("09:00", "10:00")

    with pytest.raises(BookingValidationError) as exc_info:
        validator.validate_times("11:00", "10:00")
    assert exc_info.value.errors == {"end_time": [MSG_END_BEFORE_START]}

    with pytest.raises(BookingValidationError) as exc_info:
        validator.validate_times(None, "25:00")
    assert exc_info.value.errors == {"start_time": [MSG_START_REQUIRED], "end_time": [MSG_INVALID_FORMAT]}


def test_malformed_end_time(now):
    errors = errors_for("2025-06-13", "09:00", "10am", now)
    assert errors == {"end_time": [MSG_INVALID_FORMAT]}


def test_time_skipped_by_spring_forward_is_rejected():
    # 2026-03-08 02:00 CST jumps straight to 03:00 CDT in Chicago
    now = datetime(2026, 3, 1, 9, 0, tzinfo=CHICAGO)
    errors = errors_for("2026-03-08", "02:15", "02:45", now)
    assert errors == {"date": [MSG_INVALID_FORMAT]}

    draft = validator.validate("2026-03-08", "03:15", "03:45", None, now)
    assert draft.start_time == "03:15"


def test_repeated_fall_back_hour_is_accepted():
    now = datetime(2026, 10, 25, 9, 0, tzinfo=CHICAGO)
    draft = validator.validate("2026-11-01", "01:15", "01:45", None, now)
    assert draft.window.start == 75
