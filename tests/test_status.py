from factories import TODAY, TOMORROW, YESTERDAY, make_booking
from slotbook.models.booking import DisplayStatus
from slotbook.scheduling.status import classify_booking


def test_yesterday_is_complete(now):
    assert classify_booking(make_booking(YESTERDAY, "20:00", "21:00"), now) == DisplayStatus.COMPLETE


def test_today_ending_now_is_complete(now):
    assert classify_booking(make_booking(TODAY, "08:30", "09:30"), now) == DisplayStatus.COMPLETE


def test_today_in_progress_is_ongoing(now):
    assert classify_booking(make_booking(TODAY, "09:00", "10:00"), now) == DisplayStatus.ONGOING
    assert classify_booking(make_booking(TODAY, "09:30", "10:30"), now) == DisplayStatus.ONGOING


def test_later_today_is_upcoming(now):
    assert classify_booking(make_booking(TODAY, "09:31", "10:00"), now) == DisplayStatus.UPCOMING


def test_future_day_is_upcoming(now):
    assert classify_booking(make_booking(TOMORROW, "00:00", "01:00"), now) == DisplayStatus.UPCOMING


def test_same_inputs_same_status(now):
    booking = make_booking(TODAY, "09:00", "10:00")
    assert classify_booking(booking, now) == classify_booking(booking, now)
