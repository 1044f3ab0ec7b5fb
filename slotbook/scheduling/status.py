from datetime import datetime

from slotbook.models.booking import Booking, DisplayStatus
from slotbook.scheduling.time_window import is_before, minute_of_day, normalize_to_reference_midnight


def classify_booking(booking: Booking, now: datetime) -> DisplayStatus:
    """
    Time-derived display status of ``booking`` at ``now``.
    Pure; callers pass the same ``now`` for every booking in one response.
    """
    window = booking.window
    if is_before(window, now):
        return DisplayStatus.COMPLETE

    if window.day == normalize_to_reference_midnight(now) and window.start <= minute_of_day(now):
        return DisplayStatus.ONGOING

    return DisplayStatus.UPCOMING
