from typing import Iterable, Optional

from slotbook.core.errors import ConflictError
from slotbook.models.booking import Booking
from slotbook.scheduling.time_window import TimeWindow, overlaps


class ConflictChecker:
    """
    Detects overlap between a candidate window and stored bookings.

    Timeslots are exclusive across all owners: any booking on the same day
    can block the candidate.
    """

    def find_conflict(
        self,
        window: TimeWindow,
        existing: Iterable[Booking],
        exclude_id: Optional[str] = None,
    ) -> Optional[Booking]:
        for booking in existing:
            if exclude_id is not None and booking.id == exclude_id:
                continue
            if overlaps(window, booking.window):
                return booking
        return None

    def check(self, window: TimeWindow, existing: Iterable[Booking], exclude_id: Optional[str] = None):
        """Raise ConflictError if ``window`` overlaps any booking in ``existing``."""
        conflict = self.find_conflict(window, existing, exclude_id)
        if conflict is not None:
            raise ConflictError()
