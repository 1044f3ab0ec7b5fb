from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING

from slotbook.core.logger import logger
from slotbook.models.booking import Booking
from slotbook.scheduling.time_window import (
    format_hhmm,
    minute_of_day,
    next_reference_midnight,
    normalize_to_reference_midnight,
    reference_midnight,
)

if TYPE_CHECKING:
    from slotbook.core.clock import Clock
    from slotbook.services.db_service import BookingStore


@dataclass(frozen=True)
class SweepCriteria:
    """
    Selects bookings that are over at a given instant.

    A booking from today only qualifies once its end is strictly earlier than
    the current minute, so one ending exactly now is kept until the next
    minute even though the dashboard already shows it as Complete.
    """

    today: date
    today_start: datetime
    tomorrow_start: datetime
    cutoff_minute: int

    @property
    def cutoff(self) -> str:
        """Current time of day as HH:MM, for string-typed storage filters."""
        return format_hhmm(self.cutoff_minute)

    @classmethod
    def at(cls, now: datetime) -> "SweepCriteria":
        today = normalize_to_reference_midnight(now)
        return cls(
            today=today,
            today_start=reference_midnight(today),
            tomorrow_start=next_reference_midnight(today),
            cutoff_minute=minute_of_day(now),
        )

    def matches(self, booking: Booking) -> bool:
        day = booking.day
        if day < self.today:
            return True
        return day == self.today and booking.window.end < self.cutoff_minute


class PastAppointmentSweeper:
    def __init__(self, store: "BookingStore", clock: "Clock"):
        self.store = store
        self.clock = clock

    async def sweep(self) -> int:
        """Delete every elapsed booking; returns how many were removed."""
        criteria = SweepCriteria.at(self.clock.now())
        deleted = await self.store.delete_bookings_matching(criteria)
        logger.info(f"🧹 Cleared {deleted} past appointments (cutoff {criteria.today} {criteria.cutoff}).")
        return deleted
