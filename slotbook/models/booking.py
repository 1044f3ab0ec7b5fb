from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from slotbook.scheduling.time_window import TimeWindow, normalize_to_reference_midnight


class BookingStatus(str, Enum):
    """Stored lifecycle tag, independent of the time-derived display status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class DisplayStatus(str, Enum):
    COMPLETE = "Complete"
    ONGOING = "Ongoing"
    UPCOMING = "Upcoming"


class Booking(BaseModel):
    id: str
    owner_id: str
    date: datetime  # reference-midnight instant of the booking day
    start_time: str
    end_time: str
    status: BookingStatus = BookingStatus.PENDING
    details: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def day(self) -> date:
        return normalize_to_reference_midnight(self.date)

    @property
    def window(self) -> TimeWindow:
        return TimeWindow.from_strings(self.day, self.start_time, self.end_time)


class BookingDraft(BaseModel):
    """Validated, normalized booking input that has not been stored yet."""

    day: date
    start_time: str
    end_time: str
    details: Optional[str] = None

    @property
    def window(self) -> TimeWindow:
        return TimeWindow.from_strings(self.day, self.start_time, self.end_time)


# --- Incoming Request Models ---

class BookingRequest(BaseModel):
    date: Optional[str] = None  # YYYY-MM-DD
    start_time: Optional[str] = None  # HH:MM, 24h
    end_time: Optional[str] = None
    details: Optional[str] = None


class BookingUpdateRequest(BaseModel):
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    details: Optional[str] = None


# --- Outgoing Response Models ---

class BookingView(BaseModel):
    id: str
    date: str  # YYYY-MM-DD in the reference timezone
    start_time: str
    end_time: str
    status: BookingStatus
    details: Optional[str] = None
    display_status: DisplayStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ActionResult(BaseModel):
    """
    Uniform outcome of every service operation.
    Non-field errors live under the 'general' key of ``errors``.
    """

    success: bool = False
    message: str
    errors: Optional[Dict[str, List[str]]] = None
    booking_id: Optional[str] = None
    deleted_count: Optional[int] = None
    status_code: int = Field(default=200, exclude=True)


class BookingListResult(BaseModel):
    success: bool
    message: Optional[str] = None
    data: List[BookingView] = Field(default_factory=list)


class BookedDatesResult(BaseModel):
    success: bool
    message: Optional[str] = None
    data: List[str] = Field(default_factory=list)
