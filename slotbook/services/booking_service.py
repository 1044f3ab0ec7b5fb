from datetime import datetime
from typing import Dict, List, Optional

from slotbook.core.clock import Clock
from slotbook.core.errors import (
    AuthorizationError,
    BookingValidationError,
    ConflictError,
    NotFoundError,
    StorageError,
)
from slotbook.core.logger import logger
from slotbook.models.booking import (
    ActionResult,
    BookedDatesResult,
    Booking,
    BookingListResult,
    BookingRequest,
    BookingUpdateRequest,
    BookingView,
)
from slotbook.scheduling.conflicts import ConflictChecker
from slotbook.scheduling.status import classify_booking
from slotbook.scheduling.sweeper import PastAppointmentSweeper
from slotbook.scheduling.time_window import TimeWindow
from slotbook.scheduling.validator import BookingValidator
from slotbook.services.db_service import BookingStore


def _failure(message: str, status_code: int, errors: Optional[Dict[str, List[str]]] = None) -> ActionResult:
    return ActionResult(success=False, message=message, errors=errors, status_code=status_code)


def _general(detail: str) -> Dict[str, List[str]]:
    return {"general": [detail]}


class BookingService:
    """
    Booking use cases for one authenticated owner.

    Each public method samples the clock at most once and hands that instant
    to every rule it applies.
    """

    def __init__(self, store: BookingStore, clock: Clock):
        self.store = store
        self.clock = clock
        self.validator = BookingValidator()
        self.conflicts = ConflictChecker()

    def _require_owner(self, owner_id: Optional[str], action: str) -> str:
        if not owner_id:
            raise AuthorizationError(f"Authentication required to {action}. Please log in.")
        return owner_id

    async def create_booking(self, owner_id: Optional[str], req: BookingRequest) -> ActionResult:
        try:
            owner_id = self._require_owner(owner_id, "create a booking")
        except AuthorizationError as e:
            return _failure("Authentication failed.", 401, _general(e.detail))

        now = self.clock.now()
        logger.info(f"📥 Booking Request - Date: {req.date}, {req.start_time}-{req.end_time}, owner {owner_id}")

        try:
            draft = self.validator.validate(req.date, req.start_time, req.end_time, req.details, now)
        except BookingValidationError as e:
            logger.info(f"Booking validation failed: {e.errors}")
            return _failure(e.message, 400, e.errors)

        try:
            existing = await self.store.find_bookings_by_date(draft.day)
            self.conflicts.check(draft.window, existing)
            booking = await self.store.insert_booking(draft, owner_id)
        except ConflictError as e:
            logger.info(f"⛔ Slot {draft.day} {draft.start_time}-{draft.end_time} is taken")
            return _failure("Booking failed.", 409, _general(e.detail))
        except StorageError as e:
            logger.error(f"❌ Error creating booking: {e.detail}")
            return _failure(
                "Failed to create booking.",
                500,
                _general("An unexpected error occurred while creating the booking."),
            )

        logger.info(f"✅ New booking created: {booking.id} ({booking.day} {booking.start_time}-{booking.end_time})")
        return ActionResult(success=True, message="Booking created successfully!", booking_id=booking.id, status_code=201)

    def _to_view(self, booking: Booking, now: datetime) -> BookingView:
        return BookingView(
            id=booking.id,
            date=booking.day.isoformat(),
            start_time=booking.start_time,
            end_time=booking.end_time,
            status=booking.status,
            details=booking.details,
            display_status=classify_booking(booking, now),
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )

    async def list_bookings(self, owner_id: Optional[str]) -> BookingListResult:
        if not owner_id:
            return BookingListResult(success=False, message="Authentication required to fetch bookings.")

        try:
            bookings = await self.store.list_bookings_for_owner(owner_id)
        except StorageError as e:
            logger.error(f"❌ Error fetching bookings: {e.detail}")
            return BookingListResult(success=False, message="Failed to fetch bookings.")

        now = self.clock.now()
        logger.info(f"Fetched {len(bookings)} bookings for user {owner_id}.")
        return BookingListResult(success=True, data=[self._to_view(b, now) for b in bookings])

    async def update_booking(self, owner_id: Optional[str], booking_id: str, req: BookingUpdateRequest) -> ActionResult:
        """Change start/end/details of an owned booking. Date and owner never change."""
        try:
            owner_id = self._require_owner(owner_id, "update a booking")
        except AuthorizationError as e:
            return _failure("Authentication failed.", 401, _general(e.detail))

        try:
            self.validator.validate_times(req.start_time, req.end_time)
        except BookingValidationError as e:
            return _failure(e.message, 400, e.errors)

        not_found = "Booking not found or you do not have permission to update it."
        try:
            current = await self.store.get_booking(booking_id, owner_id)
            if current is None:
                raise NotFoundError(not_found)

            window = TimeWindow.from_strings(current.day, req.start_time, req.end_time)
            existing = await self.store.find_bookings_by_date(current.day)
            self.conflicts.check(window, existing, exclude_id=booking_id)

            fields = {"start_time": req.start_time, "end_time": req.end_time, "details": req.details}
            updated = await self.store.update_booking(booking_id, owner_id, fields)
            if updated is None:
                raise NotFoundError(not_found)
        except NotFoundError as e:
            logger.info(f"updateBooking: {booking_id} not found for user {owner_id}")
            return _failure(e.detail, 404)
        except ConflictError as e:
            return _failure("Booking failed.", 409, _general(e.detail))
        except StorageError as e:
            logger.error(f"❌ Error updating booking {booking_id}: {e.detail}")
            return _failure(
                "Failed to update booking.",
                500,
                _general("An unexpected error occurred while updating the booking."),
            )

        logger.info(f"✏️ Updated booking {booking_id} for user {owner_id}.")
        return ActionResult(success=True, message="Booking updated successfully!", booking_id=booking_id)

    async def delete_booking(self, owner_id: Optional[str], booking_id: str) -> ActionResult:
        if not owner_id:
            return _failure("Authentication failed.", 401, _general("Authentication required to delete a booking."))

        try:
            deleted = await self.store.delete_booking(booking_id, owner_id)
        except StorageError as e:
            logger.error(f"❌ Error deleting booking {booking_id}: {e.detail}")
            return _failure("Failed to delete booking.", 500)

        if not deleted:
            return _failure("Booking not found or you do not have permission to delete it.", 404)

        logger.info(f"🗑️ Deleted booking {booking_id} for user {owner_id}.")
        return ActionResult(success=True, message="Booking deleted successfully.")

    async def clear_past_appointments(self, owner_id: Optional[str]) -> ActionResult:
        if not owner_id:
            return _failure("Authentication failed.", 401, _general("Authentication required to clear past appointments."))

        try:
            deleted = await PastAppointmentSweeper(self.store, self.clock).sweep()
        except StorageError as e:
            logger.error(f"❌ Error clearing past appointments: {e.detail}")
            return _failure("Failed to clear past appointments.", 500)

        return ActionResult(
            success=True,
            message=f"Successfully cleared {deleted} past appointments.",
            deleted_count=deleted,
        )

    async def booked_dates(self) -> BookedDatesResult:
        """Distinct YYYY-MM-DD days that hold any booking, across all owners."""
        try:
            days = await self.store.list_booked_dates()
        except StorageError as e:
            logger.error(f"❌ Error fetching global booked dates: {e.detail}")
            return BookedDatesResult(success=False, message="Failed to fetch booked dates.")

        return BookedDatesResult(success=True, data=[d.isoformat() for d in days])
