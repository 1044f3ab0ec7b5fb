from unittest.mock import AsyncMock

import pytest

from factories import TODAY, TOMORROW, YESTERDAY, FixedClock, make_booking
from slotbook.core.errors import DuplicateKeyError, StorageError
from slotbook.models.booking import BookingRequest, BookingUpdateRequest, DisplayStatus
from slotbook.services.booking_service import BookingService

OWNER = "owner-1"


@pytest.fixture
def service(store, clock):
    return BookingService(store, clock)


def request_for(date_str="2025-06-13", start="09:00", end="10:00", details=None):
    return BookingRequest(date=date_str, start_time=start, end_time=end, details=details)


@pytest.mark.asyncio
async def test_create_booking(service, store):
    result = await service.create_booking(OWNER, request_for(details="Beard trim"))

    assert result.success is True
    assert result.message == "Booking created successfully!"
    stored = store.bookings[result.booking_id]
    assert stored.owner_id == OWNER
    assert stored.day == TOMORROW
    assert stored.details == "Beard trim"
    assert stored.status == "pending"


@pytest.mark.asyncio
async def test_create_requires_authentication(service, store):
    result = await service.create_booking(None, request_for())

    assert result.success is False
    assert result.status_code == 401
    assert result.errors == {"general": ["Authentication required to create a booking. Please log in."]}
    assert store.bookings == {}


@pytest.mark.asyncio
async def test_create_returns_field_errors(service, store):
    result = await service.create_booking(OWNER, request_for(start="10:00", end="09:00"))

    assert result.success is False
    assert result.status_code == 400
    assert result.errors == {"end_time": ["End time must be after start time."]}
    assert store.bookings == {}


@pytest.mark.asyncio
async def test_overlap_with_another_owner_is_rejected(service, store):
    store.bookings["taken"] = make_booking(TOMORROW, "09:30", "10:30", booking_id="taken", owner_id="other")

    result = await service.create_booking(OWNER, request_for())

    assert result.success is False
    assert result.status_code == 409
    assert result.errors["general"] == ["This time slot overlaps with an existing booking. Please choose another time."]
    assert list(store.bookings) == ["taken"]


@pytest.mark.asyncio
async def test_touching_slot_is_accepted(service, store):
    store.bookings["next"] = make_booking(TOMORROW, "10:00", "11:00", booking_id="next", owner_id="other")

    result = await service.create_booking(OWNER, request_for())
    assert result.success is True
    assert len(store.bookings) == 2


@pytest.mark.asyncio
async def test_storage_failures_are_generic(clock):
    store = AsyncMock()
    store.find_bookings_by_date.return_value = []
    store.insert_booking.side_effect = DuplicateKeyError("duplicate key value violates unique constraint")
    service = BookingService(store, clock)

    result = await service.create_booking(OWNER, request_for())

    assert result.success is False
    assert result.status_code == 500
    assert result.errors == {"general": ["An unexpected error occurred while creating the booking."]}
    assert "duplicate" not in result.model_dump_json()


@pytest.mark.asyncio
async def test_list_bookings_with_display_status(service, store):
    store.bookings["a"] = make_booking(TODAY, "09:00", "10:00", booking_id="a")
    store.bookings["b"] = make_booking(YESTERDAY, "09:00", "10:00", booking_id="b")
    store.bookings["c"] = make_booking(TOMORROW, "09:00", "10:00", booking_id="c")
    store.bookings["x"] = make_booking(TOMORROW, "12:00", "13:00", booking_id="x", owner_id="other")

    result = await service.list_bookings(OWNER)

    assert result.success is True
    assert [b.id for b in result.data] == ["b", "a", "c"]
    assert [b.display_status for b in result.data] == [
        DisplayStatus.COMPLETE,
        DisplayStatus.ONGOING,
        DisplayStatus.UPCOMING,
    ]
    assert result.data[0].date == "2025-06-11"


@pytest.mark.asyncio
async def test_list_requires_authentication(service):
    result = await service.list_bookings(None)
    assert result.success is False
    assert result.data == []


@pytest.mark.asyncio
async def test_update_booking(service, store):
    store.bookings["mine"] = make_booking(TOMORROW, "09:00", "10:00", booking_id="mine")

    result = await service.update_booking(
        OWNER, "mine", BookingUpdateRequest(start_time="09:30", end_time="10:30", details="moved")
    )

    assert result.success is True
    updated = store.bookings["mine"]
    assert (updated.start_time, updated.end_time, updated.details) == ("09:30", "10:30", "moved")
    assert updated.day == TOMORROW


@pytest.mark.asyncio
async def test_update_into_someone_elses_slot(service, store):
    store.bookings["mine"] = make_booking(TOMORROW, "09:00", "10:00", booking_id="mine")
    store.bookings["theirs"] = make_booking(TOMORROW, "11:00", "12:00", booking_id="theirs", owner_id="other")

    result = await service.update_booking(OWNER, "mine", BookingUpdateRequest(start_time="10:30", end_time="11:30"))

    assert result.success is False
    assert result.status_code == 409
    assert store.bookings["mine"].start_time == "09:00"


@pytest.mark.asyncio
async def test_update_not_owned(service, store):
    store.bookings["theirs"] = make_booking(TOMORROW, "11:00", "12:00", booking_id="theirs", owner_id="other")

    result = await service.update_booking(OWNER, "theirs", BookingUpdateRequest(start_time="13:00", end_time="14:00"))

    assert result.success is False
    assert result.status_code == 404
    assert result.message == "Booking not found or you do not have permission to update it."
    assert store.bookings["theirs"].start_time == "11:00"


@pytest.mark.asyncio
async def test_update_validates_times(service, store):
    store.bookings["mine"] = make_booking(TOMORROW, "09:00", "10:00", booking_id="mine")

    result = await service.update_booking(OWNER, "mine", BookingUpdateRequest(start_time="10:00", end_time="09:00"))

    assert result.status_code == 400
    assert result.errors == {"end_time": ["End time must be after start time."]}


@pytest.mark.asyncio
async def test_delete_booking(service, store):
    store.bookings["mine"] = make_booking(TOMORROW, "09:00", "10:00", booking_id="mine")
    store.bookings["theirs"] = make_booking(TOMORROW, "11:00", "12:00", booking_id="theirs", owner_id="other")

    assert (await service.delete_booking(OWNER, "theirs")).status_code == 404
    result = await service.delete_booking(OWNER, "mine")

    assert result.success is True
    assert list(store.bookings) == ["theirs"]


@pytest.mark.asyncio
async def test_clear_past_appointments(service, store):
    store.bookings["old"] = make_booking(YESTERDAY, "09:00", "10:00", booking_id="old", owner_id="other")
    store.bookings["new"] = make_booking(TOMORROW, "09:00", "10:00", booking_id="new")

    result = await service.clear_past_appointments(OWNER)

    assert result.success is True
    assert result.deleted_count == 1
    assert result.message == "Successfully cleared 1 past appointments."
    assert (await service.clear_past_appointments(OWNER)).deleted_count == 0


@pytest.mark.asyncio
async def test_clear_past_reports_storage_failure(clock):
    store = AsyncMock()
    store.delete_bookings_matching.side_effect = StorageError("connection reset")
    result = await BookingService(store, clock).clear_past_appointments(OWNER)

    assert result.success is False
    assert result.message == "Failed to clear past appointments."


@pytest.mark.asyncio
async def test_booked_dates(service, store):
    store.bookings["a"] = make_booking(TOMORROW, "09:00", "10:00", booking_id="a")
    store.bookings["b"] = make_booking(TOMORROW, "11:00", "12:00", booking_id="b", owner_id="other")
    store.bookings["c"] = make_booking(TODAY, "11:00", "12:00", booking_id="c")

    result = await service.booked_dates()
    assert result.data == ["2025-06-12", "2025-06-13"]


class CountingClock(FixedClock):
    def __init__(self, current):
        super().__init__(current)
        self.reads = 0

    def now(self):
        self.reads += 1
        return super().now()


@pytest.mark.asyncio
async def test_clock_is_read_once_per_operation(store, now):
    clock = CountingClock(now)
    service = BookingService(store, clock)

    await service.create_booking(OWNER, request_for("2025-06-12", "10:00", "11:00"))
    assert clock.reads == 1

    await service.list_bookings(OWNER)
    assert clock.reads == 2


@pytest.mark.asyncio
async def test_unauthenticated_delete_and_clear_report_general_error(service, store):
    store.bookings["old"] = make_booking(YESTERDAY, "09:00", "10:00", booking_id="old")

    deleted = await service.delete_booking(None, "old")
    cleared = await service.clear_past_appointments(None)

    assert deleted.status_code == cleared.status_code == 401
    assert deleted.errors == {"general": ["Authentication required to delete a booking."]}
    assert cleared.errors == {"general": ["Authentication required to clear past appointments."]}
    assert list(store.bookings) == ["old"]
