"""
Process-local store for development and tests.

Mirrors the Supabase tables closely enough that the services cannot tell the
difference, including the (date, start_time, end_time) and email uniqueness
constraints.
"""
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from slotbook.core.errors import DuplicateKeyError
from slotbook.core.logger import logger
from slotbook.models.booking import Booking, BookingDraft
from slotbook.models.user import User
from slotbook.scheduling.sweeper import SweepCriteria
from slotbook.scheduling.time_window import reference_midnight


class InMemoryStore:
    def __init__(self):
        self.bookings: Dict[str, Booking] = {}
        self.users: Dict[str, User] = {}

    async def connect(self):
        logger.info("🗃️ Using in-memory store")

    async def close(self):
        self.bookings.clear()
        self.users.clear()

    def _slot_taken(self, day: date, start_time: str, end_time: str, ignore_id: Optional[str] = None) -> bool:
        return any(
            b.id != ignore_id and b.day == day and b.start_time == start_time and b.end_time == end_time
            for b in self.bookings.values()
        )

    # --- Bookings ---

    async def find_bookings_by_date(self, day: date) -> List[Booking]:
        return [b for b in self.bookings.values() if b.day == day]

    async def insert_booking(self, draft: BookingDraft, owner_id: str) -> Booking:
        if self._slot_taken(draft.day, draft.start_time, draft.end_time):
            raise DuplicateKeyError("bookings (date, start_time, end_time)")
        now = datetime.now(timezone.utc)
        booking = Booking(
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            date=reference_midnight(draft.day),
            start_time=draft.start_time,
            end_time=draft.end_time,
            details=draft.details,
            created_at=now,
            updated_at=now,
        )
        self.bookings[booking.id] = booking
        return booking

    async def get_booking(self, booking_id: str, owner_id: str) -> Optional[Booking]:
        booking = self.bookings.get(booking_id)
        if booking and booking.owner_id == owner_id:
            return booking
        return None

    async def list_bookings_for_owner(self, owner_id: str) -> List[Booking]:
        owned = [b for b in self.bookings.values() if b.owner_id == owner_id]
        return sorted(owned, key=lambda b: (b.date, b.start_time))

    async def update_booking(self, booking_id: str, owner_id: str, fields: Dict[str, Any]) -> Optional[Booking]:
        booking = await self.get_booking(booking_id, owner_id)
        if not booking:
            return None
        updated = booking.model_copy(update={**fields, "updated_at": datetime.now(timezone.utc)})
        if self._slot_taken(updated.day, updated.start_time, updated.end_time, ignore_id=booking_id):
            raise DuplicateKeyError("bookings (date, start_time, end_time)")
        self.bookings[booking_id] = updated
        return updated

    async def delete_booking(self, booking_id: str, owner_id: str) -> bool:
        if await self.get_booking(booking_id, owner_id) is None:
            return False
        del self.bookings[booking_id]
        return True

    async def delete_bookings_matching(self, criteria: SweepCriteria) -> int:
        doomed = [b.id for b in self.bookings.values() if criteria.matches(b)]
        for booking_id in doomed:
            del self.bookings[booking_id]
        return len(doomed)

    async def list_booked_dates(self) -> List[date]:
        return sorted({b.day for b in self.bookings.values()})

    # --- Users ---

    async def find_user_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    async def get_user(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    async def create_user(self, name: str, email: str, password_hash: str) -> User:
        if await self.find_user_by_email(email):
            raise DuplicateKeyError("users (email)")
        user = User(id=uuid.uuid4().hex, name=name, email=email, password_hash=password_hash)
        self.users[user.id] = user
        return user

    async def list_users(self) -> List[User]:
        return list(self.users.values())
