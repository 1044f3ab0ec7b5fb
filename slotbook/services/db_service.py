from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from postgrest.exceptions import APIError
from supabase import AsyncClient, create_async_client

from slotbook.core.config import Settings
from slotbook.core.errors import DuplicateKeyError, StorageError
from slotbook.core.logger import logger
from slotbook.models.booking import Booking, BookingDraft, BookingStatus
from slotbook.models.user import User
from slotbook.scheduling.sweeper import SweepCriteria
from slotbook.scheduling.time_window import normalize_to_reference_midnight, reference_midnight

UNIQUE_VIOLATION = "23505"


class BookingStore(Protocol):
    """Persistence operations the booking and account services rely on."""

    async def connect(self) -> None: ...
    async def close(self) -> None: ...

    async def find_bookings_by_date(self, day: date) -> List[Booking]: ...
    async def insert_booking(self, draft: BookingDraft, owner_id: str) -> Booking: ...
    async def get_booking(self, booking_id: str, owner_id: str) -> Optional[Booking]: ...
    async def list_bookings_for_owner(self, owner_id: str) -> List[Booking]: ...
    async def update_booking(self, booking_id: str, owner_id: str, fields: Dict[str, Any]) -> Optional[Booking]: ...
    async def delete_booking(self, booking_id: str, owner_id: str) -> bool: ...
    async def delete_bookings_matching(self, criteria: SweepCriteria) -> int: ...
    async def list_booked_dates(self) -> List[date]: ...

    async def find_user_by_email(self, email: str) -> Optional[User]: ...
    async def get_user(self, user_id: str) -> Optional[User]: ...
    async def create_user(self, name: str, email: str, password_hash: str) -> User: ...
    async def list_users(self) -> List[User]: ...


def _booking_from_row(row: Dict[str, Any]) -> Booking:
    return Booking(**{**row, "id": str(row["id"]), "owner_id": str(row["owner_id"])})


def _user_from_row(row: Dict[str, Any]) -> User:
    return User(**{**row, "id": str(row["id"])})


class SupabaseStore:
    """
    Supabase-backed store.
    Expects `users` and `bookings` tables as defined in sql/schema.sql.
    """

    def __init__(self, url: str, key: str):
        self.url = url
        self.key = key
        self._client: Optional[AsyncClient] = None

    async def connect(self):
        if self._client:
            return
        if not self.url or not self.key:
            raise StorageError("Supabase credentials missing (SUPABASE_URL / SUPABASE_KEY).")
        self._client = await create_async_client(self.url, self.key)
        logger.info("✅ Supabase Async client initialized")

    async def close(self):
        if self._client:
            await self._client.postgrest.aclose()
            self._client = None
            logger.info("🔌 Supabase client closed")

    @property
    def client(self) -> AsyncClient:
        if not self._client:
            raise StorageError("Supabase client used before connect().")
        return self._client

    async def _execute(self, query, action: str):
        try:
            return await query.execute()
        except APIError as e:
            logger.error(f"❌ DB Error ({action}): {e}")
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateKeyError(str(e)) from e
            raise StorageError(str(e)) from e
        except Exception as e:
            logger.error(f"❌ DB Error ({action}): {e}")
            raise StorageError(str(e)) from e

    # --- Bookings ---

    async def find_bookings_by_date(self, day: date) -> List[Booking]:
        query = self.client.table("bookings").select("*").eq("date", reference_midnight(day).isoformat())
        response = await self._execute(query, "find_bookings_by_date")
        return [_booking_from_row(row) for row in response.data or []]

    async def insert_booking(self, draft: BookingDraft, owner_id: str) -> Booking:
        booking_data = {
            "owner_id": owner_id,
            "date": reference_midnight(draft.day).isoformat(),
            "start_time": draft.start_time,
            "end_time": draft.end_time,
            "details": draft.details,
            "status": BookingStatus.PENDING.value,
        }
        response = await self._execute(self.client.table("bookings").insert(booking_data), "insert_booking")
        if not response.data:
            raise StorageError("Insert returned no rows.")
        return _booking_from_row(response.data[0])

    async def get_booking(self, booking_id: str, owner_id: str) -> Optional[Booking]:
        query = self.client.table("bookings").select("*").eq("id", booking_id).eq("owner_id", owner_id)
        response = await self._execute(query, "get_booking")
        if response.data:
            return _booking_from_row(response.data[0])
        return None

    async def list_bookings_for_owner(self, owner_id: str) -> List[Booking]:
        query = self.client.table("bookings")\
            .select("*")\
            .eq("owner_id", owner_id)\
            .order("date", desc=False)\
            .order("start_time", desc=False)
        response = await self._execute(query, "list_bookings_for_owner")
        return [_booking_from_row(row) for row in response.data or []]

    async def update_booking(self, booking_id: str, owner_id: str, fields: Dict[str, Any]) -> Optional[Booking]:
        payload = {**fields, "updated_at": datetime.now(timezone.utc).isoformat()}
        query = self.client.table("bookings").update(payload).eq("id", booking_id).eq("owner_id", owner_id)
        response = await self._execute(query, "update_booking")
        if response.data:
            return _booking_from_row(response.data[0])
        return None

    async def delete_booking(self, booking_id: str, owner_id: str) -> bool:
        query = self.client.table("bookings").delete().eq("id", booking_id).eq("owner_id", owner_id)
        response = await self._execute(query, "delete_booking")
        return bool(response.data)

    async def delete_bookings_matching(self, criteria: SweepCriteria) -> int:
        earlier = await self._execute(
            self.client.table("bookings").delete().lt("date", criteria.today_start.isoformat()),
            "delete_bookings_matching",
        )
        today = await self._execute(
            self.client.table("bookings").delete()
            .gte("date", criteria.today_start.isoformat())
            .lt("date", criteria.tomorrow_start.isoformat())
            .lt("end_time", criteria.cutoff),
            "delete_bookings_matching",
        )
        return len(earlier.data or []) + len(today.data or [])

    async def list_booked_dates(self) -> List[date]:
        response = await self._execute(self.client.table("bookings").select("date"), "list_booked_dates")
        days = {
            normalize_to_reference_midnight(datetime.fromisoformat(row["date"].replace("Z", "+00:00")))
            for row in response.data or []
        }
        return sorted(days)

    # --- Users ---

    async def find_user_by_email(self, email: str) -> Optional[User]:
        response = await self._execute(self.client.table("users").select("*").eq("email", email), "find_user_by_email")
        if response.data:
            return _user_from_row(response.data[0])
        return None

    async def get_user(self, user_id: str) -> Optional[User]:
        response = await self._execute(self.client.table("users").select("*").eq("id", user_id), "get_user")
        if response.data:
            return _user_from_row(response.data[0])
        return None

    async def create_user(self, name: str, email: str, password_hash: str) -> User:
        new_user = {"name": name, "email": email, "password_hash": password_hash}
        response = await self._execute(self.client.table("users").insert(new_user), "create_user")
        if not response.data:
            raise StorageError("Insert returned no rows.")
        logger.info(f"🆕 New user created: {email}")
        return _user_from_row(response.data[0])

    async def list_users(self) -> List[User]:
        response = await self._execute(self.client.table("users").select("*"), "list_users")
        return [_user_from_row(row) for row in response.data or []]


def build_store(settings: Settings) -> BookingStore:
    """Pick the store implementation named by STORAGE_BACKEND."""
    if settings.STORAGE_BACKEND == "memory":
        from slotbook.services.memory_store import InMemoryStore
        return InMemoryStore()
    if settings.STORAGE_BACKEND == "supabase":
        return SupabaseStore(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
