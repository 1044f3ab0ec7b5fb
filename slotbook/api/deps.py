from fastapi import Depends, Request
from fastapi.responses import JSONResponse

from slotbook.core.clock import Clock
from slotbook.models.booking import ActionResult
from slotbook.services.auth_service import AuthService
from slotbook.services.booking_service import BookingService
from slotbook.services.db_service import BookingStore


def get_store(request: Request) -> BookingStore:
    return request.app.state.store


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_booking_service(store: BookingStore = Depends(get_store), clock: Clock = Depends(get_clock)) -> BookingService:
    return BookingService(store, clock)


def get_auth_service(store: BookingStore = Depends(get_store)) -> AuthService:
    return AuthService(store)


def respond(result: ActionResult) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.model_dump(mode="json", exclude_none=True))
