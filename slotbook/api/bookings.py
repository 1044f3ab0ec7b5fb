from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from slotbook.api.deps import get_booking_service, respond
from slotbook.core.security import get_current_user_id
from slotbook.models.booking import BookingRequest, BookingUpdateRequest
from slotbook.services.booking_service import BookingService

router = APIRouter()


@router.post("/bookings")
async def create_booking(
    req: BookingRequest,
    user_id: Optional[str] = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    return respond(await service.create_booking(user_id, req))


@router.get("/bookings")
async def list_bookings(
    user_id: Optional[str] = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    result = await service.list_bookings(user_id)
    status_code = 200 if result.success else (401 if not user_id else 500)
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json", exclude_none=True))


@router.get("/bookings/booked-dates")
async def booked_dates(service: BookingService = Depends(get_booking_service)):
    result = await service.booked_dates()
    return JSONResponse(status_code=200 if result.success else 500, content=result.model_dump(exclude_none=True))


@router.post("/bookings/clear-past")
async def clear_past_appointments(
    user_id: Optional[str] = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    return respond(await service.clear_past_appointments(user_id))


@router.patch("/bookings/{booking_id}")
async def update_booking(
    booking_id: str,
    req: BookingUpdateRequest,
    user_id: Optional[str] = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    return respond(await service.update_booking(user_id, booking_id, req))


@router.delete("/bookings/{booking_id}")
async def delete_booking(
    booking_id: str,
    user_id: Optional[str] = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    return respond(await service.delete_booking(user_id, booking_id))
