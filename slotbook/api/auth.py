from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from slotbook.api.deps import get_auth_service, respond
from slotbook.core.config import settings
from slotbook.core.errors import StorageError
from slotbook.core.logger import logger
from slotbook.core.security import get_current_user_id
from slotbook.models.booking import ActionResult
from slotbook.models.user import LoginRequest, RegisterRequest
from slotbook.services.auth_service import AuthService

router = APIRouter()


def _with_session(result: ActionResult, token: Optional[str]) -> JSONResponse:
    response = respond(result)
    if token:
        response.set_cookie(
            settings.SESSION_COOKIE_NAME,
            token,
            httponly=True,
            secure=settings.ENVIRONMENT == "production",
            max_age=settings.SESSION_MAX_AGE,
            path="/",
            samesite="lax",
        )
    return response


@router.post("/auth/register")
async def register(req: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    result, token = await service.register(req)
    return _with_session(result, token)


@router.post("/auth/login")
async def login(req: LoginRequest, service: AuthService = Depends(get_auth_service)):
    result, token = await service.login(req)
    return _with_session(result, token)


@router.post("/auth/logout")
async def logout():
    logger.info("User attempting to log out...")
    response = JSONResponse({"success": True, "message": "Logged out successfully."})
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return response


@router.get("/auth/me")
async def me(
    user_id: Optional[str] = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
):
    details = await service.user_details(user_id)
    return JSONResponse(status_code=200 if details.success else 401, content=details.model_dump())


@router.get("/users")
async def list_users(service: AuthService = Depends(get_auth_service)):
    try:
        users = await service.list_users()
    except StorageError as e:
        logger.error(f"❌ Error fetching users: {e.detail}")
        return JSONResponse(status_code=500, content={"success": False, "message": "Failed to fetch users"})
    return {"success": True, "data": [u.model_dump() for u in users]}


@router.post("/users", status_code=201)
async def create_user(req: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    result, user = await service.create_user(req)
    if not user:
        return respond(result)
    return JSONResponse(status_code=201, content={"success": True, "data": user.model_dump()})
