from typing import Dict, List, Optional, Tuple

from slotbook.core.config import settings
from slotbook.core.errors import DuplicateKeyError, StorageError
from slotbook.core.logger import logger
from slotbook.core.security import hash_password, sign_token, verify_password
from slotbook.models.booking import ActionResult
from slotbook.models.user import LoginRequest, PublicUser, RegisterRequest, UserDetails
from slotbook.services.db_service import BookingStore

INVALID_CREDENTIALS = "Invalid email or password."


def _check_email(email: Optional[str], errors: Dict[str, List[str]]):
    if not email or not email.strip():
        errors["email"] = ["Email is required."]
        return

    domain = email.split("@")[1] if "@" in email else ""
    if domain.lower() not in settings.ALLOWED_EMAIL_DOMAINS:
        allowed = " or ".join(f"@{d}" for d in settings.ALLOWED_EMAIL_DOMAINS)
        errors["email"] = [f"Only {allowed} emails are allowed."]


class AuthService:
    def __init__(self, store: BookingStore):
        self.store = store

    async def register(self, req: RegisterRequest) -> Tuple[ActionResult, Optional[str]]:
        """Create an account; on success also returns a session token."""
        errors: Dict[str, List[str]] = {}
        _check_email(req.email, errors)
        if not req.password or not req.password.strip():
            errors["password"] = ["Password is required."]
        if not req.name or not req.name.strip():
            errors["name"] = ["Name is required."]
        if errors:
            return ActionResult(message="Validation failed.", errors=errors, status_code=400), None

        try:
            if await self.store.find_user_by_email(req.email):
                return ActionResult(
                    message="Registration failed.",
                    errors={"general": ["Email already registered."]},
                    status_code=409,
                ), None
            user = await self.store.create_user(req.name.strip(), req.email, hash_password(req.password))
        except DuplicateKeyError:
            return ActionResult(
                message="Operation failed.",
                errors={"general": ["Email already exists."]},
                status_code=409,
            ), None
        except StorageError as e:
            logger.error(f"❌ Registration error: {e.detail}")
            return ActionResult(
                message="Operation failed.",
                errors={"general": ["An unexpected error occurred. Please try again."]},
                status_code=500,
            ), None

        logger.info(f"User registered successfully: {user.email}")
        return ActionResult(success=True, message="Registration successful!"), sign_token(user.id, user.email)

    async def login(self, req: LoginRequest) -> Tuple[ActionResult, Optional[str]]:
        errors: Dict[str, List[str]] = {}
        _check_email(req.email, errors)
        if not req.password or not req.password.strip():
            errors["password"] = ["Password is required."]
        if errors:
            return ActionResult(message="Validation failed.", errors=errors, status_code=400), None

        try:
            user = await self.store.find_user_by_email(req.email)
        except StorageError as e:
            logger.error(f"❌ Login error: {e.detail}")
            return ActionResult(
                message="Operation failed.",
                errors={"general": ["An unexpected error occurred. Please try again."]},
                status_code=500,
            ), None

        if not user or not verify_password(req.password, user.password_hash):
            return ActionResult(
                message="Login failed.",
                errors={"general": [INVALID_CREDENTIALS]},
                status_code=401,
            ), None

        logger.info(f"User logged in successfully: {user.email}")
        return ActionResult(success=True, message="Login successful!"), sign_token(user.id, user.email)

    async def user_details(self, user_id: Optional[str]) -> UserDetails:
        if not user_id:
            return UserDetails(success=False, message="Not authenticated.")
        try:
            user = await self.store.get_user(user_id)
        except StorageError as e:
            logger.error(f"❌ Error fetching user details: {e.detail}")
            return UserDetails(success=False, message="Failed to fetch user details.")
        if not user:
            return UserDetails(success=False, message="User not found.")
        return UserDetails(success=True, name=user.name, email=user.email)

    async def list_users(self) -> List[PublicUser]:
        users = await self.store.list_users()
        return [PublicUser(id=u.id, name=u.name, email=u.email) for u in users]

    async def create_user(self, req: RegisterRequest) -> Tuple[ActionResult, Optional[PublicUser]]:
        """Plain account creation, without the sign-up email domain rule or a session."""
        if not req.name or not req.email or not req.password:
            return ActionResult(message="Name, email, and password are required.", status_code=400), None
        try:
            user = await self.store.create_user(req.name, req.email, hash_password(req.password))
        except DuplicateKeyError:
            return ActionResult(message="Email already exists.", status_code=409), None
        except StorageError as e:
            logger.error(f"❌ Error creating user: {e.detail}")
            return ActionResult(message="Failed to create user.", status_code=500), None
        return ActionResult(success=True, message="User created."), PublicUser(id=user.id, name=user.name, email=user.email)
