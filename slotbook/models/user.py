from typing import Optional
from pydantic import BaseModel


class User(BaseModel):
    id: str
    name: str
    email: str
    password_hash: str


class PublicUser(BaseModel):
    id: str
    name: str
    email: str


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserDetails(BaseModel):
    success: bool
    name: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None
