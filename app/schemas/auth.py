# app/schemas/auth.py
from typing import Optional

from pydantic import EmailStr

from app.schemas.common import CamelModel, UTCDateTime

class RegisterRequest(CamelModel):
    email: EmailStr
    password: str
    name: Optional[str] = None

class LoginRequest(CamelModel):
    email: EmailStr
    password: str

class UserResponse(CamelModel):
    id: str
    email: EmailStr
    name: Optional[str] = None
    created_at: UTCDateTime
    updated_at: UTCDateTime

class AuthResponse(CamelModel):
    user: UserResponse
    token: str

class MeResponse(CamelModel):
    user: UserResponse
