"""
CrudCamp Backend — Auth & User DTOs
=====================================

What:  Pydantic models for registration, login and the current-user view.
How:   FastAPI validates request bodies against these models (422 on schema
       errors) and serializes responses through them.

Security:
    UserResponse is the ONLY shape in which a user leaves the API.
    It has no password_hash field, and `extra="forbid"` plus explicit field
    lists mean a hash can never be serialized by accident.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


class RegisterRequest(BaseModel):
    """
    What:  Body of POST /api/auth/register.

    Rules:
        email:        valid address, normalized to lowercase
        password:     8-72 chars, at least one letter and one digit,
                      at most 72 bytes once UTF-8 encoded
        display_name: optional, stripped, max 100 chars
    """
    model_config = ConfigDict(extra="forbid")

    email: EmailStr = Field(description="Login email (case-insensitive)")
    password: str = Field(min_length=8, max_length=72, description="Plain password")
    display_name: Optional[str] = Field(default=None, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        if not any(c.isalpha() for c in v) or not any(c.isdigit() for c in v):
            raise ValueError("Password must contain at least one letter and one digit")
        if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes when UTF-8 encoded")
        return v

    @field_validator("display_name")
    @classmethod
    def strip_display_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class LoginRequest(BaseModel):
    """Body of POST /api/auth/login. Strength rules are not re-checked here."""
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1, max_length=1024)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UserResponse(BaseModel):
    """Public view of a user account."""
    model_config = ConfigDict(extra="forbid", from_attributes=True)

    id: uuid.UUID
    email: str
    display_name: Optional[str] = None
    created_at: datetime


class TokenResponse(BaseModel):
    """
    What:  Returned by a successful login.
    How:   Clients send `Authorization: Bearer <access_token>` on later calls
           until `expires_in` seconds have passed, then log in again.
    """
    model_config = ConfigDict(extra="forbid")

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")
    user: UserResponse
