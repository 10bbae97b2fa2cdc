# careerspage/schemas/user.py

from typing import Any

from pydantic import BaseModel, EmailStr, Field


class Identity(BaseModel):
    """The caller as decoded from a bearer token."""
    id: str | None = None
    email: str | None = None
    name: str | None = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    metadata: dict[str, Any] | None = None


class TokenRequest(BaseModel):
    token: str | None = None
