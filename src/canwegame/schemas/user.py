"""Pydantic schemas for accounts, login and friends.

Learn: Separate "request" schemas (input) from "Read" schemas (output).
UserRead never includes the password hash.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def is_user_id(value: str) -> bool:
    """True for a plain run of ASCII digits, the only form read as a user id."""
    return value.isascii() and value.isdigit()


def _not_numeric(value: str) -> str:
    # A friend identifier that is all digits is always looked up as an id,
    # so such a username could never be found by name.
    if is_user_id(value):
        raise ValueError("Username cannot be only digits")
    return value


# ─── Auth ────────────────────────────────────────────────


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=32, pattern=USERNAME_PATTERN)
    email: str = Field(..., max_length=320, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("username")
    @classmethod
    def username_not_numeric(cls, value: str) -> str:
        return _not_numeric(value)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user_id: int
    username: str
    expires_at: datetime


# ─── Users ───────────────────────────────────────────────


class UserRead(BaseModel):
    id: int
    username: str
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    """Partial profile update. Omitted fields stay as they are."""

    username: Optional[str] = Field(
        None, min_length=3, max_length=32, pattern=USERNAME_PATTERN
    )
    email: Optional[str] = Field(None, max_length=320, pattern=EMAIL_PATTERN)

    @field_validator("username")
    @classmethod
    def username_not_numeric(cls, value: Optional[str]) -> Optional[str]:
        return _not_numeric(value) if value is not None else value


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)


# ─── Friends ─────────────────────────────────────────────


class FriendAdd(BaseModel):
    friend_identifier: str = Field(
        ..., min_length=1, max_length=64, description="Friend's user id or username"
    )


class FriendRead(BaseModel):
    id: int
    username: str
    email: str
    created_at: datetime
    friends_since: datetime
