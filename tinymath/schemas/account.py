import uuid
from datetime import date
from typing import Literal

from pydantic import Field

from tinymath.schemas.common import CamelModel


class AccountResponse(CamelModel):
    """Sanitized profile: no password hash, no pending code."""

    id: uuid.UUID
    full_name: str
    email: str
    gender: str
    phone: str | None = None
    nationality: str | None = None
    state: str | None = None
    date_of_birth: date | None = None
    current_level: int
    stars: int
    is_verified: bool


class ProfileUpdate(CamelModel):
    id: uuid.UUID
    full_name: str | None = Field(default=None, min_length=1, max_length=100)
    gender: Literal["male", "female", "other"] | None = None
    phone: str | None = Field(default=None, max_length=32)
    nationality: str | None = Field(default=None, max_length=64)
    state: str | None = Field(default=None, max_length=64)
    date_of_birth: date | None = None


class ProfileUpdateResponse(CamelModel):
    message: str
    user: AccountResponse


class ProgressUpdate(CamelModel):
    id: uuid.UUID
    stars: int | None = Field(default=None, ge=0)
    current_level: int | None = Field(default=None, ge=1)
