from typing import Literal

from pydantic import EmailStr, Field, field_validator

from tinymath.schemas.account import AccountResponse
from tinymath.schemas.common import CamelModel

Gender = Literal["male", "female", "other"]


class _EmailBody(CamelModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class RegisterRequest(_EmailBody):
    full_name: str = Field(min_length=1, max_length=100)
    gender: Gender
    password: str = Field(min_length=6, max_length=128)


class RegisterResponse(CamelModel):
    message: str
    id: str
    email: str
    warning: str | None = None


class VerifyEmailRequest(_EmailBody):
    code: str = Field(min_length=1, max_length=12)


class LoginRequest(_EmailBody):
    password: str


class LoginResponse(CamelModel):
    token: str
    user: AccountResponse


class EmailRequest(_EmailBody):
    """Body of resend-code and forgot-password."""


class CodeSentResponse(CamelModel):
    message: str
    warning: str | None = None


class ResetPasswordRequest(_EmailBody):
    code: str = Field(min_length=1, max_length=12)
    new_password: str = Field(min_length=6, max_length=128)
