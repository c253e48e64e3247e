"""Authentication router.

Endpoints for registration, email verification, login and password reset.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tinymath.core.dependencies import get_current_account
from tinymath.core.rate_limit import CODE_EMAIL_LIMIT, CREDENTIAL_LIMIT, limiter
from tinymath.database import get_db
from tinymath.models.account import Account
from tinymath.schemas.account import AccountResponse
from tinymath.schemas.auth import (
    CodeSentResponse,
    EmailRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    VerifyEmailRequest,
)
from tinymath.schemas.common import MessageResponse
from tinymath.services import account_service
from tinymath.services.email_service import EmailSender, get_email_sender

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(CODE_EMAIL_LIMIT)
async def register(
    request: Request,
    body: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    email_sender: Annotated[EmailSender, Depends(get_email_sender)],
):
    """Register a parent account and email a verification code."""
    account, warning = await account_service.register_account(
        db,
        email_sender,
        full_name=body.full_name,
        email=body.email,
        gender=body.gender,
        password=body.password,
    )
    return RegisterResponse(
        message="Registration successful. Check email for code.",
        id=str(account.id),
        email=account.email,
        warning=warning,
    )


@router.post("/verify-email", response_model=MessageResponse)
@limiter.limit(CREDENTIAL_LIMIT)
async def verify_email(
    request: Request,
    body: VerifyEmailRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Confirm the email address with the emailed 6-digit code."""
    await account_service.verify_email(db, email=body.email, code=body.code)
    return MessageResponse(message="Email verified successfully")


@router.post("/login", response_model=LoginResponse)
@limiter.limit(CREDENTIAL_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    email_sender: Annotated[EmailSender, Depends(get_email_sender)],
):
    """Authenticate with email + password and return a bearer token."""
    token, account = await account_service.authenticate(
        db, email_sender, email=body.email, password=body.password,
    )
    return LoginResponse(token=token, user=AccountResponse.model_validate(account))


@router.post("/resend-code", response_model=CodeSentResponse)
@limiter.limit(CODE_EMAIL_LIMIT)
async def resend_code(
    request: Request,
    body: EmailRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    email_sender: Annotated[EmailSender, Depends(get_email_sender)],
):
    """Send a new verification code to an unverified account."""
    warning = await account_service.resend_verification_code(
        db, email_sender, email=body.email,
    )
    return CodeSentResponse(message="Verification code resent successfully", warning=warning)


@router.post("/forgot-password", response_model=CodeSentResponse)
@limiter.limit(CODE_EMAIL_LIMIT)
async def forgot_password(
    request: Request,
    body: EmailRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    email_sender: Annotated[EmailSender, Depends(get_email_sender)],
):
    """Email a password reset code."""
    warning = await account_service.request_password_reset(
        db, email_sender, email=body.email,
    )
    return CodeSentResponse(message="Reset code sent to your email!", warning=warning)


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit(CREDENTIAL_LIMIT)
async def reset_password(
    request: Request,
    body: ResetPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Set a new password using the emailed reset code."""
    await account_service.reset_password(
        db, email=body.email, code=body.code, new_password=body.new_password,
    )
    return MessageResponse(message="Password updated successfully!")


@router.get("/me", response_model=AccountResponse)
async def get_me(current_account: Account = Depends(get_current_account)):
    """Return the profile of the account the bearer token belongs to."""
    return current_account
