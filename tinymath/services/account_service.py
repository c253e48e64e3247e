"""Account Service.

Parent accounts: registration, email verification, login, one-time code
issuance for verification and password reset, profile and progress updates.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tinymath.config import settings
from tinymath.core.errors import (
    AccountNotVerifiedError,
    ConflictError,
    EmailDeliveryFailure,
    InvalidCodeError,
    InvalidCredentialsError,
    NotFoundError,
)
from tinymath.core.security import create_access_token, get_password_hash, verify_password
from tinymath.models.account import Account
from tinymath.services.code_service import code_expiry, code_matches, generate_code
from tinymath.services.email_service import EmailSender, EmailSendError, render_code_email

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("full_name", "gender", "phone", "nationality", "state", "date_of_birth")
PROGRESS_FIELDS = ("stars", "current_level")


async def get_account_by_email(db: AsyncSession, email: str) -> Account | None:
    result = await db.execute(select(Account).where(Account.email == email.lower()))
    return result.scalar_one_or_none()


async def get_account(db: AsyncSession, account_id: uuid.UUID) -> Account:
    """Load an account by id or raise ``NotFoundError``."""
    account = await db.get(Account, account_id)
    if account is None:
        raise NotFoundError("User not found")
    return account


async def _issue_code(
    db: AsyncSession,
    email_sender: EmailSender,
    account: Account,
    purpose: str,
    valid_minutes: int,
) -> None:
    """Store a fresh code on ``account``, commit, then email it.

    The commit happens before delivery so a failed email never loses the
    account or the code. Raises ``EmailSendError`` when delivery fails.
    """
    code = generate_code()
    account.verification_code = code
    account.verification_code_expires_at = code_expiry(valid_minutes)
    await db.commit()
    logger.info("Issued %s code for %s", purpose, account.email)

    subject, body = render_code_email(purpose, code, valid_minutes)
    await email_sender.send(account.email, subject, body)


def _delivery_outcome(policy: str, error: EmailSendError, message: str) -> str:
    """Apply an email failure policy: raise for ``fail``, return a warning for ``warn``."""
    if policy == "fail":
        raise EmailDeliveryFailure(message)
    logger.warning("Continuing after email delivery failure: %s", error)
    return message


# ---------------------------------------------------------------------------
# Registration & verification
# ---------------------------------------------------------------------------

async def register_account(
    db: AsyncSession,
    email_sender: EmailSender,
    *,
    full_name: str,
    email: str,
    gender: str,
    password: str,
) -> tuple[Account, str | None]:
    """Create an unverified account and send its verification code.

    Returns the account and an optional delivery warning.
    """
    if await get_account_by_email(db, email) is not None:
        raise ConflictError("User already exists")

    account = Account(
        full_name=full_name,
        email=email.lower(),
        gender=gender,
        password_hash=get_password_hash(password),
        is_verified=False,
    )
    db.add(account)
    try:
        await db.flush()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        await db.rollback()
        raise ConflictError("User already exists")
    logger.info("Registered account %s (%s)", account.id, account.email)

    try:
        await _issue_code(
            db, email_sender, account, "verify", settings.VERIFICATION_CODE_EXPIRE_MINUTES,
        )
    except EmailSendError as e:
        return account, _delivery_outcome(
            settings.REGISTER_EMAIL_FAILURE, e, "Failed to send verification email.",
        )
    return account, None


async def verify_email(db: AsyncSession, *, email: str, code: str) -> Account:
    """Mark the account verified if ``code`` is its pending, unexpired code."""
    account = await get_account_by_email(db, email)
    if account is None:
        raise NotFoundError("User not found")
    if account.is_verified:
        raise ConflictError("User already verified")
    if not code_matches(
        account.verification_code, account.verification_code_expires_at, code,
    ):
        raise InvalidCodeError()

    # Conditional on the code still being pending, in case it was consumed
    # or replaced since it was read.
    result = await db.execute(
        update(Account)
        .where(
            Account.id == account.id,
            Account.verification_code == account.verification_code,
        )
        .values(
            is_verified=True,
            verification_code=None,
            verification_code_expires_at=None,
        )
    )
    if result.rowcount != 1:
        raise InvalidCodeError()

    await db.refresh(account)
    logger.info("Verified account %s", account.id)
    return account


async def resend_verification_code(
    db: AsyncSession, email_sender: EmailSender, *, email: str,
) -> str | None:
    """Send a fresh verification code. Returns an optional delivery warning."""
    account = await get_account_by_email(db, email)
    if account is None:
        raise NotFoundError("User not found")
    if account.is_verified:
        raise ConflictError("User already verified")

    try:
        await _issue_code(
            db, email_sender, account, "resend", settings.VERIFICATION_CODE_EXPIRE_MINUTES,
        )
    except EmailSendError as e:
        return _delivery_outcome(
            settings.RESEND_EMAIL_FAILURE, e, "Failed to send verification email.",
        )
    return None


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

async def authenticate(
    db: AsyncSession, email_sender: EmailSender, *, email: str, password: str,
) -> tuple[str, Account]:
    """Check credentials and return ``(token, account)``.

    Unverified accounts never receive a token. Depending on
    ``UNVERIFIED_LOGIN_POLICY`` they are rejected outright or sent a new
    code first.
    """
    account = await get_account_by_email(db, email)
    if account is None or not verify_password(password, account.password_hash):
        raise InvalidCredentialsError()

    if not account.is_verified:
        if settings.UNVERIFIED_LOGIN_POLICY == "reject":
            raise AccountNotVerifiedError()
        try:
            await _issue_code(
                db, email_sender, account, "login", settings.VERIFICATION_CODE_EXPIRE_MINUTES,
            )
        except EmailSendError as e:
            logger.error("Auto-resend to %s failed: %s", account.email, e)
        raise AccountNotVerifiedError(
            "Account not verified. A new code has been sent to your email."
        )

    token = create_access_token(data={"sub": str(account.id)})
    logger.info("Login for account %s", account.id)
    return token, account


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------

async def request_password_reset(
    db: AsyncSession, email_sender: EmailSender, *, email: str,
) -> str | None:
    """Email a reset code. Returns an optional delivery warning."""
    account = await get_account_by_email(db, email)
    if account is None:
        raise NotFoundError("User not found")

    try:
        await _issue_code(
            db, email_sender, account, "reset", settings.RESET_CODE_EXPIRE_MINUTES,
        )
    except EmailSendError as e:
        return _delivery_outcome(
            settings.FORGOT_PASSWORD_EMAIL_FAILURE, e, "Failed to send reset email.",
        )
    return None


async def reset_password(
    db: AsyncSession,
    *,
    email: str,
    code: str,
    new_password: str,
    now: datetime | None = None,
) -> None:
    """Replace the password if ``code`` is the pending, unexpired code.

    Matching and consumption happen in one UPDATE, so of two requests racing
    with the same code only one can change the password.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    result = await db.execute(
        update(Account)
        .where(
            Account.email == email.lower(),
            Account.verification_code == code.strip(),
            Account.verification_code_expires_at > now,
        )
        .values(
            password_hash=get_password_hash(new_password),
            verification_code=None,
            verification_code_expires_at=None,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InvalidCodeError()
    logger.info("Password reset for %s", email.lower())


# ---------------------------------------------------------------------------
# Profile & progress
# ---------------------------------------------------------------------------

async def _apply_fields(
    db: AsyncSession, account_id: uuid.UUID, values: dict, allowed: tuple[str, ...],
) -> Account:
    account = await get_account(db, account_id)
    for field, value in values.items():
        if field in allowed:
            setattr(account, field, value)
    await db.flush()
    await db.refresh(account)
    return account


async def update_profile(db: AsyncSession, account_id: uuid.UUID, values: dict) -> Account:
    """Merge the supplied profile fields into the account."""
    # Name and gender are required columns; a null for them means "unchanged"
    values = {
        field: value for field, value in values.items()
        if value is not None or field not in ("full_name", "gender")
    }
    return await _apply_fields(db, account_id, values, PROFILE_FIELDS)


async def update_progress(db: AsyncSession, account_id: uuid.UUID, values: dict) -> Account:
    """Merge the supplied stars / level into the account."""
    return await _apply_fields(db, account_id, values, PROGRESS_FIELDS)


async def clear_expired_codes(db: AsyncSession, now: datetime | None = None) -> int:
    """Drop every pending code whose expiry has passed. Returns the row count."""
    if now is None:
        now = datetime.now(timezone.utc)
    result = await db.execute(
        update(Account)
        .where(
            Account.verification_code_expires_at.isnot(None),
            Account.verification_code_expires_at <= now,
        )
        .values(verification_code=None, verification_code_expires_at=None)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount
