"""One-time code service.

Six-digit numeric codes used for email verification and password reset.
"""

import secrets
from datetime import datetime, timedelta, timezone

CODE_MIN = 100000
CODE_MAX = 999999


def generate_code() -> str:
    """Return a 6-digit code drawn uniformly from [100000, 999999]."""
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


def code_expiry(minutes: int, now: datetime | None = None) -> datetime:
    """Absolute expiry instant ``minutes`` from ``now`` (UTC)."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now + timedelta(minutes=minutes)


def is_code_current(expires_at: datetime | None, now: datetime | None = None) -> bool:
    """True while ``now`` is strictly before ``expires_at``.

    SQLite hands back naive datetimes; those are treated as UTC.
    """
    if expires_at is None:
        return False
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if now is None:
        now = datetime.now(timezone.utc)
    return now < expires_at


def code_matches(
    stored_code: str | None,
    expires_at: datetime | None,
    submitted: str,
    now: datetime | None = None,
) -> bool:
    """A submitted code is accepted iff it equals the pending one and has not expired."""
    if stored_code is None:
        return False
    if not secrets.compare_digest(stored_code.encode(), submitted.strip().encode()):
        return False
    return is_code_current(expires_at, now)
