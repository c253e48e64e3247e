"""Shared fixtures for TinyMath API tests.

Every test gets a fresh in-memory SQLite database (aiosqlite) and a
recording email sender in place of Brevo. Set TEST_DATABASE_URL to run
against another database.
"""

import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")

# Ensure settings can be loaded without .env, and skip the Redis probe
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-unit-tests")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("REDIS_URL", "")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from tinymath.database import Base  # noqa: E402
from tinymath.services.email_service import EmailSendError  # noqa: E402

PASSWORD = "testpassword123"


class RecordingEmailSender:
    """Email sender double: keeps every message, optionally fails."""

    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.fail = False

    async def send(self, to: str, subject: str, html_body: str) -> None:
        if self.fail:
            raise EmailSendError("provider unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html_body})

    def last_code(self, to: str | None = None) -> str:
        """Return the code from the most recent message (to ``to`` if given)."""
        for message in reversed(self.sent):
            if to is None or message["to"] == to:
                return message["subject"].rsplit(": ", 1)[1]
        raise AssertionError(f"no email sent to {to}")


# ---------------------------------------------------------------------------
# Reset rate-limiter counters before every test
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_rate_limits():
    """Clear in-memory rate-limit counters so tests never block each other."""
    from tinymath.core.rate_limit import limiter

    storage = getattr(limiter, "_storage", None)
    if storage is not None and hasattr(storage, "reset"):
        storage.reset()


# ---------------------------------------------------------------------------
# Per-test database
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def db_session():
    import tinymath.models  # noqa: F401 — populate Base.metadata

    engine_kwargs = {}
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine_kwargs = {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, **engine_kwargs)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture()
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


# ---------------------------------------------------------------------------
# HTTP test client
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def client(db_session: AsyncSession, email_sender: RecordingEmailSender):
    from tinymath.database import get_db
    from tinymath.main import app
    from tinymath.services.email_service import get_email_sender

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience: registered / verified parent accounts
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def registered_account(client: AsyncClient, email_sender: RecordingEmailSender):
    """Register an (unverified) parent and return a context dict.

    Keys: id, email, password, code
    """
    email = f"parent-{uuid.uuid4().hex[:8]}@test.com"
    resp = await client.post("/api/auth/register", json={
        "fullName": "Test Parent",
        "email": email,
        "gender": "female",
        "password": PASSWORD,
    })
    assert resp.status_code == 201, resp.text
    return {
        "id": resp.json()["id"],
        "email": email,
        "password": PASSWORD,
        "code": email_sender.last_code(email),
    }


@pytest_asyncio.fixture()
async def verified_account(client: AsyncClient, registered_account: dict):
    """A registered parent whose email is verified. Adds a ``token`` key."""
    acc = registered_account
    resp = await client.post("/api/auth/verify-email", json={
        "email": acc["email"],
        "code": acc["code"],
    })
    assert resp.status_code == 200, resp.text

    login = await client.post("/api/auth/login", json={
        "email": acc["email"],
        "password": acc["password"],
    })
    assert login.status_code == 200, login.text
    return {**acc, "token": login.json()["token"]}
