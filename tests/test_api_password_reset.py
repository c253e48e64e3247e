"""Integration tests for forgot-password / reset-password."""

from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from tinymath.config import settings
from tinymath.core.security import verify_password
from tinymath.models.account import Account


async def _load(db_session, email: str) -> Account:
    result = await db_session.execute(select(Account).where(Account.email == email))
    account = result.scalar_one()
    await db_session.refresh(account)
    return account


async def _request_reset(client, email_sender, email: str) -> str:
    resp = await client.post("/api/auth/forgot-password", json={"email": email})
    assert resp.status_code == 200, resp.text
    return email_sender.last_code(email)


class TestForgotPassword:
    async def test_sends_reset_code(self, client, db_session, verified_account, email_sender):
        resp = await client.post("/api/auth/forgot-password", json={
            "email": verified_account["email"],
        })
        assert resp.status_code == 200
        assert resp.json()["message"] == "Reset code sent to your email!"
        assert email_sender.sent[-1]["subject"].startswith("Reset Your TinyMath Password")

        account = await _load(db_session, verified_account["email"])
        assert account.verification_code == email_sender.last_code()
        remaining = account.verification_code_expires_at.replace(tzinfo=timezone.utc) - datetime.now(timezone.utc)
        assert timedelta(minutes=14) < remaining <= timedelta(minutes=15)

    async def test_unknown_email(self, client):
        resp = await client.post("/api/auth/forgot-password", json={"email": "ghost@test.com"})
        assert resp.status_code == 404
        assert resp.json() == {"message": "User not found"}

    async def test_email_failure_is_fatal_by_default(self, client, verified_account, email_sender):
        email_sender.fail = True
        resp = await client.post("/api/auth/forgot-password", json={
            "email": verified_account["email"],
        })
        assert resp.status_code == 500
        assert resp.json() == {"message": "Failed to send reset email."}

    async def test_email_failure_warn_policy(self, client, verified_account, email_sender, monkeypatch):
        monkeypatch.setattr(settings, "FORGOT_PASSWORD_EMAIL_FAILURE", "warn")
        email_sender.fail = True
        resp = await client.post("/api/auth/forgot-password", json={
            "email": verified_account["email"],
        })
        assert resp.status_code == 200
        assert resp.json()["warning"] == "Failed to send reset email."


class TestResetPassword:
    async def test_reset_success(self, client, db_session, verified_account, email_sender):
        email = verified_account["email"]
        code = await _request_reset(client, email_sender, email)

        resp = await client.post("/api/auth/reset-password", json={
            "email": email,
            "code": code,
            "newPassword": "brand-new-password",
        })
        assert resp.status_code == 200
        assert resp.json()["message"] == "Password updated successfully!"

        account = await _load(db_session, email)
        assert verify_password("brand-new-password", account.password_hash)
        assert account.verification_code is None
        assert account.verification_code_expires_at is None

        old = await client.post("/api/auth/login", json={
            "email": email, "password": verified_account["password"],
        })
        assert old.status_code == 400
        new = await client.post("/api/auth/login", json={
            "email": email, "password": "brand-new-password",
        })
        assert new.status_code == 200

    async def test_code_cannot_be_reused(self, client, verified_account, email_sender):
        email = verified_account["email"]
        code = await _request_reset(client, email_sender, email)

        first = await client.post("/api/auth/reset-password", json={
            "email": email, "code": code, "newPassword": "first-new-password",
        })
        second = await client.post("/api/auth/reset-password", json={
            "email": email, "code": code, "newPassword": "second-new-password",
        })
        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json() == {"message": "Invalid or expired code"}

    async def test_wrong_code(self, client, verified_account, email_sender):
        email = verified_account["email"]
        code = await _request_reset(client, email_sender, email)
        wrong = "111111" if code != "111111" else "222222"

        resp = await client.post("/api/auth/reset-password", json={
            "email": email, "code": wrong, "newPassword": "brand-new-password",
        })
        assert resp.status_code == 400

    async def test_expired_code(self, client, db_session, verified_account, email_sender):
        email = verified_account["email"]
        code = await _request_reset(client, email_sender, email)

        account = await _load(db_session, email)
        account.verification_code_expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)
        await db_session.commit()

        resp = await client.post("/api/auth/reset-password", json={
            "email": email, "code": code, "newPassword": "brand-new-password",
        })
        assert resp.status_code == 400

    async def test_code_for_other_account_rejected(self, client, verified_account, email_sender):
        code = await _request_reset(client, email_sender, verified_account["email"])

        other = await client.post("/api/auth/register", json={
            "fullName": "Other Parent",
            "email": "other@test.com",
            "gender": "male",
            "password": "testpassword123",
        })
        assert other.status_code == 201

        resp = await client.post("/api/auth/reset-password", json={
            "email": "other@test.com", "code": code, "newPassword": "brand-new-password",
        })
        assert resp.status_code == 400

    async def test_short_new_password(self, client, verified_account):
        resp = await client.post("/api/auth/reset-password", json={
            "email": verified_account["email"], "code": "123456", "newPassword": "abc",
        })
        assert resp.status_code == 400
        assert "newPassword" in resp.json()["message"]
