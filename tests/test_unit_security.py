"""Unit tests for core/security.py — no database required."""

import os
from datetime import datetime, timedelta, timezone

import pytest

# Ensure settings can be loaded without .env
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-unit-tests")

from tinymath.core.security import (
    create_access_token,
    decode_token,
    get_password_hash,
    verify_password,
)


# ── Password hashing ────────────────────────────────────────────────────────


class TestPasswordHashing:
    def test_hash_and_verify(self):
        password = "secure-password-123"
        hashed = get_password_hash(password)
        assert hashed != password
        assert verify_password(password, hashed)

    def test_wrong_password_rejected(self):
        hashed = get_password_hash("correct-password")
        assert not verify_password("wrong-password", hashed)

    def test_different_hashes_for_same_password(self):
        pw = "same-password"
        assert get_password_hash(pw) != get_password_hash(pw)  # random salt

    def test_malformed_digest_is_a_mismatch(self):
        assert not verify_password("anything", "not-a-bcrypt-digest")

    def test_long_password_supported(self):
        long_pw = "ä" * 100  # 200 bytes, past bcrypt's 72-byte window
        hashed = get_password_hash(long_pw)
        assert verify_password(long_pw, hashed)


# ── JWT tokens ───────────────────────────────────────────────────────────────


class TestJWT:
    def test_access_token_roundtrip(self):
        token = create_access_token({"sub": "account-123"})
        payload = decode_token(token)
        assert payload["sub"] == "account-123"
        assert payload["type"] == "access"

    def test_default_lifetime_is_seven_days(self):
        before = datetime.now(timezone.utc)
        payload = decode_token(create_access_token({"sub": "test"}))
        expires = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        assert before + timedelta(days=7) - timedelta(seconds=5) <= expires
        assert expires <= before + timedelta(days=7, seconds=5)

    def test_expired_token_raises(self):
        from jose import JWTError

        token = create_access_token({"sub": "test"}, expires_delta=timedelta(seconds=-10))
        with pytest.raises(JWTError):
            decode_token(token)

    def test_tampered_token_raises(self):
        from jose import JWTError

        token = create_access_token({"sub": "test"})
        parts = token.split(".")
        parts[1] = parts[1] + "x"
        with pytest.raises(JWTError):
            decode_token(".".join(parts))

    def test_original_data_not_mutated(self):
        data = {"sub": "account-789"}
        create_access_token(data)
        assert data == {"sub": "account-789"}
