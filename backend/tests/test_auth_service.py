"""
CrudCamp Backend — Auth Service Unit Tests
============================================

What we test:
    ✅ bcrypt hashing and verification (including malformed hashes)
    ✅ JWT issue/decode, expiry, tampering, wrong token type
    ✅ register: success, duplicate email, lost race (IntegrityError)
    ✅ authenticate: success, unknown email, bad password, inactive user
    ✅ get_user: missing or inactive user is rejected
"""

import threading
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from jose import jwt
from sqlalchemy.exc import IntegrityError

from app.config import settings
from app.exceptions import AuthenticationError, ConflictError
from app.schemas.auth import LoginRequest, RegisterRequest
from app.services.auth_service import (
    AuthService,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def make_user(**overrides):
    data = {
        "id": uuid4(),
        "email": "alice@example.com",
        "password_hash": hash_password("s3cret-pass"),
        "display_name": "Alice",
        "is_active": True,
        "created_at": datetime.now(timezone.utc),
    }
    data.update(overrides)
    return SimpleNamespace(**data)


class TestPasswordHashing:

    def test_hash_is_bcrypt_and_not_plaintext(self):
        hashed = hash_password("s3cret-pass")
        assert hashed.startswith("$2b$")
        assert "s3cret-pass" not in hashed

    def test_same_password_gets_different_salts(self):
        assert hash_password("s3cret-pass") != hash_password("s3cret-pass")

    def test_verify_correct_and_wrong_password(self):
        hashed = hash_password("s3cret-pass")
        assert verify_password("s3cret-pass", hashed) is True
        assert verify_password("wrong-pass1", hashed) is False

    def test_verify_malformed_hash_returns_false(self):
        assert verify_password("s3cret-pass", "not-a-bcrypt-hash") is False


class TestTokens:

    def test_roundtrip_claims(self):
        user = make_user()
        token, expires_in = create_access_token(user)

        claims = decode_access_token(token)

        assert claims["sub"] == str(user.id)
        assert claims["email"] == user.email
        assert claims["type"] == "access"
        assert expires_in == settings.jwt_expires_minutes * 60
        assert claims["exp"] - claims["iat"] == expires_in

    def test_expired_token_rejected(self):
        past = datetime.now(timezone.utc) - timedelta(minutes=5)
        token = jwt.encode(
            {"sub": str(uuid4()), "type": "access", "exp": int(past.timestamp())},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthenticationError, match="expired"):
            decode_access_token(token)

    def test_token_signed_with_other_secret_rejected(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "type": "access"},
            "some-other-secret-of-sufficient-length!",
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError, match="Invalid token"):
            decode_access_token(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(AuthenticationError):
            decode_access_token("not.a.jwt")

    def test_wrong_token_type_rejected(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "type": "refresh"},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_missing_subject_rejected(self):
        token = jwt.encode({"type": "access"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        with pytest.raises(AuthenticationError):
            decode_access_token(token)


class TestRegister:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_register_success(self, mock_db_session, result_returning):
        mock_db_session.execute.return_value = result_returning(None)

        async def assign_defaults():
            user = mock_db_session.add.call_args[0][0]
            user.id = uuid4()
            user.created_at = datetime.now(timezone.utc)
        mock_db_session.flush = AsyncMock(side_effect=assign_defaults)

        dto = RegisterRequest(email="Bob@Example.com", password="hunter22a", display_name="  Bob ")
        result = await self.service.register(mock_db_session, dto)

        stored = mock_db_session.add.call_args[0][0]
        assert result.email == "bob@example.com"
        assert result.display_name == "Bob"
        assert stored.password_hash != "hunter22a"
        assert verify_password("hunter22a", stored.password_hash)
        assert not hasattr(result, "password_hash")

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, mock_db_session, result_returning):
        mock_db_session.execute.return_value = result_returning(make_user())

        dto = RegisterRequest(email="alice@example.com", password="hunter22a")
        with pytest.raises(ConflictError):
            await self.service.register(mock_db_session, dto)
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_hashing_runs_off_the_event_loop(self, mock_db_session, result_returning):
        mock_db_session.execute.return_value = result_returning(None)
        hashing_threads = []

        async def assign_defaults():
            user = mock_db_session.add.call_args[0][0]
            user.id = uuid4()
            user.created_at = datetime.now(timezone.utc)
        mock_db_session.flush = AsyncMock(side_effect=assign_defaults)

        def recording_hash(plain):
            hashing_threads.append(threading.get_ident())
            return "$2b$04$not-a-real-hash"

        with patch("app.services.auth_service.hash_password", side_effect=recording_hash):
            await self.service.register(
                mock_db_session, RegisterRequest(email="carol@example.com", password="hunter22a")
            )

        assert len(hashing_threads) == 1
        assert hashing_threads[0] != threading.get_ident()

    @pytest.mark.asyncio
    async def test_register_integrity_error_becomes_conflict(self, mock_db_session, result_returning):
        mock_db_session.execute.return_value = result_returning(None)
        mock_db_session.flush = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("duplicate key"))
        )

        dto = RegisterRequest(email="alice@example.com", password="hunter22a")
        with pytest.raises(ConflictError):
            await self.service.register(mock_db_session, dto)
        mock_db_session.rollback.assert_awaited_once()


class TestAuthenticate:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_login_success_returns_token(self, mock_db_session, result_returning):
        user = make_user()
        mock_db_session.execute.return_value = result_returning(user)

        result = await self.service.authenticate(
            mock_db_session, LoginRequest(email="alice@example.com", password="s3cret-pass")
        )

        assert result.token_type == "bearer"
        assert decode_access_token(result.access_token)["sub"] == str(user.id)
        assert result.user.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_unknown_email_and_bad_password_look_the_same(self, mock_db_session, result_returning):
        mock_db_session.execute.return_value = result_returning(None)
        with pytest.raises(AuthenticationError) as unknown:
            await self.service.authenticate(
                mock_db_session, LoginRequest(email="nobody@example.com", password="whatever1")
            )

        mock_db_session.execute.return_value = result_returning(make_user())
        with pytest.raises(AuthenticationError) as wrong:
            await self.service.authenticate(
                mock_db_session, LoginRequest(email="alice@example.com", password="wrong-pass1")
            )

        assert unknown.value.message == wrong.value.message == "Invalid email or password"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("known_email", [True, False])
    async def test_verification_runs_off_the_event_loop(
        self, mock_db_session, result_returning, known_email
    ):
        mock_db_session.execute.return_value = result_returning(make_user() if known_email else None)
        verify_threads = []

        def recording_verify(plain, hashed):
            verify_threads.append(threading.get_ident())
            return False

        with patch("app.services.auth_service.verify_password", side_effect=recording_verify):
            with pytest.raises(AuthenticationError):
                await self.service.authenticate(
                    mock_db_session, LoginRequest(email="alice@example.com", password="wrong-pass1")
                )

        assert len(verify_threads) == 1
        assert verify_threads[0] != threading.get_ident()

    @pytest.mark.asyncio
    async def test_inactive_user_cannot_login(self, mock_db_session, result_returning):
        mock_db_session.execute.return_value = result_returning(make_user(is_active=False))
        with pytest.raises(AuthenticationError):
            await self.service.authenticate(
                mock_db_session, LoginRequest(email="alice@example.com", password="s3cret-pass")
            )


class TestGetUser:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_active_user_returned(self, mock_db_session, result_returning):
        user = make_user()
        mock_db_session.execute.return_value = result_returning(user)
        assert await self.service.get_user(mock_db_session, user.id) is user

    @pytest.mark.asyncio
    async def test_missing_user_rejected(self, mock_db_session, result_returning):
        mock_db_session.execute.return_value = result_returning(None)
        with pytest.raises(AuthenticationError):
            await self.service.get_user(mock_db_session, uuid4())

    @pytest.mark.asyncio
    async def test_inactive_user_rejected(self, mock_db_session, result_returning):
        mock_db_session.execute.return_value = result_returning(make_user(is_active=False))
        with pytest.raises(AuthenticationError):
            await self.service.get_user(mock_db_session, uuid4())
