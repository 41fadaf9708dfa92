"""
CrudCamp Backend — Auth Service (passwords, tokens, accounts)
===============================================================

What:  bcrypt password hashing, JWT issuing/verification, and the
       register → login → resolve-user workflow.
Who:   Called by the auth routes and by the `get_current_user` dependency.

Token format (HS256 by default):
    {
        "sub":   "<user uuid>",
        "email": "alice@example.com",
        "type":  "access",
        "iat":   1700000000,
        "exp":   1700003600
    }
    Only `sub` is trusted to identify the user; the account is re-loaded
    from the database on every request so deactivation takes effect
    immediately.

Error Handling:
    Every way a token or credential can be wrong ends in AuthenticationError
    (401). Unexpected database failures are wrapped in DatabaseError (500).
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Tuple
from uuid import UUID

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import (
    AuthenticationError,
    ConflictError,
    CrudCampError,
    DatabaseError,
)
from app.models.user import User
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserResponse

logger = logging.getLogger(__name__)

TOKEN_TYPE_ACCESS = "access"
INVALID_CREDENTIALS = "Invalid email or password"


# ══════════════════════════════════════════════════════════════════════════
# Password Hashing
# ══════════════════════════════════════════════════════════════════════════

def hash_password(plain: str) -> str:
    """Returns a bcrypt hash ($2b$<rounds>$...) with a fresh random salt."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """
    Constant-time comparison of a plain password against a stored hash.

    Returns False (never raises) for a malformed hash or an over-long
    password, so callers only ever see "match" / "no match".
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Verified against when the email is unknown, so both login failure
    # paths spend the same bcrypt time
    return hash_password("crudcamp-timing-equalizer-0")


def _verify_against_dummy(plain: str) -> bool:
    return verify_password(plain, _dummy_hash())


# ══════════════════════════════════════════════════════════════════════════
# JSON Web Tokens
# ══════════════════════════════════════════════════════════════════════════

def create_access_token(user: User) -> Tuple[str, int]:
    """
    Signs an access token for `user`.

    Returns:
        (token, expires_in_seconds)
    """
    now = datetime.now(timezone.utc)
    expires_in = settings.jwt_expires_minutes * 60
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "type": TOKEN_TYPE_ACCESS,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    token = jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return token, expires_in


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verifies signature and expiry and returns the claims.

    Raises:
        AuthenticationError: expired, tampered, malformed, wrong type, or no subject
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        logger.debug("Rejected token: %s", type(e).__name__)
        raise AuthenticationError("Invalid token")

    if claims.get("type") != TOKEN_TYPE_ACCESS or not claims.get("sub"):
        raise AuthenticationError("Invalid token")
    return claims


# ══════════════════════════════════════════════════════════════════════════
# Account Workflows
# ══════════════════════════════════════════════════════════════════════════

class AuthService:
    """
    Stateless account operations; every method receives the request's session.

    Responsibilities:
        - register():     create an account with a hashed password
        - authenticate(): check credentials and issue a token
        - get_user():     resolve a token subject to an active user
    """

    async def register(self, db: AsyncSession, dto: RegisterRequest) -> UserResponse:
        """
        Create a new account.

        Raises:
            ConflictError: email already registered (case-insensitive)
            DatabaseError: unexpected persistence failure
        """
        try:
            result = await db.execute(select(User).where(User.email == dto.email))
            if result.scalar_one_or_none() is not None:
                raise ConflictError(
                    message="An account with this email already exists",
                    context={"field": "email"},
                )

            # bcrypt is CPU-bound; hash in a worker thread
            password_hash = await asyncio.to_thread(hash_password, dto.password)
            user = User(
                email=dto.email,
                password_hash=password_hash,
                display_name=dto.display_name,
            )
            db.add(user)
            # Flush inside the try so a concurrent duplicate surfaces here
            await db.flush()
            logger.info("User registered: %s", user.id)
            return UserResponse.model_validate(user)

        except IntegrityError:
            # Lost a race with another registration for the same email
            await db.rollback()
            raise ConflictError(
                message="An account with this email already exists",
                context={"field": "email"},
            )
        except CrudCampError:
            raise
        except Exception as e:
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the account. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def authenticate(self, db: AsyncSession, dto: LoginRequest) -> TokenResponse:
        """
        Exchange email + password for an access token.

        Unknown email, wrong password, and inactive account all raise the
        same AuthenticationError so responses do not reveal which it was.
        """
        try:
            result = await db.execute(select(User).where(User.email == dto.email))
            user = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not sign you in. Please try again.",
                context={"error_type": type(e).__name__},
            )

        if user is None:
            await asyncio.to_thread(_verify_against_dummy, dto.password)
            logger.info("Login failed: unknown email")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not await asyncio.to_thread(verify_password, dto.password, user.password_hash):
            logger.info("Login failed: bad password for user %s", user.id)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not user.is_active:
            logger.info("Login refused: user %s is inactive", user.id)
            raise AuthenticationError(INVALID_CREDENTIALS)

        token, expires_in = create_access_token(user)
        logger.info("User %s logged in", user.id)
        return TokenResponse(
            access_token=token,
            expires_in=expires_in,
            user=UserResponse.model_validate(user),
        )

    async def get_user(self, db: AsyncSession, user_id: UUID) -> User:
        """
        Load the active user a token refers to.

        Raises:
            AuthenticationError: user deleted or deactivated since the token was issued
        """
        try:
            result = await db.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error loading user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not verify your session. Please try again.",
                context={"user_id": str(user_id)},
            )

        if user is None or not user.is_active:
            raise AuthenticationError("User no longer exists or is inactive")
        return user


auth_service = AuthService()
