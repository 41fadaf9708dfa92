"""
CrudCamp Backend — Request Dependencies
=========================================

What:  The bearer-token guard injected into protected routes.
How:   Reads `Authorization: Bearer <jwt>`, verifies it, loads the user.

Usage:
    @router.get("/tasks")
    async def list_tasks(user: User = Depends(get_current_user)): ...
"""

from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import AuthenticationError
from app.models.user import User
from app.services.auth_service import auth_service, decode_access_token


def extract_bearer_token(request: Request) -> str:
    """
    Returns the raw token from the Authorization header.

    Raises:
        AuthenticationError: header missing, not a Bearer scheme, or empty token
    """
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Missing bearer token")
    return token.strip()


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> User:
    token = extract_bearer_token(request)
    claims = decode_access_token(token)
    try:
        user_id = UUID(claims["sub"])
    except ValueError:
        raise AuthenticationError("Invalid token")

    user = await auth_service.get_user(db, user_id)
    # Exposed to the access log middleware
    request.state.user_id = str(user.id)
    return user
