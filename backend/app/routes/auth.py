"""
CrudCamp Backend — Auth Route Handlers
========================================

What:  Registration, login, and "who am I" endpoints.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from app.schemas.common import ErrorResponse
from app.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Account created", "model": UserResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await auth_service.register(db=db, dto=body)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        200: {"description": "Access token issued", "model": TokenResponse},
        401: {"description": "Invalid email or password", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
    },
    summary="Exchange email and password for a JWT",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    """
    Returns a bearer token valid for `expires_in` seconds.

    Example client usage:
        POST /api/auth/login {"email": "...", "password": "..."}
        GET  /api/tasks      Authorization: Bearer <access_token>
    """
    return await auth_service.authenticate(db=db, dto=body)


@router.get(
    "/me",
    response_model=UserResponse,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Current user",
)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user)
