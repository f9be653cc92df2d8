"""
CatHealth Backend — Auth Route Handlers
=========================================

What:  Registration, login, token verification and the current user.
Who:   Called by the frontend login/register pages and on app start
       (verify) to decide whether a stored token is still usable.

Paths:
    POST /api/register, /api/auth/register   (same handler, both paths)
    POST /api/login,    /api/auth/login
    GET  /api/auth/verify                    (gate only, no DB access)
    GET  /api/auth/user                      (gate + user lookup)
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cathealth.database import get_db_session
from cathealth.dependencies import get_auth_service, get_current_user
from cathealth.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    TokenClaims,
    UserPublic,
    VerifiedUser,
    VerifyResponse,
)
from cathealth.schemas.common import ErrorResponse
from cathealth.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    responses={400: {"description": "Invalid input or email taken", "model": ErrorResponse}},
    summary="Create an account",
)
@router.post("/auth/register", status_code=201, response_model=AuthResponse, include_in_schema=False)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Creates the user and returns a token so the client is logged in immediately."""
    return await auth_service.register(db, payload)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Log in with email and password",
)
@router.post("/auth/login", response_model=AuthResponse, include_in_schema=False)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    return await auth_service.login(db, payload)


@router.get(
    "/auth/verify",
    response_model=VerifyResponse,
    responses={
        401: {"description": "No bearer token", "model": ErrorResponse},
        403: {"description": "Invalid or expired token", "model": ErrorResponse},
    },
    summary="Check a bearer token",
)
async def verify(current_user: TokenClaims = Depends(get_current_user)) -> VerifyResponse:
    return VerifyResponse(
        valid=True,
        user=VerifiedUser(id=current_user.user_id, email=current_user.email),
    )


@router.get(
    "/auth/user",
    response_model=UserPublic,
    responses={404: {"description": "User no longer exists", "model": ErrorResponse}},
    summary="Current user's profile",
)
async def current_user_profile(
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserPublic:
    return await auth_service.get_user(db, current_user)
