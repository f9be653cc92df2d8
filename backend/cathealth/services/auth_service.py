"""
CatHealth Backend — Auth Service
==================================

What:  Registration, login, and bearer token issuance/verification.
Why:   Keeps credential handling out of the routes and gives the
       Authorization Gate a single verify_token() to call.
How:   passlib CryptContext (bcrypt) for password hashes, python-jose for
       HS256 JWTs. One instance is built by create_app() and stored on
       app.state.auth_service.

Token format:
    {"userId": 42, "email": "alice@example.com", "iat": ..., "exp": iat + 24h}
    Stateless: nothing is stored server-side, so a token stays valid until
    it expires even after the client logs out.

Login never reveals which check failed: an unknown email and a wrong
password raise the same AuthenticationError, and the unknown-email branch
still runs a dummy bcrypt verification so both take about as long.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from cathealth.config import Settings
from cathealth.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
)
from cathealth.models import User
from cathealth.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    TokenClaims,
    UserPublic,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_TOKEN = "Invalid or expired token"


class AuthService:
    """
    Credential and token operations.

    Password hashing is CPU-bound (bcrypt work factor 10 ≈ 50-100ms), so
    hash/verify run in Starlette's threadpool instead of on the event loop.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_hours: int = 24,
        bcrypt_rounds: int = 10,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_hours = expires_hours
        self.pwd = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=bcrypt_rounds,
        )

    @classmethod
    def from_settings(cls, config: Settings) -> "AuthService":
        return cls(
            secret=config.jwt_secret,
            algorithm=config.jwt_algorithm,
            expires_hours=config.jwt_expires_hours,
            bcrypt_rounds=config.bcrypt_rounds,
        )

    # ── Passwords ─────────────────────────────────────────────────────────

    async def hash_password(self, plain: str) -> str:
        return await run_in_threadpool(self.pwd.hash, plain)

    async def verify_password(self, plain: str, hashed: str) -> bool:
        return await run_in_threadpool(self.pwd.verify, plain, hashed)

    # ── Tokens ────────────────────────────────────────────────────────────

    def create_token(self, user_id: int, email: str, now: Optional[datetime] = None) -> str:
        """Signs {userId, email} with a fixed validity window."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "userId": user_id,
            "email": email,
            "iat": issued_at,
            "exp": issued_at + timedelta(hours=self.expires_hours),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify_token(self, token: str) -> TokenClaims:
        """
        Checks signature and expiry and returns the embedded claims.

        Raises:
            PermissionDeniedError: bad signature, expired, or malformed claims
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.info("Rejected bearer token: %s", type(e).__name__)
            raise PermissionDeniedError(
                message=INVALID_TOKEN,
                context={"reason": type(e).__name__},
            )

        user_id = payload.get("userId")
        email = payload.get("email")
        if (
            "exp" not in payload
            or not isinstance(user_id, int)
            or isinstance(user_id, bool)
            or not isinstance(email, str)
        ):
            logger.info("Rejected bearer token: malformed claims")
            raise PermissionDeniedError(message=INVALID_TOKEN, context={"reason": "claims"})

        return TokenClaims(user_id=user_id, email=email)

    def _auth_response(self, user: User) -> AuthResponse:
        return AuthResponse(
            token=self.create_token(user.id, user.email),
            user=UserPublic(id=user.id, name=user.name, email=user.email),
        )

    # ── Register / Login ──────────────────────────────────────────────────

    async def register(self, db: AsyncSession, payload: RegisterRequest) -> AuthResponse:
        """
        Creates a user and returns a token for it.

        Raises:
            ConflictError: email already registered (including a concurrent
                           insert caught by the unique index)
            DatabaseError: any other database failure
        """
        try:
            result = await db.execute(select(User.id).where(User.email == payload.email))
            if result.scalar_one_or_none() is not None:
                raise ConflictError(
                    message="Email is already registered",
                    context={"email": payload.email},
                )

            user = User(
                name=payload.name,
                email=payload.email,
                password_hash=await self.hash_password(payload.password),
            )
            db.add(user)
            await db.flush()
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(
                message="Email is already registered",
                context={"email": payload.email},
            )
        except SQLAlchemyError as e:
            logger.error("Database error during registration: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the account. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("User registered: id=%s", user.id)
        return self._auth_response(user)

    async def login(self, db: AsyncSession, payload: LoginRequest) -> AuthResponse:
        """
        Verifies credentials and returns a fresh token.

        Raises:
            AuthenticationError: unknown email or wrong password (same message)
        """
        try:
            result = await db.execute(select(User).where(User.email == payload.email))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not log in. Please try again.",
                context={"error_type": type(e).__name__},
            )

        if user is None:
            await run_in_threadpool(self.pwd.dummy_verify)
            logger.info("Failed login: unknown email")
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        if not await self.verify_password(payload.password, user.password_hash):
            logger.info("Failed login: wrong password for user %s", user.id)
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        logger.info("User logged in: id=%s", user.id)
        return self._auth_response(user)

    async def get_user(self, db: AsyncSession, current_user: TokenClaims) -> UserPublic:
        """Public fields of the token's user; 404 if the row is gone."""
        try:
            user = await db.get(User, current_user.user_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading user %s: %s", current_user.user_id, str(e))
            raise DatabaseError(context={"user_id": current_user.user_id})

        if user is None:
            raise NotFoundError(resource="user", resource_id=str(current_user.user_id))
        return UserPublic(id=user.id, name=user.name, email=user.email)
