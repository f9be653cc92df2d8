"""
CatHealth Backend — Auth Schemas
==================================

Request bodies for register/login, the token response, and the claims the
Authorization Gate attaches to each request.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator

from cathealth.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    """
    Body of POST /api/register.

    Password bounds:
        min 6: same floor the frontend enforces
        max 72: bcrypt ignores everything past 72 bytes
    """

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Name must not be blank")
        return stripped

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(CamelModel):
    """
    Body of POST /api/login.

    The email is a plain string here: a malformed address must produce the
    same 401 as an unknown one.
    """

    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=1024)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserPublic(CamelModel):
    """The user fields that are safe to return."""

    id: int
    name: str
    email: str


class AuthResponse(CamelModel):
    """Returned by register (201) and login (200)."""

    token: str
    user: UserPublic


class TokenClaims(BaseModel):
    """
    Verified claims of a bearer token.

    Set on request.state.user by the Authorization Gate and handed to
    every protected handler as `current_user`.
    """

    user_id: int
    email: str


class VerifiedUser(CamelModel):
    id: int
    email: str


class VerifyResponse(CamelModel):
    """Returned by GET /api/auth/verify."""

    valid: bool = True
    user: VerifiedUser
