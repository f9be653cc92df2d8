"""
CatHealth Backend — Request Dependencies
==========================================

What:  FastAPI dependencies shared by the routers: the Authorization Gate
       and accessors for the per-app services stored on app.state.

Authorization Gate (get_current_user):
    no Authorization header / non-Bearer scheme / empty token → 401
        "Access token required"
    token fails signature or expiry check                     → 403
        "Invalid or expired token"
    otherwise → TokenClaims on request.state.user and returned

The gate does not touch the database: a token for a deleted user still
passes until it expires, and resource lookups then fail with 404/403.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cathealth.exceptions import AuthenticationError
from cathealth.schemas.auth import TokenClaims
from cathealth.services.auth_service import AuthService
from cathealth.services.file_service import FileService

# auto_error=False: a missing header must produce our 401 body, not FastAPI's default error
bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_file_service(request: Request) -> FileService:
    return request.app.state.file_service


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenClaims:
    if credentials is None or not credentials.credentials.strip():
        raise AuthenticationError(message="Access token required")

    claims = auth_service.verify_token(credentials.credentials.strip())
    request.state.user = claims
    return claims
