"""
Authentication Router

Endpoints for the single librarian account:
- Login (email/password -> bearer token, returned as plain text)
- Current user (from the bearer token)
- Password change

Security:
=========
- Passwords are verified against bcrypt hashes, never stored in plain text
- Tokens are signed JWTs valid for 30 days
- Login is rate limited more strictly than the rest of the API
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import PlainTextResponse

from catalog.config import get_settings
from catalog.dependencies import Auth, CurrentIdentity
from catalog.schemas.user import LoginRequest, PasswordUpdateRequest, UserResponse
from catalog.services.auth import AuthService
from catalog.services.rate_limiter import limiter

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        400: {"description": "Invalid email or empty password"},
        401: {"description": "Unauthorized"},
        404: {"description": "User not registered"},
    },
)


# -------------------------------------------------------------------------
# Login Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/login",
    response_class=PlainTextResponse,
    summary="Login",
    description="Exchange email and password for a bearer token. "
    "The token is returned as the raw response body.",
)
@limiter.limit(settings.rate_limit_login)
def login(request: Request, credentials: LoginRequest, auth: Auth) -> PlainTextResponse:
    """
    Authenticate and return a bearer token.

    Usage:
        token=$(curl -s -X POST /api/auth/login \\
            -H "Content-Type: application/json" \\
            -d '{"email": "william@example.com", "password": "Password123"}')
        curl -H "Authorization: Bearer $token" /api/auth/me
    """
    token = auth.login(credentials.email, credentials.password)
    return PlainTextResponse(token)


# -------------------------------------------------------------------------
# Current User Endpoint
# -------------------------------------------------------------------------
@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
)
def get_me(identity: CurrentIdentity) -> dict:
    return AuthService.get_current_user(identity)


# -------------------------------------------------------------------------
# Password Change Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/update-password",
    response_class=PlainTextResponse,
    status_code=status.HTTP_200_OK,
    summary="Change password",
    description="Set a new password for the account identified by email.",
)
@limiter.limit(settings.rate_limit_write)
def update_password(
    request: Request,
    body: PasswordUpdateRequest,
    identity: CurrentIdentity,
    auth: Auth,
) -> PlainTextResponse:
    auth.change_password(body.email, body.password)
    logger.info(f"Password change requested by {identity.email} for {body.email}")
    return PlainTextResponse("Password changed successfully")
