"""Session routes: registration, password login, logout, and identity checks."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from pubhub.adapters.auth import issue_token
from pubhub.core.config import Settings, get_settings
from pubhub.routes.dependencies import get_optional_principal, get_user_service
from pubhub.schemas.auth import (
    AuthCheckResponse,
    AuthPrincipal,
    HealthCheckResponse,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RegisterRequest,
)
from pubhub.schemas.error import ErrorResponse
from pubhub.services.identity import TOKEN_COOKIE_NAME
from pubhub.services.users import UserService

router = APIRouter(tags=["Session"])


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        TOKEN_COOKIE_NAME,
        token,
        max_age=settings.token_ttl_seconds,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )


@router.post(
    "/register",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def register(
    payload: RegisterRequest,
    users: Annotated[UserService, Depends(get_user_service)],
) -> LoginResponse:
    users.register(username=payload.username, email=payload.email, password=payload.password)
    return LoginResponse(success=True, message="Registration successful")


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def login(
    payload: LoginRequest,
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> LoginResponse:
    user = users.authenticate(username=payload.username, password=payload.password)

    token = issue_token(
        user.id,
        secret=settings.jwt_secret,
        ttl_seconds=settings.token_ttl_seconds,
        algorithm=settings.jwt_algorithm,
    )
    set_session_cookie(response, token, settings)
    return LoginResponse(success=True, message="Login successful")


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
) -> LogoutResponse:
    response.delete_cookie(
        TOKEN_COOKIE_NAME,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )
    return LogoutResponse(message="Logged out successfully")


@router.get("/auth/check", response_model=AuthCheckResponse)
async def check_auth(
    principal: Annotated[AuthPrincipal | None, Depends(get_optional_principal)],
) -> AuthCheckResponse:
    if principal is None:
        return AuthCheckResponse(authenticated=False)
    return AuthCheckResponse(authenticated=True, user_id=principal.user_id)


@router.get("/health-check", response_model=HealthCheckResponse)
async def health_check(
    principal: Annotated[AuthPrincipal | None, Depends(get_optional_principal)],
) -> HealthCheckResponse:
    return HealthCheckResponse(
        logged_in=principal is not None,
        user_id=principal.user_id if principal else None,
    )
