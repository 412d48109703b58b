"""Twitter v1.1 account connection routes."""

from __future__ import annotations

import logging
from typing import Annotated
from urllib.parse import urlencode

from fastapi import APIRouter, Cookie, Depends, Query, Response
from fastapi.responses import RedirectResponse

from pubhub.adapters.oauth1 import TokenCredentials
from pubhub.adapters.twitter import TwitterOAuthClient, TwitterOAuthError
from pubhub.core.config import Settings, get_settings
from pubhub.core.logging_safety import safe_log_identifier
from pubhub.errors import ApiError
from pubhub.repositories.memory import InMemoryStore
from pubhub.routes.dependencies import get_authenticated_principal, get_store, get_twitter_client
from pubhub.schemas.auth import AuthPrincipal, TwitterAuthStartResponse
from pubhub.schemas.error import ErrorResponse

OAUTH_SECRET_COOKIE_NAME = "twitter_oauth_secret"
OAUTH_SECRET_COOKIE_PATH = "/api/twitter-v1.1"
OAUTH_SECRET_TTL_SECONDS = 600

router = APIRouter(prefix="/twitter-v1.1/auth", tags=["Twitter"])
logger = logging.getLogger(__name__)


def error_redirect(status_code: int, message: str) -> RedirectResponse:
    query = urlencode({"statusCode": status_code, "message": message})
    return RedirectResponse(url=f"/error?{query}", status_code=307)


@router.get(
    "",
    response_model=TwitterAuthStartResponse,
    responses={401: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def start_twitter_auth(
    response: Response,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    client: Annotated[TwitterOAuthClient, Depends(get_twitter_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TwitterAuthStartResponse:
    try:
        request_token = await client.request_token(settings.twitter_callback_url)
    except TwitterOAuthError as exc:
        logger.warning(
            "twitter.connect_failed principal_id=%s stage=request_token error=%s",
            safe_log_identifier(principal.user_id, prefix="pid"),
            exc,
        )
        raise ApiError(status_code=502, code="TWITTER_OAUTH_FAILED", message="Twitter authentication failed") from exc

    response.set_cookie(
        OAUTH_SECRET_COOKIE_NAME,
        request_token.secret,
        max_age=OAUTH_SECRET_TTL_SECONDS,
        path=OAUTH_SECRET_COOKIE_PATH,
        secure=settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )
    return TwitterAuthStartResponse(auth_url=client.authorize_url(request_token))


@router.get("/callback", response_class=RedirectResponse, status_code=307)
async def twitter_auth_callback(
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    client: Annotated[TwitterOAuthClient, Depends(get_twitter_client)],
    store: Annotated[InMemoryStore, Depends(get_store)],
    oauth_token: Annotated[str | None, Query()] = None,
    oauth_verifier: Annotated[str | None, Query()] = None,
    oauth_secret: Annotated[str | None, Cookie(alias=OAUTH_SECRET_COOKIE_NAME)] = None,
) -> RedirectResponse:
    if not oauth_token or not oauth_verifier or not oauth_secret:
        return error_redirect(400, "Missing parameters (oauth_token, oauth_verifier, oauth_token_secret)")

    safe_principal_id = safe_log_identifier(principal.user_id, prefix="pid")
    try:
        access = await client.access_token(TokenCredentials(key=oauth_token, secret=oauth_secret), oauth_verifier)
    except TwitterOAuthError as exc:
        logger.warning(
            "twitter.connect_failed principal_id=%s stage=access_token error=%s",
            safe_principal_id,
            exc,
        )
        return error_redirect(502, "Failed to get access token or user details from Twitter")

    store.upsert_twitter_account(
        user_id=principal.user_id,
        x_user_id=access.x_user_id,
        screen_name=access.screen_name,
        access_token=access.token,
        access_token_secret=access.secret,
    )
    logger.info(
        "twitter.connected principal_id=%s x_user=%s",
        safe_principal_id,
        safe_log_identifier(access.x_user_id, prefix="xid"),
    )

    redirect = RedirectResponse(url="/dashboard", status_code=307)
    redirect.delete_cookie(OAUTH_SECRET_COOKIE_NAME, path=OAUTH_SECRET_COOKIE_PATH)
    return redirect
