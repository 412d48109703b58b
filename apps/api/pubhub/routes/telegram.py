"""Telegram login widget route."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from pubhub.adapters.auth import issue_token
from pubhub.adapters.telegram import is_auth_date_fresh, verify_login_payload
from pubhub.core.config import Settings, get_settings
from pubhub.core.logging_safety import safe_log_identifier
from pubhub.errors import ApiError, ConfigurationError
from pubhub.routes.session import set_session_cookie
from pubhub.schemas.auth import LoginResponse, TelegramLoginPayload
from pubhub.schemas.error import ErrorResponse

router = APIRouter(prefix="/auth/telegram", tags=["Telegram"])
logger = logging.getLogger(__name__)


def telegram_principal_id(telegram_id: int) -> str:
    return f"tg:{telegram_id}"


@router.post(
    "",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def telegram_login(
    payload: TelegramLoginPayload,
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
) -> LoginResponse:
    if not settings.telegram_bot_token:
        raise ConfigurationError("PUBHUB_TELEGRAM_BOT_TOKEN")

    safe_telegram_id = safe_log_identifier(payload.id, prefix="tg")
    if not verify_login_payload(payload.signed_fields(), settings.telegram_bot_token):
        logger.warning("telegram.login_rejected telegram_id=%s reason=hash_mismatch", safe_telegram_id)
        raise ApiError(status_code=401, code="UNAUTHORIZED", message="Invalid Telegram login data")

    if not is_auth_date_fresh(payload.auth_date, settings.telegram_auth_max_age_seconds):
        logger.warning("telegram.login_rejected telegram_id=%s reason=stale_auth_date", safe_telegram_id)
        raise ApiError(status_code=401, code="UNAUTHORIZED", message="Telegram login data expired")

    token = issue_token(
        telegram_principal_id(payload.id),
        secret=settings.jwt_secret,
        ttl_seconds=settings.token_ttl_seconds,
        algorithm=settings.jwt_algorithm,
    )
    set_session_cookie(response, token, settings)
    logger.info("telegram.login_accepted telegram_id=%s", safe_telegram_id)
    return LoginResponse(success=True, message="Login successful")
