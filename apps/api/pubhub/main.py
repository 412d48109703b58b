"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pubhub.errors import ApiError, ConfigurationError, configuration_error_response
from pubhub.middleware.access_gate import AccessGate
from pubhub.repositories.memory import InMemoryStore
from pubhub.routes import session_router, telegram_router, twitter_router
from pubhub.routes.dependencies import build_identity_resolver
from pubhub.routes.session import login, register
from pubhub.routes.telegram import telegram_login
from pubhub.schemas.error import ErrorResponse
from pubhub.services.identity import IdentityResolver

logger = logging.getLogger(__name__)

# Malformed bodies on these endpoints are rejected as 400 before any crypto runs.
# Keyed by handler, so router prefixes do not affect the lookup.
_MALFORMED_INPUT_MESSAGES: dict[Callable[..., object], str] = {
    login: "Username and password are required",
    register: "Username, email and password must be strings",
    telegram_login: "Telegram login payload is missing required fields",
}


def create_app(resolver_provider: Callable[[], IdentityResolver] | None = None) -> FastAPI:
    app = FastAPI(title="Publisher Hub API", version="1.0.0")
    app.state.store = InMemoryStore()
    app.state.resolver_provider = resolver_provider or build_identity_resolver

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.error(
            "config.fault method=%s path=%s setting=%s",
            request.method,
            request.url.path,
            exc.setting,
        )
        return JSONResponse(status_code=500, content=configuration_error_response().model_dump(exclude_none=True))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        route = request.scope.get("route")
        message = _MALFORMED_INPUT_MESSAGES.get(getattr(route, "endpoint", None))
        if message is not None:
            payload = ErrorResponse(code="MALFORMED_INPUT", message=message)
            return JSONResponse(status_code=400, content=payload.model_dump(exclude_none=True))

        return await request_validation_exception_handler(request, exc)

    api_prefix = "/api"
    app.include_router(session_router, prefix=api_prefix)
    app.include_router(telegram_router, prefix=api_prefix)
    app.include_router(twitter_router, prefix=api_prefix)

    # The provider is looked up per request so tests can swap app.state.resolver_provider.
    app.add_middleware(AccessGate, resolver_provider=lambda: app.state.resolver_provider())

    return app


app = create_app()
