"""Access gate: the single authorization chokepoint for inbound requests."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from pubhub.core.logging_safety import safe_log_identifier
from pubhub.core.request_context import request_correlation_id
from pubhub.domain.route_policy import LOGIN_PATH, RouteAccess, classify_path, is_api_path, is_bypass_path
from pubhub.errors import ConfigurationError, configuration_error_response
from pubhub.schemas.auth import AuthPrincipal
from pubhub.schemas.error import ErrorResponse
from pubhub.services.identity import IdentityResolver

# Protected handlers read the resolved principal from request.state under this name.
PRINCIPAL_STATE_KEY = "auth_principal"

logger = logging.getLogger(__name__)


class GateOutcome(str, Enum):
    BYPASSED = "BYPASSED"
    AUTHORIZED = "AUTHORIZED"
    # Unauthenticated page request, sent to the login surface.
    REDIRECTED = "REDIRECTED"
    # Unauthenticated API request, answered with 401.
    REJECTED = "REJECTED"
    # Missing secret; answered with 500.
    FAULTED = "FAULTED"


@dataclass(frozen=True, slots=True)
class GateDecision:
    outcome: GateOutcome
    principal: AuthPrincipal | None = None
    reason: str = ""


def login_redirect_url(path: str) -> str:
    return f"{LOGIN_PATH}?{urlencode({'callbackUrl': path})}"


class AccessGate(BaseHTTPMiddleware):
    """Classifies each request and resolves identity on protected paths.

    ``resolver_provider`` is called per protected request so configuration is
    read at use time; it raises ``ConfigurationError`` when the token secret
    is missing.
    """

    def __init__(self, app: ASGIApp, *, resolver_provider: Callable[[], IdentityResolver]) -> None:
        super().__init__(app)
        self._resolver_provider = resolver_provider

    def decide(self, request: Request) -> GateDecision:
        path = request.url.path
        if is_bypass_path(path):
            return GateDecision(GateOutcome.BYPASSED, reason="auth_protocol")
        if classify_path(path) is RouteAccess.PUBLIC:
            return GateDecision(GateOutcome.BYPASSED, reason="public_path")

        try:
            resolver = self._resolver_provider()
        except ConfigurationError as exc:
            return GateDecision(GateOutcome.FAULTED, reason=f"missing_setting:{exc.setting}")

        principal = resolver.resolve(request, correlation_id=request_correlation_id(request))
        if principal is None:
            outcome = GateOutcome.REJECTED if is_api_path(path) else GateOutcome.REDIRECTED
            return GateDecision(outcome, reason="unauthenticated")
        return GateDecision(GateOutcome.AUTHORIZED, principal=principal)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        decision = self.decide(request)
        safe_correlation_id = safe_log_identifier(request_correlation_id(request), prefix="cid")

        if decision.outcome is GateOutcome.BYPASSED:
            return await call_next(request)

        if decision.outcome is GateOutcome.AUTHORIZED:
            setattr(request.state, PRINCIPAL_STATE_KEY, decision.principal)
            logger.info(
                "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s",
                safe_correlation_id,
                request.method,
                request.url.path,
                safe_log_identifier(decision.principal.user_id, prefix="pid"),
            )
            return await call_next(request)

        if decision.outcome is GateOutcome.FAULTED:
            logger.error(
                "auth.config_fault correlation_id=%s method=%s path=%s reason=%s",
                safe_correlation_id,
                request.method,
                request.url.path,
                decision.reason,
            )
            return JSONResponse(status_code=500, content=configuration_error_response().model_dump(exclude_none=True))

        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s outcome=%s",
            safe_correlation_id,
            request.method,
            request.url.path,
            decision.outcome.value,
        )
        if decision.outcome is GateOutcome.REJECTED:
            payload = ErrorResponse(code="UNAUTHORIZED", message="Authentication required")
            return JSONResponse(status_code=401, content=payload.model_dump(exclude_none=True))
        return RedirectResponse(url=login_redirect_url(request.url.path), status_code=307)


__all__ = ["AccessGate", "GateDecision", "GateOutcome", "PRINCIPAL_STATE_KEY", "login_redirect_url"]
