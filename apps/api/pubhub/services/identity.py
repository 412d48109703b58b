"""Request identity resolution."""

from __future__ import annotations

import logging

from starlette.requests import HTTPConnection

from pubhub.adapters.auth import TokenVerificationError, TokenVerifier
from pubhub.core.logging_safety import describe_token, safe_log_identifier
from pubhub.schemas.auth import AuthPrincipal

# Session tokens travel only in this cookie.
TOKEN_COOKIE_NAME = "jwt"

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Turns an inbound request into a principal or ``None`` (unauthenticated).

    Every failure cause collapses into ``None``; the cause is only logged.
    ``ConfigurationError`` from the verifier is not a verification failure and
    propagates.
    """

    def __init__(self, verifier: TokenVerifier) -> None:
        self._verifier = verifier

    @staticmethod
    def credential_from(connection: HTTPConnection) -> str | None:
        token = connection.cookies.get(TOKEN_COOKIE_NAME)
        return token or None

    def resolve_token(self, token: str | None, *, correlation_id: str | None = None) -> AuthPrincipal | None:
        safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")
        if token is None:
            logger.debug("identity.unresolved correlation_id=%s reason=missing_credential", safe_correlation_id)
            return None

        try:
            principal = self._verifier.verify_token(token)
        except TokenVerificationError as exc:
            logger.warning(
                "identity.unresolved correlation_id=%s reason=%s token=%s",
                safe_correlation_id,
                exc.reason,
                describe_token(token),
            )
            return None

        logger.debug(
            "identity.resolved correlation_id=%s principal_id=%s",
            safe_correlation_id,
            safe_log_identifier(principal.user_id, prefix="pid"),
        )
        return principal

    def resolve(self, connection: HTTPConnection, *, correlation_id: str | None = None) -> AuthPrincipal | None:
        return self.resolve_token(self.credential_from(connection), correlation_id=correlation_id)


__all__ = ["IdentityResolver", "TOKEN_COOKIE_NAME"]
