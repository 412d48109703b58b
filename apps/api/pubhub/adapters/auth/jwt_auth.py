"""HS256 JWT verifier and issuer for session cookies."""

from __future__ import annotations

import math
import time
from typing import Any

import jwt

from pubhub.adapters.auth.base import (
    InvalidClaimTypeError,
    MalformedTokenError,
    SignatureInvalidError,
    TokenExpiredError,
    TokenVerificationError,
    TokenVerifier,
)
from pubhub.errors import ConfigurationError
from pubhub.schemas.auth import AuthPrincipal

USER_ID_CLAIM = "userId"


def normalize_user_id(value: Any) -> str:
    """Convert a ``userId`` claim to the canonical string principal id.

    Strings and numbers are accepted. Integral numbers render without a
    fractional part so ``42`` and ``42.0`` name the same principal.
    """
    # bool is an int subclass
    if isinstance(value, bool):
        raise InvalidClaimTypeError("userId claim must be a string or a number")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidClaimTypeError("userId claim must be a finite number")
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, str):
        user_id = value.strip()
        if not user_id:
            raise InvalidClaimTypeError("userId claim is empty")
        return user_id
    raise InvalidClaimTypeError("userId claim must be a string or a number")


class JwtTokenVerifier(TokenVerifier):
    """Verifies HMAC-signed JWTs carrying a ``userId`` claim."""

    def __init__(self, secret: str | None, *, algorithm: str = "HS256", leeway: float = 0) -> None:
        if not secret:
            raise ConfigurationError("PUBHUB_JWT_SECRET")
        self._secret = secret
        self._algorithm = algorithm
        self._leeway = leeway

    def verify_token(self, token: str) -> AuthPrincipal:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"]},
                leeway=self._leeway,
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token expired") from exc
        except jwt.InvalidSignatureError as exc:
            raise SignatureInvalidError("Invalid token signature") from exc
        except (jwt.DecodeError, jwt.MissingRequiredClaimError) as exc:
            raise MalformedTokenError("Malformed token") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenVerificationError("Invalid token") from exc

        return AuthPrincipal(user_id=normalize_user_id(claims.get(USER_ID_CLAIM)))


def issue_token(
    user_id: str | int,
    *,
    secret: str | None,
    ttl_seconds: int,
    algorithm: str = "HS256",
    now: float | None = None,
) -> str:
    """Sign a session token for ``user_id`` that expires after ``ttl_seconds``."""
    if not secret:
        raise ConfigurationError("PUBHUB_JWT_SECRET")
    issued_at = int(time.time() if now is None else now)
    claims = {
        USER_ID_CLAIM: normalize_user_id(user_id),
        "iat": issued_at,
        "exp": issued_at + ttl_seconds,
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


__all__ = ["JwtTokenVerifier", "USER_ID_CLAIM", "issue_token", "normalize_user_id"]
