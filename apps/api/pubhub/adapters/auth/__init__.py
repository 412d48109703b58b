"""Auth verifier adapters."""

from .base import (
    InvalidClaimTypeError,
    MalformedTokenError,
    SignatureInvalidError,
    TokenExpiredError,
    TokenVerificationError,
    TokenVerifier,
)
from .jwt_auth import JwtTokenVerifier, issue_token, normalize_user_id
from .mock_auth import MockTokenVerifier

__all__ = [
    "InvalidClaimTypeError",
    "JwtTokenVerifier",
    "MalformedTokenError",
    "MockTokenVerifier",
    "SignatureInvalidError",
    "TokenExpiredError",
    "TokenVerificationError",
    "TokenVerifier",
    "issue_token",
    "normalize_user_id",
]
