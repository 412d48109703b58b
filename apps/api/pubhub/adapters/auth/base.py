"""Authentication provider interfaces and verification failures."""

from abc import ABC, abstractmethod

from pubhub.schemas.auth import AuthPrincipal


class TokenVerificationError(Exception):
    """Raised when a bearer credential cannot be verified or normalized.

    ``reason`` is a short machine-readable label for logs only; it must not be
    returned to the client.
    """

    reason = "invalid_token"


class MalformedTokenError(TokenVerificationError):
    reason = "malformed_token"


class SignatureInvalidError(TokenVerificationError):
    reason = "signature_invalid"


class TokenExpiredError(TokenVerificationError):
    reason = "expired"


class InvalidClaimTypeError(TokenVerificationError):
    reason = "invalid_claim_type"


class TokenVerifier(ABC):
    """Provider-neutral token verification interface."""

    @abstractmethod
    def verify_token(self, token: str) -> AuthPrincipal:
        """Verify token and return normalized principal."""


__all__ = [
    "InvalidClaimTypeError",
    "MalformedTokenError",
    "SignatureInvalidError",
    "TokenExpiredError",
    "TokenVerificationError",
    "TokenVerifier",
]
