"""Mock auth verifier for local development and tests."""

from pubhub.adapters.auth.base import MalformedTokenError, TokenVerifier
from pubhub.adapters.auth.jwt_auth import normalize_user_id
from pubhub.schemas.auth import AuthPrincipal


class MockTokenVerifier(TokenVerifier):
    """Accepts deterministic ``test:<user_id>`` tokens only."""

    def verify_token(self, token: str) -> AuthPrincipal:
        prefix, _, user_id = token.partition(":")
        if prefix != "test" or not user_id:
            raise MalformedTokenError("Invalid bearer token")
        return AuthPrincipal(user_id=normalize_user_id(user_id))


__all__ = ["MockTokenVerifier"]
