"""Twitter v1.1 adapters."""

from .client import TwitterAccessToken, TwitterOAuthClient, TwitterOAuthError, TwitterRequestToken

__all__ = ["TwitterAccessToken", "TwitterOAuthClient", "TwitterOAuthError", "TwitterRequestToken"]
