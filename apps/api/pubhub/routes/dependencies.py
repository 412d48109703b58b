"""Dependency wiring for routes."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Request

from pubhub.adapters.auth import JwtTokenVerifier, MockTokenVerifier, TokenVerifier
from pubhub.adapters.oauth1 import ConsumerCredentials, OAuth1Signer
from pubhub.adapters.twitter import TwitterOAuthClient
from pubhub.core.config import Settings, get_settings
from pubhub.core.logging_safety import safe_log_identifier
from pubhub.core.request_context import request_correlation_id
from pubhub.errors import ApiError, ConfigurationError
from pubhub.middleware.access_gate import PRINCIPAL_STATE_KEY
from pubhub.repositories.memory import InMemoryStore
from pubhub.schemas.auth import AuthPrincipal
from pubhub.services.identity import IdentityResolver
from pubhub.services.users import UserService

logger = logging.getLogger(__name__)


def build_token_verifier(settings: Settings) -> TokenVerifier:
    """Resolve provider adapter from configuration."""
    if settings.auth_provider == "mock":
        return MockTokenVerifier()
    return JwtTokenVerifier(settings.jwt_secret, algorithm=settings.jwt_algorithm)


def build_identity_resolver() -> IdentityResolver:
    """Shared resolution path for the access gate and route dependencies."""
    return IdentityResolver(build_token_verifier(get_settings()))


def get_identity_resolver(request: Request) -> IdentityResolver:
    return request.app.state.resolver_provider()


async def get_authenticated_principal(request: Request) -> AuthPrincipal:
    """Read the principal the access gate attached; never re-verifies."""
    principal = getattr(request.state, PRINCIPAL_STATE_KEY, None)
    if not isinstance(principal, AuthPrincipal):
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=principal_not_attached",
            safe_log_identifier(request_correlation_id(request), prefix="cid"),
            request.method,
            request.url.path,
        )
        raise ApiError(status_code=401, code="UNAUTHORIZED", message="Authentication required")
    return principal


async def get_optional_principal(
    request: Request,
    resolver: Annotated[IdentityResolver, Depends(get_identity_resolver)],
) -> AuthPrincipal | None:
    """Identity for public endpoints that adapt to a signed-in caller."""
    attached = getattr(request.state, PRINCIPAL_STATE_KEY, None)
    if isinstance(attached, AuthPrincipal):
        return attached
    return resolver.resolve(request, correlation_id=request_correlation_id(request))


def get_oauth1_signer(settings: Annotated[Settings, Depends(get_settings)]) -> OAuth1Signer:
    if not settings.x_api_key:
        raise ConfigurationError("PUBHUB_X_API_KEY")
    if not settings.x_api_key_secret:
        raise ConfigurationError("PUBHUB_X_API_KEY_SECRET")
    return OAuth1Signer(ConsumerCredentials(key=settings.x_api_key, secret=settings.x_api_key_secret))


def get_twitter_client(
    signer: Annotated[OAuth1Signer, Depends(get_oauth1_signer)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TwitterOAuthClient:
    return TwitterOAuthClient(signer, base_url=settings.twitter_api_base_url)


def get_store(request: Request) -> InMemoryStore:
    return request.app.state.store


def get_user_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> UserService:
    return UserService(store, bcrypt_rounds=settings.bcrypt_rounds)
