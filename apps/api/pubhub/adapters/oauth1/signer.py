"""OAuth 1.0a request signing (HMAC-SHA1), as used by the Twitter v1.1 API.

Encoding, normalization and the HMAC itself come from ``oauthlib``'s RFC 5849
primitives; this module decides which parameters are signed and keeps nonce
and clock injectable.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from oauthlib.common import generate_nonce
from oauthlib.oauth1.rfc5849 import parameters, signature, utils

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


def percent_encode(value: object) -> str:
    """Encode a value per RFC 5849 section 3.6 (unreserved: ALPHA DIGIT - . _ ~)."""
    return utils.escape(str(value))


def normalize_base_url(url: str) -> str:
    """Return the base string URI: lowercase scheme and host, no default port, no query."""
    return signature.base_string_uri(url)


def build_parameter_string(params: Iterable[tuple[str, str]]) -> str:
    """Encode every pair, then sort by encoded key and encoded value."""
    return signature.normalize_parameters([(str(key), str(value)) for key, value in params])


def build_signature_base_string(method: str, url: str, params: Iterable[tuple[str, str]]) -> str:
    return signature.signature_base_string(method, normalize_base_url(url), build_parameter_string(params))


def build_signing_key(consumer_secret: str, token_secret: str | None = None) -> str:
    return f"{percent_encode(consumer_secret)}&{percent_encode(token_secret or '')}"


@dataclass(frozen=True, slots=True)
class ConsumerCredentials:
    key: str
    secret: str


@dataclass(frozen=True, slots=True)
class TokenCredentials:
    key: str
    secret: str


@dataclass(frozen=True, slots=True)
class SignedRequest:
    """Outbound request descriptor with its OAuth parameters resolved."""

    method: str
    url: str
    params: tuple[tuple[str, str], ...]
    oauth_params: dict[str, str] = field(default_factory=dict)

    @property
    def nonce(self) -> str:
        return self.oauth_params["oauth_nonce"]

    @property
    def signature(self) -> str:
        return self.oauth_params["oauth_signature"]

    def authorization_header(self, realm: str | None = None) -> str:
        headers = parameters.prepare_headers(sorted(self.oauth_params.items()), realm=realm)
        return headers["Authorization"]


class OAuth1Signer:
    """Signs outbound requests on behalf of one consumer.

    Every call draws a fresh nonce and timestamp, so two signatures over the
    same request differ.
    """

    def __init__(
        self,
        consumer: ConsumerCredentials,
        *,
        nonce_factory: Callable[[], str] = generate_nonce,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not consumer.key or not consumer.secret:
            raise ValueError("OAuth consumer key and secret are required")
        self._consumer = consumer
        self._nonce_factory = nonce_factory
        self._clock = clock

    def authorize(
        self,
        method: str,
        url: str,
        params: Mapping[str, object] | None = None,
        token: TokenCredentials | None = None,
    ) -> SignedRequest:
        oauth_params = {
            "oauth_consumer_key": self._consumer.key,
            "oauth_nonce": self._nonce_factory(),
            "oauth_signature_method": SIGNATURE_METHOD,
            "oauth_timestamp": str(int(self._clock())),
            "oauth_version": OAUTH_VERSION,
        }
        if token is not None:
            oauth_params["oauth_token"] = token.key

        request_params = [(str(key), str(value)) for key, value in (params or {}).items()]
        # Extra oauth_* request params (e.g. oauth_callback) go into the header.
        oauth_params.update((key, value) for key, value in request_params if key.startswith("oauth_"))
        body_params = [(key, value) for key, value in request_params if not key.startswith("oauth_")]

        # Query parameters on the URL are part of the signed parameter set.
        signed_params = signature.collect_parameters(
            uri_query=urlsplit(url).query,
            body=body_params,
            headers=None,
        )
        signed_params.extend(oauth_params.items())

        base_string = build_signature_base_string(method, url, signed_params)
        oauth_params["oauth_signature"] = signature.sign_hmac_sha1(
            base_string,
            self._consumer.secret,
            token.secret if token else None,
        )

        return SignedRequest(
            method=method.upper(),
            url=url,
            params=tuple(body_params),
            oauth_params=oauth_params,
        )

    def sign(
        self,
        method: str,
        url: str,
        params: Mapping[str, object] | None = None,
        token: TokenCredentials | None = None,
    ) -> str:
        """Return the ``Authorization`` header value for the request."""
        return self.authorize(method, url, params, token).authorization_header()


__all__ = [
    "ConsumerCredentials",
    "OAuth1Signer",
    "SignedRequest",
    "TokenCredentials",
    "build_parameter_string",
    "build_signature_base_string",
    "build_signing_key",
    "normalize_base_url",
    "percent_encode",
]
