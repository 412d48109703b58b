"""OAuth 1.0a signing adapters."""

from .signer import (
    ConsumerCredentials,
    OAuth1Signer,
    SignedRequest,
    TokenCredentials,
    build_parameter_string,
    build_signature_base_string,
    build_signing_key,
    normalize_base_url,
    percent_encode,
)

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
