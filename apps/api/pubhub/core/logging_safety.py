"""Helpers that keep credentials and identities out of log lines."""

from __future__ import annotations

import hashlib
from typing import Any


def safe_log_identifier(value: Any, *, prefix: str, length: int = 12) -> str:
    """Return a stable, non-reversible stand-in for an identifier in logs.

    Identical inputs map to identical tokens so log lines can still be
    correlated across a request.
    """
    text = str(value if value is not None else "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:length]
    return f"{prefix}-{digest}"


def describe_token(token: str | None) -> str:
    """Summarize a bearer credential for logs without exposing its value."""
    if not token:
        return "token-missing"
    return f"{safe_log_identifier(token, prefix='tok', length=8)} len={len(token)}"
