"""Telegram login widget verification.

See https://core.telegram.org/widgets/login#checking-authorization
"""

from __future__ import annotations

import hashlib
import hmac
import time
from collections.abc import Mapping

HASH_FIELD = "hash"
DEFAULT_MAX_AGE_SECONDS = 3600


def build_check_string(payload: Mapping[str, object]) -> str:
    """Join ``key=value`` lines for every field except ``hash``, sorted by key bytes."""
    fields = {key: value for key, value in payload.items() if key != HASH_FIELD}
    return "\n".join(f"{key}={fields[key]}" for key in sorted(fields, key=lambda k: k.encode("utf-8")))


def compute_hash(payload: Mapping[str, object], bot_token: str) -> str:
    secret_key = hashlib.sha256(bot_token.encode("utf-8")).digest()
    return hmac.new(secret_key, build_check_string(payload).encode("utf-8"), hashlib.sha256).hexdigest()


def verify_login_payload(payload: Mapping[str, object], bot_token: str) -> bool:
    received = payload.get(HASH_FIELD)
    if not isinstance(received, str) or not received:
        return False
    return hmac.compare_digest(compute_hash(payload, bot_token), received)


def is_auth_date_fresh(
    auth_date: int,
    max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS,
    *,
    now: float | None = None,
) -> bool:
    current = int(time.time() if now is None else now)
    return current - auth_date <= max_age_seconds


__all__ = ["build_check_string", "compute_hash", "is_auth_date_fresh", "verify_login_payload"]
