"""Telegram adapters."""

from .login_widget import build_check_string, compute_hash, is_auth_date_fresh, verify_login_payload

__all__ = ["build_check_string", "compute_hash", "is_auth_date_fresh", "verify_login_payload"]
