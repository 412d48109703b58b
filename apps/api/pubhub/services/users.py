"""Password user service: registration rules and bcrypt login."""

from __future__ import annotations

import logging
import re
from functools import lru_cache

import bcrypt

from pubhub.core.logging_safety import safe_log_identifier
from pubhub.errors import ApiError
from pubhub.repositories.memory import InMemoryStore, UserRecord

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128
LOGIN_PASSWORD_MIN_LENGTH = 3

_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_LETTER_PATTERN = re.compile(r"[A-Za-z]")
_DIGIT_PATTERN = re.compile(r"[0-9]")

# bcrypt only reads the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, *, rounds: int = 10) -> bytes:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=rounds))


def verify_password(password: str, password_hash: bytes) -> bool:
    return bcrypt.checkpw(_password_bytes(password), password_hash)


@lru_cache(maxsize=4)
def _dummy_hash(rounds: int) -> bytes:
    return hash_password("unknown-user-placeholder", rounds=rounds)


def _validation_error(field: str, message: str) -> ApiError:
    return ApiError(status_code=400, code="VALIDATION_ERROR", message=message, details={"field": field})


def validate_username(username: str | None) -> str:
    if not username:
        raise _validation_error("username", "Username is required")

    trimmed = username.strip()
    if len(trimmed) < USERNAME_MIN_LENGTH:
        raise _validation_error("username", f"Username must be at least {USERNAME_MIN_LENGTH} characters")
    if len(trimmed) > USERNAME_MAX_LENGTH:
        raise _validation_error("username", f"Username must be at most {USERNAME_MAX_LENGTH} characters")
    if not _USERNAME_PATTERN.match(trimmed):
        raise _validation_error(
            "username",
            "Username can only contain letters, numbers, underscores, and hyphens",
        )
    return trimmed


def validate_email(email: str | None) -> str:
    if not email:
        raise _validation_error("email", "Email is required")

    normalized = email.strip().lower()
    if not _EMAIL_PATTERN.match(normalized):
        raise _validation_error("email", "Please enter a valid email address")
    if len(normalized) > EMAIL_MAX_LENGTH:
        raise _validation_error("email", "Email is too long")
    return normalized


def validate_password(password: str | None) -> str:
    if not password:
        raise _validation_error("password", "Password is required")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise _validation_error("password", f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if len(password) > PASSWORD_MAX_LENGTH:
        raise _validation_error("password", f"Password must be at most {PASSWORD_MAX_LENGTH} characters")
    if not _LETTER_PATTERN.search(password) or not _DIGIT_PATTERN.search(password):
        raise _validation_error("password", "Password must contain at least one letter and one number")
    return password


class UserService:
    def __init__(self, store: InMemoryStore, *, bcrypt_rounds: int = 10) -> None:
        self._store = store
        self._bcrypt_rounds = bcrypt_rounds

    def register(self, *, username: str | None, email: str | None, password: str | None) -> UserRecord:
        """Validate in field order, then reject duplicates with ``409``."""
        username = validate_username(username)
        email = validate_email(email)
        password = validate_password(password)

        if self._store.get_user_by_username(username) is not None:
            raise ApiError(
                status_code=409,
                code="CONFLICT",
                message="Username already exists",
                details={"field": "username"},
            )
        if self._store.get_user_by_email(email) is not None:
            raise ApiError(
                status_code=409,
                code="CONFLICT",
                message="Email already exists",
                details={"field": "email"},
            )

        record = self._store.create_user(
            username=username,
            email=email,
            password_hash=hash_password(password, rounds=self._bcrypt_rounds),
        )
        logger.info("user.registered user=%s", safe_log_identifier(record.id, prefix="uid"))
        return record

    def authenticate(self, *, username: str, password: str) -> UserRecord:
        invalid = ApiError(status_code=401, code="UNAUTHORIZED", message="Invalid credentials")

        trimmed = username.strip()
        if not USERNAME_MIN_LENGTH <= len(trimmed) <= USERNAME_MAX_LENGTH:
            raise invalid
        if len(password) < LOGIN_PASSWORD_MIN_LENGTH:
            raise invalid

        record = self._store.get_user_by_username(trimmed)
        if record is None:
            # Same bcrypt cost as a real check so unknown usernames are not faster.
            verify_password(password, _dummy_hash(self._bcrypt_rounds))
            logger.warning("login.rejected user=%s reason=unknown_user", safe_log_identifier(trimmed, prefix="usr"))
            raise invalid

        if not verify_password(password, record.password_hash):
            logger.warning("login.rejected user=%s reason=password_mismatch", safe_log_identifier(record.id, prefix="uid"))
            raise invalid

        return record
