"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables.

    Secrets default to ``None`` so the process can start without them; code that
    needs a missing secret raises ``ConfigurationError`` at the point of use.
    """

    auth_provider: Literal["jwt", "mock"] = "jwt"
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"
    token_ttl_seconds: int = 60 * 60 * 24 * 30
    cookie_secure: bool = False

    bcrypt_rounds: int = 10

    telegram_bot_token: str | None = None
    telegram_auth_max_age_seconds: int = 3600

    x_api_key: str | None = None
    x_api_key_secret: str | None = None
    twitter_api_base_url: str = "https://api.twitter.com"
    twitter_callback_url: str = "http://localhost:3000/api/twitter-v1.1/auth/callback"

    model_config = SettingsConfigDict(env_prefix="PUBHUB_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
