"""Route modules."""

from .session import router as session_router
from .telegram import router as telegram_router
from .twitter import router as twitter_router

__all__ = ["session_router", "telegram_router", "twitter_router"]
