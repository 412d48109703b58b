"""Path classification tables for the access gate.

Classification depends on the request path only: never on method, headers,
or body.
"""

from enum import Enum

LOGIN_PATH = "/auth"
API_PREFIX = "/api"

# Endpoints of the login protocol itself; always let through untouched.
BYPASS_PATH_PREFIXES: tuple[str, ...] = (
    "/api/auth",
    "/api/login",
    "/api/logout",
    "/api/register",
)

# Matched only as the whole path.
PUBLIC_EXACT_PATHS: tuple[str, ...] = ("/",)

# Matched exactly or on a "/" segment boundary.
PUBLIC_PATH_PREFIXES: tuple[str, ...] = (
    LOGIN_PATH,
    "/about",
    "/privacy",
    "/terms",
    "/error",
    "/robots.txt",
    "/sitemap.xml",
    "/api/health-check",
)


class RouteAccess(str, Enum):
    PUBLIC = "PUBLIC"
    PROTECTED = "PROTECTED"


def matches_prefix(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def is_bypass_path(path: str) -> bool:
    return any(matches_prefix(path, prefix) for prefix in BYPASS_PATH_PREFIXES)


def classify_path(path: str) -> RouteAccess:
    if path in PUBLIC_EXACT_PATHS:
        return RouteAccess.PUBLIC
    if any(matches_prefix(path, prefix) for prefix in PUBLIC_PATH_PREFIXES):
        return RouteAccess.PUBLIC
    return RouteAccess.PROTECTED


def is_api_path(path: str) -> bool:
    return matches_prefix(path, API_PREFIX)
