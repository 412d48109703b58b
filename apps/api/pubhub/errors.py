"""Application exception types."""

from pubhub.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


class ConfigurationError(Exception):
    """A required secret or credential is missing from the process configuration.

    Never mapped to an authentication failure: callers surface it as a server error.
    """

    def __init__(self, setting: str) -> None:
        self.setting = setting
        super().__init__(f"Missing required configuration: {setting}")


def configuration_error_response() -> ErrorResponse:
    return ErrorResponse(code="CONFIGURATION_ERROR", message="Server configuration error")


__all__ = ["ApiError", "ConfigurationError", "configuration_error_response"]
