"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class AuthPrincipal(BaseModel):
    """Normalized authenticated principal used by route handlers."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(min_length=1)


class LoginRequest(BaseModel):
    username: StrictStr = Field(min_length=1)
    password: StrictStr = Field(min_length=1)


class RegisterRequest(BaseModel):
    """Absent fields stay ``None`` so the service can name the missing one."""

    username: StrictStr | None = None
    email: StrictStr | None = None
    password: StrictStr | None = None


class LoginResponse(BaseModel):
    success: bool
    message: str


class LogoutResponse(BaseModel):
    message: str


class AuthCheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    authenticated: bool
    user_id: str | None = Field(default=None, alias="userId")


class HealthCheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = "ok"
    logged_in: bool = Field(alias="loggedIn")
    user_id: str | None = Field(alias="userId")


class TelegramLoginPayload(BaseModel):
    """Identity assertion posted by the Telegram login widget.

    Unknown fields are kept because the widget signs every field it sends.
    """

    model_config = ConfigDict(extra="allow")

    id: StrictInt
    first_name: StrictStr
    last_name: StrictStr | None = None
    username: StrictStr | None = None
    photo_url: StrictStr | None = None
    auth_date: StrictInt
    hash: StrictStr = Field(min_length=1)

    def signed_fields(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


class TwitterAuthStartResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    auth_url: str = Field(alias="authUrl")
