"""Twitter v1.1 three-legged OAuth token exchange."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx
from oauthlib.common import urldecode

from pubhub.adapters.oauth1 import OAuth1Signer, TokenCredentials
from pubhub.core.logging_safety import safe_log_identifier

logger = logging.getLogger(__name__)


class TwitterOAuthError(Exception):
    """Raised when Twitter rejects or garbles a token exchange."""


@dataclass(frozen=True, slots=True)
class TwitterRequestToken:
    token: str
    secret: str
    callback_confirmed: bool


@dataclass(frozen=True, slots=True)
class TwitterAccessToken:
    token: str
    secret: str
    x_user_id: str
    screen_name: str


def _parse_form(body: str) -> dict[str, str]:
    try:
        return dict(urldecode(body))
    except ValueError as exc:
        raise TwitterOAuthError("Twitter returned a body that is not form-encoded") from exc


class TwitterOAuthClient:
    """Obtains request tokens and exchanges verifiers for access tokens."""

    def __init__(
        self,
        signer: OAuth1Signer,
        *,
        base_url: str = "https://api.twitter.com",
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._signer = signer
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._timeout = timeout

    def authorize_url(self, request_token: TwitterRequestToken) -> str:
        return f"{self._base_url}/oauth/authorize?{urlencode({'oauth_token': request_token.token})}"

    async def _post(self, path: str, params: dict[str, str], token: TokenCredentials | None = None) -> dict[str, str]:
        url = f"{self._base_url}{path}"
        header = self._signer.sign("POST", url, params, token)
        # oauth_* values travel in the header only.
        form = {key: value for key, value in params.items() if not key.startswith("oauth_")}
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            try:
                response = await client.post(url, headers={"Authorization": header}, data=form or None)
            except httpx.HTTPError as exc:
                raise TwitterOAuthError(f"Request to {path} failed") from exc

        if response.status_code != 200:
            logger.warning("twitter.oauth_failed path=%s status=%s", path, response.status_code)
            raise TwitterOAuthError(f"Twitter returned {response.status_code} for {path}")
        return _parse_form(response.text)

    async def request_token(self, callback_url: str) -> TwitterRequestToken:
        fields = await self._post("/oauth/request_token", {"oauth_callback": callback_url})
        token = fields.get("oauth_token")
        secret = fields.get("oauth_token_secret")
        if not token or not secret:
            raise TwitterOAuthError("Request token response is missing oauth_token or oauth_token_secret")
        return TwitterRequestToken(
            token=token,
            secret=secret,
            callback_confirmed=fields.get("oauth_callback_confirmed") == "true",
        )

    async def access_token(self, request_token: TokenCredentials, verifier: str) -> TwitterAccessToken:
        fields = await self._post("/oauth/access_token", {"oauth_verifier": verifier}, request_token)
        try:
            access = TwitterAccessToken(
                token=fields["oauth_token"],
                secret=fields["oauth_token_secret"],
                x_user_id=fields["user_id"],
                screen_name=fields["screen_name"],
            )
        except KeyError as exc:
            raise TwitterOAuthError(f"Access token response is missing {exc.args[0]}") from exc
        logger.info("twitter.access_token_obtained x_user=%s", safe_log_identifier(access.x_user_id, prefix="xid"))
        return access


__all__ = [
    "TwitterAccessToken",
    "TwitterOAuthClient",
    "TwitterOAuthError",
    "TwitterRequestToken",
]
