"""Twitter v1.1 token exchange and account connection tests."""

from __future__ import annotations

import os
import unittest
from urllib.parse import unquote

import httpx
from fastapi.testclient import TestClient

from pubhub.adapters.auth import issue_token
from pubhub.adapters.oauth1 import ConsumerCredentials, OAuth1Signer, TokenCredentials
from pubhub.adapters.twitter import TwitterOAuthClient, TwitterOAuthError, TwitterRequestToken
from pubhub.core.config import get_settings
from pubhub.main import create_app
from pubhub.routes.dependencies import get_twitter_client

JWT_SECRET = "test-jwt-secret-with-at-least-32-bytes"
CONSUMER = ConsumerCredentials(key="consumer-key", secret="consumer-secret")


def _oauth_header_fields(request: httpx.Request) -> dict[str, str]:
    header = request.headers["Authorization"]
    fields = {}
    for part in header.removeprefix("OAuth ").split(", "):
        key, _, value = part.partition("=")
        fields[key] = unquote(value.strip('"'))
    return fields


class _FakeTwitter:
    def __init__(self, *, access_status: int = 200) -> None:
        self.requests: list[httpx.Request] = []
        self.access_status = access_status

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/oauth/request_token":
            return httpx.Response(
                200,
                text="oauth_token=req-token&oauth_token_secret=req-secret&oauth_callback_confirmed=true",
            )
        if request.url.path == "/oauth/access_token":
            if self.access_status != 200:
                return httpx.Response(self.access_status, text="Invalid request token")
            return httpx.Response(
                200,
                text="oauth_token=acc-token&oauth_token_secret=acc-secret&user_id=555&screen_name=ada",
            )
        return httpx.Response(404)


def _client(fake: _FakeTwitter) -> TwitterOAuthClient:
    return TwitterOAuthClient(OAuth1Signer(CONSUMER), transport=httpx.MockTransport(fake))


class TwitterOAuthClientTests(unittest.IsolatedAsyncioTestCase):
    async def test_request_token_sends_signed_callback(self) -> None:
        fake = _FakeTwitter()

        token = await _client(fake).request_token("http://localhost:3000/cb")

        self.assertEqual((token.token, token.secret, token.callback_confirmed), ("req-token", "req-secret", True))
        fields = _oauth_header_fields(fake.requests[0])
        self.assertEqual(fields["oauth_callback"], "http://localhost:3000/cb")
        self.assertEqual(fields["oauth_consumer_key"], "consumer-key")
        self.assertNotIn("oauth_token", fields)
        self.assertEqual(fake.requests[0].method, "POST")

    async def test_access_token_is_signed_with_request_token(self) -> None:
        fake = _FakeTwitter()

        access = await _client(fake).access_token(TokenCredentials(key="req-token", secret="req-secret"), "verifier-1")

        self.assertEqual(access.token, "acc-token")
        self.assertEqual(access.secret, "acc-secret")
        self.assertEqual(access.x_user_id, "555")
        self.assertEqual(access.screen_name, "ada")
        fields = _oauth_header_fields(fake.requests[0])
        self.assertEqual(fields["oauth_token"], "req-token")
        self.assertEqual(fields["oauth_verifier"], "verifier-1")

    async def test_upstream_rejection_raises(self) -> None:
        fake = _FakeTwitter(access_status=401)

        with self.assertRaises(TwitterOAuthError):
            await _client(fake).access_token(TokenCredentials(key="req-token", secret="req-secret"), "v")

    async def test_body_that_is_not_form_encoded_raises(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>maintenance</html>"))
        client = TwitterOAuthClient(OAuth1Signer(CONSUMER), transport=transport)

        with self.assertRaises(TwitterOAuthError):
            await client.request_token("http://localhost:3000/cb")

    def test_authorize_url_carries_request_token(self) -> None:
        client = TwitterOAuthClient(OAuth1Signer(CONSUMER), base_url="https://api.twitter.com/")
        url = client.authorize_url(TwitterRequestToken(token="abc", secret="s", callback_confirmed=True))
        self.assertEqual(url, "https://api.twitter.com/oauth/authorize?oauth_token=abc")


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "PUBHUB_AUTH_PROVIDER",
        "PUBHUB_JWT_SECRET",
        "PUBHUB_X_API_KEY",
        "PUBHUB_X_API_KEY_SECRET",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["PUBHUB_AUTH_PROVIDER"] = "jwt"
        os.environ["PUBHUB_JWT_SECRET"] = JWT_SECRET
        os.environ.pop("PUBHUB_X_API_KEY", None)
        os.environ.pop("PUBHUB_X_API_KEY_SECRET", None)
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class TwitterConnectApiTests(_SettingsEnvCase):
    def _signed_in_client(self, fake: _FakeTwitter | None = None) -> tuple[TestClient, object]:
        app = create_app()
        if fake is not None:
            app.dependency_overrides[get_twitter_client] = lambda: _client(fake)
        client = TestClient(app, follow_redirects=False)
        client.cookies.set("jwt", issue_token(7, secret=JWT_SECRET, ttl_seconds=3600))
        return client, app.state.store

    def test_connect_flow_stores_account_for_principal(self) -> None:
        fake = _FakeTwitter()
        client, store = self._signed_in_client(fake)

        start = client.get("/api/twitter-v1.1/auth")
        self.assertEqual(start.status_code, 200)
        self.assertEqual(start.json(), {"authUrl": "https://api.twitter.com/oauth/authorize?oauth_token=req-token"})
        self.assertIn("twitter_oauth_secret=req-secret", start.headers["set-cookie"])

        callback = client.get(
            "/api/twitter-v1.1/auth/callback",
            params={"oauth_token": "req-token", "oauth_verifier": "verifier-1"},
        )

        self.assertEqual(callback.status_code, 307)
        self.assertEqual(callback.headers["location"], "/dashboard")
        accounts = store.list_twitter_accounts_for_user("7")
        self.assertEqual(len(accounts), 1)
        self.assertEqual((accounts[0].x_user_id, accounts[0].screen_name), ("555", "ada"))
        self.assertEqual(accounts[0].access_token_secret, "acc-secret")

    def test_reconnecting_updates_existing_account(self) -> None:
        client, store = self._signed_in_client(_FakeTwitter())

        for _ in range(2):
            client.get("/api/twitter-v1.1/auth")
            client.get(
                "/api/twitter-v1.1/auth/callback",
                params={"oauth_token": "req-token", "oauth_verifier": "verifier-1"},
            )

        self.assertEqual(len(store.list_twitter_accounts_for_user("7")), 1)
        self.assertEqual(store.twitter_account_write_count, 2)

    def test_callback_without_parameters_redirects_to_error_page(self) -> None:
        client, store = self._signed_in_client(_FakeTwitter())

        response = client.get("/api/twitter-v1.1/auth/callback")

        self.assertEqual(response.status_code, 307)
        self.assertTrue(response.headers["location"].startswith("/error?statusCode=400"))
        self.assertEqual(store.twitter_account_write_count, 0)

    def test_rejected_exchange_redirects_to_error_page(self) -> None:
        client, store = self._signed_in_client(_FakeTwitter(access_status=401))
        client.get("/api/twitter-v1.1/auth")

        response = client.get(
            "/api/twitter-v1.1/auth/callback",
            params={"oauth_token": "req-token", "oauth_verifier": "verifier-1"},
        )

        self.assertTrue(response.headers["location"].startswith("/error?statusCode=502"))
        self.assertEqual(store.twitter_account_write_count, 0)

    def test_connect_requires_signed_in_principal(self) -> None:
        app = create_app()
        fake = _FakeTwitter()
        app.dependency_overrides[get_twitter_client] = lambda: _client(fake)
        client = TestClient(app, follow_redirects=False)

        response = client.get("/api/twitter-v1.1/auth")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(fake.requests, [])

    def test_missing_consumer_credentials_is_a_server_error(self) -> None:
        client, _ = self._signed_in_client()

        response = client.get("/api/twitter-v1.1/auth")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["code"], "CONFIGURATION_ERROR")


if __name__ == "__main__":
    unittest.main()
