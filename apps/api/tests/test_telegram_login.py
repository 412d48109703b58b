"""Telegram login widget verification tests."""

from __future__ import annotations

import hashlib
import hmac
import os
import time
import unittest

import jwt
from fastapi.testclient import TestClient

from pubhub.adapters.telegram import build_check_string, compute_hash, is_auth_date_fresh, verify_login_payload
from pubhub.core.config import get_settings
from pubhub.main import create_app

BOT_TOKEN = "123456:TEST-bot-token"
JWT_SECRET = "test-jwt-secret-with-at-least-32-bytes"


def _signed_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": 424242,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "username": "ada",
        "auth_date": int(time.time()),
    }
    payload.update(overrides)
    payload["hash"] = compute_hash(payload, BOT_TOKEN)
    return payload


class LoginWidgetVerifierTests(unittest.TestCase):
    def test_check_string_sorts_keys_and_skips_hash(self) -> None:
        payload = {"username": "ada", "id": 1, "auth_date": 10, "hash": "x", "first_name": "Ada"}
        self.assertEqual(build_check_string(payload), "auth_date=10\nfirst_name=Ada\nid=1\nusername=ada")

    def test_check_string_uses_byte_order(self) -> None:
        payload = {"b": 1, "B": 2, "a": 3, "_x": 4}
        self.assertEqual(build_check_string(payload), "B=2\n_x=4\na=3\nb=1")

    def test_hash_matches_reference_construction(self) -> None:
        payload = {"id": 1, "first_name": "Ada", "auth_date": 10}
        secret_key = hashlib.sha256(BOT_TOKEN.encode()).digest()
        expected = hmac.new(secret_key, b"auth_date=10\nfirst_name=Ada\nid=1", hashlib.sha256).hexdigest()
        self.assertEqual(compute_hash(payload, BOT_TOKEN), expected)

    def test_valid_payload_verifies(self) -> None:
        self.assertTrue(verify_login_payload(_signed_payload(), BOT_TOKEN))

    def test_flipping_any_field_character_fails_verification(self) -> None:
        payload = _signed_payload()
        for key, value in payload.items():
            if key == "hash":
                continue
            text = str(value)
            flipped = text[:-1] + ("0" if text[-1] != "0" else "1")
            tampered = dict(payload)
            tampered[key] = type(value)(flipped)
            with self.subTest(field=key):
                self.assertFalse(verify_login_payload(tampered, BOT_TOKEN))

    def test_wrong_bot_token_or_missing_hash_fails(self) -> None:
        payload = _signed_payload()
        self.assertFalse(verify_login_payload(payload, "999:other-token"))
        unsigned = {k: v for k, v in payload.items() if k != "hash"}
        self.assertFalse(verify_login_payload(unsigned, BOT_TOKEN))

    def test_freshness_boundary_is_inclusive(self) -> None:
        now = 1_700_000_000
        self.assertTrue(is_auth_date_fresh(now - 3600, now=now))
        self.assertFalse(is_auth_date_fresh(now - 3601, now=now))
        self.assertTrue(is_auth_date_fresh(now, now=now))
        self.assertTrue(is_auth_date_fresh(now - 10, max_age_seconds=10, now=now))
        self.assertFalse(is_auth_date_fresh(now - 11, max_age_seconds=10, now=now))


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "PUBHUB_AUTH_PROVIDER",
        "PUBHUB_JWT_SECRET",
        "PUBHUB_TELEGRAM_BOT_TOKEN",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["PUBHUB_AUTH_PROVIDER"] = "jwt"
        os.environ["PUBHUB_JWT_SECRET"] = JWT_SECRET
        os.environ["PUBHUB_TELEGRAM_BOT_TOKEN"] = BOT_TOKEN
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class TelegramLoginApiTests(_SettingsEnvCase):
    def test_valid_login_sets_session_cookie_for_telegram_principal(self) -> None:
        client = TestClient(create_app())

        response = client.post("/api/auth/telegram", json=_signed_payload())

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "message": "Login successful"})
        token = response.cookies.get("jwt")
        self.assertIsNotNone(token)
        claims = jwt.decode(token, JWT_SECRET, algorithms=["HS256"])
        self.assertEqual(claims["userId"], "tg:424242")

        health = client.get("/api/health-check")
        self.assertEqual(health.json(), {"status": "ok", "loggedIn": True, "userId": "tg:424242"})

    def test_tampered_payload_is_rejected(self) -> None:
        client = TestClient(create_app())
        payload = _signed_payload()
        payload["first_name"] = "Eve"

        response = client.post("/api/auth/telegram", json=payload)

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "UNAUTHORIZED")
        self.assertNotIn("jwt", response.cookies)

    def test_old_but_correctly_signed_payload_is_rejected(self) -> None:
        client = TestClient(create_app())

        response = client.post("/api/auth/telegram", json=_signed_payload(auth_date=int(time.time()) - 7200))

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "Telegram login data expired")

    def test_missing_required_fields_are_rejected_as_malformed(self) -> None:
        client = TestClient(create_app())
        payload = _signed_payload()
        del payload["auth_date"]

        response = client.post("/api/auth/telegram", json=payload)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "MALFORMED_INPUT")

    def test_missing_bot_token_is_a_server_error(self) -> None:
        os.environ.pop("PUBHUB_TELEGRAM_BOT_TOKEN")
        get_settings.cache_clear()
        client = TestClient(create_app())

        response = client.post("/api/auth/telegram", json=_signed_payload())

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["code"], "CONFIGURATION_ERROR")


if __name__ == "__main__":
    unittest.main()
