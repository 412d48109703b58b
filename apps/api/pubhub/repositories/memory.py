"""In-memory repositories used by the API scaffold and tests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4


@dataclass(slots=True)
class UserRecord:
    id: str
    username: str
    email: str
    password_hash: bytes
    created_at: datetime


@dataclass(slots=True)
class ConnectedTwitterAccountRecord:
    user_id: str
    x_user_id: str
    screen_name: str
    access_token: str
    access_token_secret: str
    connected_at: datetime
    updated_at: datetime | None = None


class InMemoryStore:
    """Password users, plus connected third-party accounts keyed by (principal, remote account)."""

    def __init__(self) -> None:
        self._users: dict[str, UserRecord] = {}
        self._twitter_accounts: dict[tuple[str, str], ConnectedTwitterAccountRecord] = {}
        self.twitter_account_write_count = 0

    def upsert_twitter_account(
        self,
        *,
        user_id: str,
        x_user_id: str,
        screen_name: str,
        access_token: str,
        access_token_secret: str,
    ) -> ConnectedTwitterAccountRecord:
        key = (user_id, x_user_id)
        now = datetime.now(UTC)
        record = self._twitter_accounts.get(key)
        if record is None:
            record = ConnectedTwitterAccountRecord(
                user_id=user_id,
                x_user_id=x_user_id,
                screen_name=screen_name,
                access_token=access_token,
                access_token_secret=access_token_secret,
                connected_at=now,
            )
            self._twitter_accounts[key] = record
        else:
            record.screen_name = screen_name
            record.access_token = access_token
            record.access_token_secret = access_token_secret
            record.updated_at = now
        self.twitter_account_write_count += 1
        return record

    def list_twitter_accounts_for_user(self, user_id: str) -> list[ConnectedTwitterAccountRecord]:
        return [record for (owner, _), record in self._twitter_accounts.items() if owner == user_id]

    def create_user(self, *, username: str, email: str, password_hash: bytes) -> UserRecord:
        record = UserRecord(
            id=str(uuid4()),
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=datetime.now(UTC),
        )
        self._users[record.id] = record
        return record

    def get_user_by_username(self, username: str) -> UserRecord | None:
        for record in self._users.values():
            if record.username == username:
                return record
        return None

    def get_user_by_email(self, email: str) -> UserRecord | None:
        for record in self._users.values():
            if record.email == email:
                return record
        return None
