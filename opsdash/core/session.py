"""Session state kept in the durable key-value store.

The backend hands out a bearer token, the user profile and the user's
permission list at login; all three are cached under fixed keys and read
synchronously wherever a request is built or a permission is checked.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog

from opsdash.core.errors import BackendError

if TYPE_CHECKING:
    from opsdash.client.base import BackendClient
    from opsdash.storage.base import KeyValueStore

log = structlog.get_logger()

TOKEN_KEY = "authToken"
USER_KEY = "user"
PERMISSIONS_KEY = "permissions"

LOGIN_PATH = "/api/auth/login"


class SessionStore:
    """Reads and writes the cached token, user and permissions."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @property
    def token(self) -> str | None:
        return self._store.get(TOKEN_KEY) or None

    def user(self) -> dict | None:
        raw = self._store.get(USER_KEY)
        if not raw:
            return None
        try:
            user = json.loads(raw)
        except json.JSONDecodeError:
            return None
        return user if isinstance(user, dict) else None

    def start(self, token: str, user: dict, permissions: list[str]) -> None:
        self._store.set(TOKEN_KEY, token)
        self._store.set(USER_KEY, json.dumps(user))
        self._store.set(PERMISSIONS_KEY, json.dumps(list(permissions)))

    def clear(self) -> None:
        """Forget token, user and permissions (logout, or a 401 from the backend)."""
        for key in (TOKEN_KEY, USER_KEY, PERMISSIONS_KEY):
            self._store.remove(key)

    def accept_login(self, payload: Any) -> dict:
        """Store the session carried by a login response envelope.

        Expected: ``{"data": {"token": ..., "user": {...}, "permissions": [...]}}``.
        """
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict) or not data.get("token") or not data.get("user"):
            raise BackendError(200, "Invalid response structure from server", payload)

        permissions = data.get("permissions") or []
        self.start(data["token"], data["user"], permissions)
        log.info("session_started", user=data["user"].get("username"),
                 permissions=len(permissions))
        return data

    async def login(self, client: BackendClient, username: str, password: str) -> dict:
        payload = await client.post(LOGIN_PATH, json={"username": username, "password": password})
        return self.accept_login(payload)

    def logout(self) -> None:
        self.clear()
        log.info("session_ended")
