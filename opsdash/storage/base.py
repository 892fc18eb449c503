"""Storage interface (port) for durable client-side state."""

from __future__ import annotations

from typing import Protocol


class KeyValueStore(Protocol):
    """Port: string key-value store read synchronously by the views.

    Holds the auth token, the cached permission list and the SWR
    annotation caches. Last writer wins.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self, prefix: str = "") -> list[str]: ...
