"""Backend client interface (port)."""

from __future__ import annotations

from typing import Any, Protocol


class BackendClient(Protocol):
    """Port: JSON calls against the operations backend.

    Implementations raise the errors of ``opsdash.core.errors`` and never
    return a non-2xx response.
    """

    async def get(self, path: str, params: dict | None = None) -> Any: ...

    async def get_bytes(self, path: str, params: dict | None = None) -> bytes: ...

    async def post(self, path: str, json: Any = None, params: dict | None = None) -> Any: ...

    async def put(self, path: str, json: Any = None) -> Any: ...

    async def delete(self, path: str) -> Any: ...

    async def upload(self, path: str, field: str, filename: str, content: bytes) -> Any: ...
