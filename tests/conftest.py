"""Shared test fixtures."""

from __future__ import annotations

import json

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

import opsdash.main as main_module
from opsdash.config import AppConfig


class FakeBackend:
    """Scripted ops backend, served to the httpx clients through MockTransport.

    Routes map ``(method, path)`` to either a ``(status, body)`` pair or a
    callable taking the request. Unrouted calls answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], object] = {}
        self.requests: list[httpx.Request] = []

    def route(self, method: str, path: str, body=None, status: int = 200, handler=None) -> None:
        self.routes[(method.upper(), path)] = handler if handler is not None else (status, body)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        entry = self.routes.get((request.method, request.url.path))
        if entry is None:
            return httpx.Response(404, json={"message": f"No route {request.url.path}"})
        if callable(entry):
            return entry(request)
        status, body = entry
        if isinstance(body, bytes):
            return httpx.Response(status, content=body)
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    @staticmethod
    def body(request: httpx.Request) -> dict:
        return json.loads(request.content)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture(autouse=True)
def _init_server(tmp_path, backend):
    """Initialize service singletons for every test, using a temp state dir."""
    config = AppConfig()
    config.storage.state_dir = str(tmp_path / "state")
    config.backend.base_url = "http://backend.test"
    config.backend.retry_delay_seconds = 0
    config.logging.level = "warning"

    main_module.init_components(config, transport=httpx.MockTransport(backend.handle))

    yield

    # Cleanup
    main_module._client = None
    main_module._long_client = None
    main_module._config = None
    main_module._store = None
    main_module._session = None
    main_module._gate = None
    main_module._controllers = None
    main_module._swr_view = None
    main_module._fleet_view = None
    main_module._scrap_api = None


@pytest.fixture
def grant():
    """Start a session holding the given permissions."""

    def _grant(*permissions: str) -> None:
        main_module.get_session().start("tok-123", {"id": 1, "username": "ops"}, list(permissions))

    return _grant


@pytest.fixture
async def client():
    from opsdash.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
