"""opsdash service entry point.

This is the only file that knows about concrete implementations.
It wires together the storage, backend client, core views and API layers.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from opsdash.api.fleet import router as fleet_router
from opsdash.api.monitoring import router as monitoring_router
from opsdash.api.navigation import router as navigation_router
from opsdash.api.resources import router as resources_router
from opsdash.api.scrap import router as scrap_router
from opsdash.api.session import router as session_router
from opsdash.api.swr import router as swr_router
from opsdash.client.call_records import CallRecordApi
from opsdash.client.http_client import HttpBackendClient
from opsdash.client.radio import RadioInventoryApi, RadioScrapApi
from opsdash.client.swr import SwrSignalApi
from opsdash.config import AppConfig, load_config
from opsdash.core.annotations import AnnotationCache
from opsdash.core.controller import ResourceListController
from opsdash.core.errors import (
    BackendError,
    BackendUnreachable,
    ConfirmationRequired,
    OpsdashError,
    PermissionRedirect,
    ValidationFailed,
)
from opsdash.core.fleet import FleetStatisticsView
from opsdash.core.permissions import PermissionGate, PermissionStore
from opsdash.core.radio import RadioListController
from opsdash.core.resources import RESOURCES
from opsdash.core.session import SessionStore
from opsdash.core.swr_view import SwrPivotView
from opsdash.storage.file_storage import FileKeyValueStore

VERSION = "0.1.0"

log = structlog.get_logger()

# Module-level singletons (set during startup)
_config: AppConfig | None = None
_store: FileKeyValueStore | None = None
_session: SessionStore | None = None
_gate: PermissionGate | None = None
_client: HttpBackendClient | None = None
_long_client: HttpBackendClient | None = None
_controllers: dict[str, ResourceListController] | None = None
_swr_view: SwrPivotView | None = None
_fleet_view: FleetStatisticsView | None = None
_scrap_api: RadioScrapApi | None = None
_started_at: float = time.monotonic()


def get_config() -> AppConfig:
    assert _config is not None, "Server not initialized"
    return _config


def get_store() -> FileKeyValueStore:
    assert _store is not None, "Server not initialized"
    return _store


def get_session() -> SessionStore:
    assert _session is not None, "Server not initialized"
    return _session


def get_gate() -> PermissionGate:
    assert _gate is not None, "Server not initialized"
    return _gate


def get_client() -> HttpBackendClient:
    assert _client is not None, "Server not initialized"
    return _client


def get_controller(name: str) -> ResourceListController | None:
    assert _controllers is not None, "Server not initialized"
    return _controllers.get(name)


def get_swr_view() -> SwrPivotView:
    assert _swr_view is not None, "Server not initialized"
    return _swr_view


def get_fleet_view() -> FleetStatisticsView:
    assert _fleet_view is not None, "Server not initialized"
    return _fleet_view


def get_scrap_api() -> RadioScrapApi:
    assert _scrap_api is not None, "Server not initialized"
    return _scrap_api


def uptime_seconds() -> int:
    return int(time.monotonic() - _started_at)


def _setup_logging(config: AppConfig) -> None:
    """Configure structlog based on the logging config."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.logging.format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.logging.level.upper()),
        ),
    )


def init_components(config: AppConfig, transport: httpx.AsyncBaseTransport | None = None) -> None:
    """Build every component from ``config`` and publish the singletons.

    ``transport`` replaces the network for both backend clients (tests).
    """
    global _config, _store, _session, _gate, _client, _long_client
    global _controllers, _swr_view, _fleet_view, _scrap_api, _started_at

    _config = config
    _store = FileKeyValueStore(state_dir=config.storage.state_dir)
    _session = SessionStore(_store)
    _gate = PermissionGate(PermissionStore(_store))

    backend = config.backend
    _client = HttpBackendClient(
        backend.base_url, _session,
        timeout=backend.timeout_seconds,
        retry_delay=backend.retry_delay_seconds,
        transport=transport,
    )
    _long_client = HttpBackendClient(
        backend.base_url, _session,
        timeout=backend.long_timeout_seconds,
        retry_network_errors=False,
        transport=transport,
    )

    _scrap_api = RadioScrapApi(_client)
    page_size = config.views.default_page_size
    _controllers = {}
    for name, spec in RESOURCES.items():
        if spec.radio_actions:
            _controllers[name] = RadioListController(
                spec, _client,
                RadioInventoryApi(_client, spec.path, _long_client),
                _scrap_api,
                page_size=page_size,
            )
        else:
            _controllers[name] = ResourceListController(spec, _client, page_size=page_size)
    _swr_view = SwrPivotView(
        SwrSignalApi(_client, _long_client),
        AnnotationCache(_store),
        page_size=config.views.pivot_page_size,
    )
    _fleet_view = FleetStatisticsView(CallRecordApi(_client), top_n=config.views.fleet_top_n)
    _started_at = time.monotonic()


async def shutdown_components() -> None:
    global _client, _long_client
    for client in (_client, _long_client):
        if client is not None:
            await client.aclose()
    _client = _long_client = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    config = load_config()
    _setup_logging(config)

    log.info("server_starting",
             env=config.server.env,
             backend=config.backend.base_url,
             state_dir=config.storage.state_dir)

    init_components(config)

    log.info("server_started",
             host=config.server.host,
             port=config.server.port)

    yield

    await shutdown_components()
    log.info("server_stopped")


app = FastAPI(
    title="opsdash",
    description="Operations dashboard service",
    version=VERSION,
    lifespan=lifespan,
)


@app.exception_handler(PermissionRedirect)
async def _permission_redirect(request: Request, exc: PermissionRedirect) -> JSONResponse:
    return JSONResponse(
        status_code=307,
        headers={"Location": exc.redirect_to},
        content={"redirect_to": exc.redirect_to, "required": exc.required},
    )


@app.exception_handler(ValidationFailed)
async def _validation_failed(request: Request, exc: ValidationFailed) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": exc.message, "field": exc.field})


@app.exception_handler(ConfirmationRequired)
async def _confirmation_required(request: Request, exc: ConfirmationRequired) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": "confirmation required", "prompt": exc.prompt})


@app.exception_handler(BackendUnreachable)
async def _backend_unreachable(request: Request, exc: BackendUnreachable) -> JSONResponse:
    return JSONResponse(status_code=503, content={"error": exc.message})


@app.exception_handler(BackendError)
async def _backend_error(request: Request, exc: BackendError) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={"error": exc.message, "backend_status": exc.status},
    )


@app.exception_handler(OpsdashError)
async def _opsdash_error(request: Request, exc: OpsdashError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"error": exc.message})


app.include_router(monitoring_router)
app.include_router(session_router)
app.include_router(navigation_router)
app.include_router(resources_router)
app.include_router(fleet_router)
app.include_router(swr_router)
app.include_router(scrap_router)
