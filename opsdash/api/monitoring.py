"""Health check endpoint."""

from __future__ import annotations

import json
from pathlib import Path

from fastapi import APIRouter

router = APIRouter(prefix="/api/v1")

# Load build info once at import time.
_BUILD_INFO_PATH = Path(__file__).parent.parent / "build_info.json"
_BUILD_INFO: dict = {}
if _BUILD_INFO_PATH.exists():
    try:
        _BUILD_INFO = json.loads(_BUILD_INFO_PATH.read_text())
    except (json.JSONDecodeError, OSError):
        pass


@router.get("/health")
async def health() -> dict:
    """Basic health check. Does not call the backend."""
    from opsdash.main import VERSION, get_client, get_store, uptime_seconds

    store = get_store()
    result = {
        "status": "ok",
        "version": VERSION,
        "uptime_seconds": uptime_seconds(),
        "backend_base_url": get_client().base_url,
        "state_writable": store.path.parent.exists(),
    }
    result.update(_BUILD_INFO)
    return result
