"""Login, logout and current-session endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Body

from opsdash.core.errors import ValidationFailed

router = APIRouter(prefix="/api/v1")


def _session_view() -> dict:
    from opsdash.main import get_gate, get_session

    session = get_session()
    return {
        "authenticated": session.token is not None,
        "user": session.user(),
        "permissions": sorted(get_gate().permissions()),
        "default_route": get_gate().resolve_default_route(),
    }


@router.post("/session/login")
async def login(credentials: dict = Body(...)) -> dict:
    """Exchange credentials for a backend token and cache the session."""
    from opsdash.main import get_client, get_session

    username = str(credentials.get("username") or "").strip()
    password = str(credentials.get("password") or "")
    if not username:
        raise ValidationFailed("Username is required", field="username")
    if not password:
        raise ValidationFailed("Password is required", field="password")

    await get_session().login(get_client(), username, password)
    return _session_view()


@router.post("/session/logout")
async def logout() -> dict:
    from opsdash.main import get_session

    get_session().logout()
    return _session_view()


@router.get("/session")
async def current_session() -> dict:
    return _session_view()
