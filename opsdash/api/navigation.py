"""Sidebar menu and route guard endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from opsdash.core.errors import PermissionRedirect
from opsdash.core.navigation import menu_to_dict, visible_menu

router = APIRouter(prefix="/api/v1")


@router.get("/navigation")
async def navigation() -> dict:
    from opsdash.main import get_gate

    return {"sections": menu_to_dict(visible_menu(get_gate()))}


@router.get("/routes/default")
async def default_route() -> dict:
    from opsdash.main import get_gate

    return {"route": get_gate().resolve_default_route()}


@router.get("/routes/check")
async def check_route(path: str = Query(...)) -> dict:
    """Allow ``path`` or answer 307 to the viewer's default route."""
    from opsdash.main import get_gate

    decision = get_gate().guard(path)
    if not decision.allowed:
        raise PermissionRedirect(decision.redirect_to, decision.required)
    return {"allowed": True, "path": path, "required": decision.required}
