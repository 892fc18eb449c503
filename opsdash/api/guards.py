"""Permission guard dependency for gated endpoints."""

from __future__ import annotations

from opsdash.core.errors import PermissionRedirect


def require_permission(permission: str | None):
    """FastAPI dependency: redirect to the default route unless granted."""

    async def dependency() -> None:
        from opsdash.main import get_gate

        enforce(permission, get_gate())

    return dependency


def enforce(permission: str | None, gate) -> None:
    decision = gate.check(permission)
    if not decision.allowed:
        raise PermissionRedirect(decision.redirect_to, decision.required)
