"""Permission gate: route guards and default-route resolution.

Permissions are a JSON array of strings cached at login. Missing or
malformed data means "no permissions" (fail closed); it is never an error.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from opsdash.core.session import PERMISSIONS_KEY

if TYPE_CHECKING:
    from opsdash.storage.base import KeyValueStore

log = structlog.get_logger()

FALLBACK_ROUTE = "/profile"

# Checked in order; the first granted permission decides the landing page.
DEFAULT_ROUTE_PRIORITY: tuple[tuple[str, str], ...] = (
    ("dashboard.view", "/dashboard"),
    ("letter.view", "/letter-numbers"),
    ("inspeksi.temuan-kpc.view", "/inspeksi-kpc"),
    ("docs.view", "/docs"),
    ("callrecord.view", "/callrecords"),
)

# Route -> required permission. None means the route is always accessible.
ROUTE_PERMISSIONS: dict[str, str | None] = {
    "/dashboard": "dashboard.view",
    "/inspeksi-kpc": "inspeksi.temuan-kpc.view",
    "/docs": "docs.view",
    "/callrecords": "callrecord.view",
    "/upload": "callrecord.import",
    "/export": "callrecord.view-any",
    "/fleet-statistics": "callrecord.view",
    "/nec-history": "nec.signal.view",
    "/nec-management": None,
    "/swr-signal": None,
    "/radio-trunking": None,
    "/radio-conventional": None,
    "/radio-grafir": None,
    "/radio-scrap": None,
    "/letter-numbers": "letter.view",
    "/companies": "letter.view",
    "/document-types": "letter.view",
    "/settings": "role.view",
    "/profile": None,
}


class PermissionStore:
    """Read-only view of the cached permission list."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def permissions(self) -> frozenset[str]:
        raw = self._store.get(PERMISSIONS_KEY)
        if not raw:
            return frozenset()
        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            return frozenset()
        if not isinstance(parsed, list):
            return frozenset()
        return frozenset(p for p in parsed if isinstance(p, str))

    def has_permission(self, name: str) -> bool:
        return name in self.permissions()


@dataclass(frozen=True)
class GuardDecision:
    allowed: bool
    redirect_to: str | None = None
    required: str | None = None


class PermissionGate:
    def __init__(self, permissions: PermissionStore) -> None:
        self._permissions = permissions

    def permissions(self) -> frozenset[str]:
        return self._permissions.permissions()

    def has_permission(self, name: str) -> bool:
        return self._permissions.has_permission(name)

    def resolve_default_route(self) -> str:
        granted = self._permissions.permissions()
        for permission, route in DEFAULT_ROUTE_PRIORITY:
            if permission in granted:
                return route
        return FALLBACK_ROUTE

    def check(self, permission: str | None) -> GuardDecision:
        """Decide whether a view requiring ``permission`` may render."""
        if permission is None or self.has_permission(permission):
            return GuardDecision(allowed=True, required=permission)

        target = self.resolve_default_route()
        log.warning("access_denied", required=permission, redirect_to=target)
        return GuardDecision(allowed=False, redirect_to=target, required=permission)

    def guard(self, route: str) -> GuardDecision:
        """Guard a route from the route table; unknown routes go to the default route."""
        if route not in ROUTE_PERMISSIONS:
            return GuardDecision(allowed=False, redirect_to=self.resolve_default_route())
        return self.check(ROUTE_PERMISSIONS[route])
