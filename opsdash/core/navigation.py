"""Sidebar menu, filtered by the viewer's permissions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from opsdash.core.permissions import ROUTE_PERMISSIONS

if TYPE_CHECKING:
    from opsdash.core.permissions import PermissionGate


@dataclass(frozen=True)
class NavItem:
    id: str
    name: str
    path: str
    for_all: bool = False

    @property
    def permission(self) -> str | None:
        return ROUTE_PERMISSIONS.get(self.path)


@dataclass(frozen=True)
class NavSection:
    id: str
    title: str
    items: tuple[NavItem, ...]


SECTIONS: tuple[NavSection, ...] = (
    NavSection("main", "Main", (
        NavItem("dashboard", "Dashboard", "/dashboard"),
        NavItem("docs", "Docs", "/docs"),
        NavItem("inspeksi-kpc", "Inspeksi KPC", "/inspeksi-kpc"),
        NavItem("fleet-statistics", "Fleet Statistics", "/fleet-statistics"),
        NavItem("nec-history", "NEC History", "/nec-history"),
        NavItem("swr-signal", "SWR Signal", "/swr-signal", for_all=True),
    )),
    NavSection("letter-numbers", "Letter Numbering", (
        NavItem("letter-numbers", "Letter Numbers", "/letter-numbers"),
        NavItem("companies", "Companies", "/companies"),
        NavItem("document-types", "Document Types", "/document-types"),
    )),
    NavSection("radio", "Radio Management", (
        NavItem("radio-trunking", "Radio Trunking", "/radio-trunking"),
        NavItem("radio-conventional", "Radio Conventional", "/radio-conventional"),
        NavItem("radio-grafir", "Radio Grafir", "/radio-grafir"),
        NavItem("radio-scrap", "Radio Scrap", "/radio-scrap"),
    )),
    NavSection("callrecords", "Call Records", (
        NavItem("callrecords", "View Records", "/callrecords"),
        NavItem("upload", "Upload CSV", "/upload"),
        NavItem("export", "Export Data", "/export"),
    )),
    NavSection("admin", "Administration", (
        NavItem("settings", "Settings", "/settings"),
    )),
)


def visible_menu(gate: PermissionGate) -> list[NavSection]:
    """Return the sections the viewer may see, dropping empty ones."""
    result = []
    for section in SECTIONS:
        items = tuple(
            item for item in section.items
            if item.for_all or item.permission is None or gate.has_permission(item.permission)
        )
        if items:
            result.append(NavSection(section.id, section.title, items))
    return result


def menu_to_dict(sections: list[NavSection]) -> list[dict]:
    return [
        {
            "id": s.id,
            "title": s.title,
            "items": [{"id": i.id, "name": i.name, "path": i.path} for i in s.items],
        }
        for s in sections
    ]
