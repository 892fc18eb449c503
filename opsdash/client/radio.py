"""Radio inventory and scrap endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from opsdash.core.models import (
    RadioHistoryEntry,
    RadioImportResult,
    ScrapCategorySummary,
    ScrapSummary,
)
from opsdash.core.pagination import unwrap_list

if TYPE_CHECKING:
    from opsdash.client.base import BackendClient

SCRAP_PREFIX = "/radio-scrap"

# scrap category -> source inventory segment of the scrap-from-radio call
SCRAP_SOURCES = {"Trunking": "trunking", "Conventional": "conventional"}


def _unwrap(payload: Any) -> Any:
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def _parse_category(data: Any) -> ScrapCategorySummary:
    data = data if isinstance(data, dict) else {}
    monthly = data.get("monthly") or []
    return ScrapCategorySummary(
        total=int(data.get("total", 0) or 0),
        monthly=tuple(int(v or 0) for v in monthly),
    )


def parse_scrap_summary(data: Any, year: int) -> ScrapSummary:
    data = data if isinstance(data, dict) else {}
    return ScrapSummary(
        year=int(data.get("year", year) or year),
        trunking=_parse_category(data.get("trunking")),
        conventional=_parse_category(data.get("conventional")),
        grand_total=int(data.get("grandTotal", 0) or 0),
    )


def parse_history_entry(data: dict) -> RadioHistoryEntry:
    return RadioHistoryEntry(
        id=int(data.get("id", 0) or 0),
        radio_id=int(data.get("radioId", 0) or 0),
        change_type=data.get("changeType") or "",
        changed_at=str(data.get("changedAt") or ""),
        previous_unit_number=data.get("previousUnitNumber"),
        new_unit_number=data.get("newUnitNumber"),
        previous_dept=data.get("previousDept"),
        new_dept=data.get("newDept"),
        previous_fleet=data.get("previousFleet"),
        new_fleet=data.get("newFleet"),
        notes=data.get("notes") or None,
        changed_by_name=data.get("changedByName"),
    )


def parse_radio_import(data: Any) -> RadioImportResult:
    data = data if isinstance(data, dict) else {}
    return RadioImportResult(
        success=int(data.get("success", 0) or 0),
        failed=int(data.get("failed", 0) or 0),
        errors=tuple(str(e) for e in data.get("errors") or ()),
    )


class RadioInventoryApi:
    """History, CSV export/import and template calls of one radio collection."""

    def __init__(self, client: BackendClient, path: str, long_client: BackendClient | None = None) -> None:
        self._client = client
        self._long = long_client or client
        self.path = path

    async def history(self, radio_id: int) -> list[RadioHistoryEntry]:
        payload = await self._client.get(f"{self.path}/{radio_id}/history")
        return [parse_history_entry(h) for h in unwrap_list(payload) if isinstance(h, dict)]

    async def export_csv(self, params: dict | None = None) -> bytes:
        return await self._client.get_bytes(f"{self.path}/export", params=params)

    async def template(self) -> bytes:
        return await self._client.get_bytes(f"{self.path}/template")

    async def import_csv(self, filename: str, content: bytes) -> RadioImportResult:
        payload = await self._long.upload(f"{self.path}/import", "file", filename, content)
        return parse_radio_import(_unwrap(payload))


class RadioScrapApi:
    def __init__(self, client: BackendClient) -> None:
        self._client = client

    async def yearly_summary(self, year: int) -> ScrapSummary:
        payload = await self._client.get(f"{SCRAP_PREFIX}/yearly-summary", params={"year": year})
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        return parse_scrap_summary(payload, year)

    async def scrap_from(self, category: str, radio_id: int, body: dict) -> Any:
        """Scrap a trunking or conventional radio; the backend creates the scrap record."""
        source = SCRAP_SOURCES[category]
        return await self._client.post(f"{SCRAP_PREFIX}/from-{source}/{radio_id}", json=body)
