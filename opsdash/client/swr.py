"""SWR signal endpoints: sites, channels, histories, pivot, import/export."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from opsdash.core.models import SwrChannel, SwrHistoryRecord, SwrImportResult, SwrSite
from opsdash.core.pagination import parse_page, unwrap_list

if TYPE_CHECKING:
    from opsdash.client.base import BackendClient

PREFIX = "/api/swr-signal"


def _data(payload: Any) -> Any:
    """Strip the ``{statusCode, message, data}`` envelope when present."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def _opt_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_site(data: dict) -> SwrSite:
    return SwrSite(
        id=int(data.get("id", 0)),
        name=data.get("name", ""),
        type=data.get("type", ""),
        location=data.get("location"),
        channel_count=int(data.get("channelCount", 0) or 0),
    )


def parse_channel(data: dict) -> SwrChannel:
    return SwrChannel(
        id=int(data.get("id", 0)),
        channel_name=data.get("channelName", ""),
        site_id=int(data.get("swrSiteId", 0) or 0),
        site_name=data.get("swrSiteName", ""),
        site_type=data.get("swrSiteType", ""),
        expected_swr_max=_opt_float(data.get("expectedSwrMax")) or 1.5,
        expected_pwr_max=_opt_float(data.get("expectedPwrMax")),
    )


def parse_history(data: dict) -> SwrHistoryRecord:
    status = data.get("status")
    return SwrHistoryRecord(
        id=int(data.get("id", 0)),
        channel_id=int(data.get("swrChannelId", 0) or 0),
        date=str(data.get("date", "")),
        vswr=_opt_float(data.get("vswr")),
        fpwr=_opt_float(data.get("fpwr")),
        notes=data.get("notes") or None,
        status=status if status is not None else "Active",
    )


def parse_import_result(data: Any) -> SwrImportResult:
    data = data if isinstance(data, dict) else {}
    return SwrImportResult(
        success=bool(data.get("success", False)),
        records_created=int(data.get("recordsCreated", 0) or 0),
        records_updated=int(data.get("recordsUpdated", 0) or 0),
        channels_created=int(data.get("channelsCreated", 0) or 0),
        errors=tuple(str(e) for e in data.get("errors") or ()),
        message=data.get("message") or "",
    )


class SwrSignalApi:
    def __init__(self, client: BackendClient, long_client: BackendClient | None = None) -> None:
        self._client = client
        self._long = long_client or client

    async def sites(self) -> list[SwrSite]:
        payload = await self._client.get(f"{PREFIX}/sites")
        return [parse_site(s) for s in unwrap_list(payload) if isinstance(s, dict)]

    async def channels(self) -> list[SwrChannel]:
        payload = await self._client.get(f"{PREFIX}/channels")
        return [parse_channel(c) for c in unwrap_list(payload) if isinstance(c, dict)]

    async def histories(self, query: dict) -> tuple[list[SwrHistoryRecord], Any]:
        """Return one page of history records plus its PageInfo."""
        payload = await self._client.get(f"{PREFIX}/histories", params=query)
        rows, page = parse_page(payload, query.get("page", 1), query.get("pageSize", 10))
        return [parse_history(r) for r in rows if isinstance(r, dict)], page

    async def create_history(self, body: dict) -> Any:
        return _data(await self._client.post(f"{PREFIX}/histories", json=body))

    async def update_history(self, history_id: int, body: dict) -> Any:
        return _data(await self._client.put(f"{PREFIX}/histories/{history_id}", json=body))

    async def yearly_pivot(self, year: int, site: str | None = None) -> list[dict]:
        params: dict[str, Any] = {"year": year}
        if site:
            params["site"] = site
        payload = await self._client.get(f"{PREFIX}/yearly-pivot", params=params)
        return [row for row in unwrap_list(payload) if isinstance(row, dict)]

    async def import_excel(self, filename: str, content: bytes) -> SwrImportResult:
        payload = await self._long.upload(
            f"{PREFIX}/import-pivot-excel", "excelFile", filename, content,
        )
        return parse_import_result(_data(payload))

    async def export_yearly_excel(self, year: int, site: str | None = None) -> bytes:
        params: dict[str, Any] = {"year": year}
        if site:
            params["site"] = site
        return await self._client.get_bytes(f"{PREFIX}/export-yearly-excel", params=params)
