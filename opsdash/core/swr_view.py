"""SWR yearly pivot view.

Holds the selected year/site, the client-side filters and the current
page of the pivot table, and owns note editing. Three sources feed the
displayed notes: the fresh backend fetch, the local annotation cache
(merged over it, local wins) and in-flight edits, which patch a single
row in place without a refetch.
"""

from __future__ import annotations

from dataclasses import asdict, replace
from datetime import date
from typing import TYPE_CHECKING

import structlog

from opsdash.core import pivot
from opsdash.core.errors import (
    BackendError,
    ConfirmationRequired,
    NoteSaveError,
    OpsdashError,
    ValidationFailed,
    extract_error_message,
)
from opsdash.core.models import PivotRow, SwrChannel, SwrHistoryRecord, SwrImportResult, SwrSite

if TYPE_CHECKING:
    from opsdash.client.swr import SwrSignalApi
    from opsdash.core.annotations import AnnotationCache

log = structlog.get_logger()

HISTORY_PAGE_SIZE = 100
ALERT_LIMIT = 10
DEFAULT_VSWR = 1.0


class SwrPivotView:
    def __init__(
        self,
        api: SwrSignalApi,
        cache: AnnotationCache,
        page_size: int = 16,
        year: int | None = None,
    ) -> None:
        self._api = api
        self._cache = cache
        self.page_size = page_size
        self.year = year or date.today().year
        self.site: str | None = None
        self.filters = pivot.PivotFilters()
        self.page = 1
        self.rows: list[PivotRow] = []
        self.sites: list[SwrSite] = []
        self.is_loading = False
        self.is_loaded = False
        self.error: str | None = None
        self._generation = 0

    # -- fetching ---------------------------------------------------------

    async def refresh(self) -> list[PivotRow]:
        """Rebuild every row from a fresh fetch, then overlay cached notes."""
        self._generation += 1
        generation = self._generation
        year, site = self.year, self.site

        self.is_loading = True
        self.error = None
        try:
            raw_rows = await self._api.yearly_pivot(year, site)
        except OpsdashError as exc:
            if generation == self._generation:
                self.rows = []
                self.error = exc.message
                self.is_loading = False
                self.is_loaded = True
                log.warning("pivot_load_failed", year=year, site=site, error=exc.message)
            return self.rows

        if generation != self._generation:
            return self.rows

        rows = [pivot.normalize_row(raw, year) for raw in raw_rows]
        self.rows = self._cache.merge(rows, year)
        self.page = 1
        self.is_loading = False
        self.is_loaded = True
        log.info("pivot_loaded", year=year, site=site, rows=len(self.rows))
        return self.rows

    async def load_sites(self) -> list[SwrSite]:
        try:
            self.sites = await self._api.sites()
        except OpsdashError as exc:
            log.warning("sites_load_failed", error=exc.message)
            self.sites = []
        return self.sites

    def select(self, year: int | None = None, site: str | None = None) -> bool:
        """Change the server-side selection. Returns True when a refetch is due.

        ``site`` of ``""`` or ``"all"`` clears the site selection.
        """
        new_year = year if year is not None else self.year
        new_site = self.site if site is None else (None if site in ("", "all") else site)
        changed = (new_year, new_site) != (self.year, self.site)
        self.year, self.site = new_year, new_site
        return changed

    # -- client-side filtering ------------------------------------------------

    def set_filters(
        self,
        search: str | None = None,
        site_names: list[str] | tuple[str, ...] | None = None,
        site_type: str | None = None,
    ) -> None:
        if site_type is not None and site_type not in pivot.SITE_TYPES:
            raise ValidationFailed(f"Unknown site type {site_type!r}", field="site_type")
        current = self.filters
        if site_names is not None:
            # blank names are dropped, so ``?sites=`` alone clears the selection
            site_names = tuple(name for name in site_names if name and name.strip())
        filters = pivot.PivotFilters(
            search=current.search if search is None else search,
            site_names=current.site_names if site_names is None else site_names,
            site_type=current.site_type if site_type is None else site_type,
        )
        if filters != current:
            self.filters = filters
            self.page = 1

    def filtered_rows(self) -> list[PivotRow]:
        return pivot.apply_filters(self.rows, self.filters)

    @property
    def total_pages(self) -> int:
        return pivot.total_pages(len(self.filtered_rows()), self.page_size)

    def set_page(self, page: int) -> int:
        self.page = min(max(1, page), self.total_pages)
        return self.page

    def page_rows(self) -> list[PivotRow]:
        return pivot.paginate(self.filtered_rows(), self.page, self.page_size)

    # -- charts (current page only) ------------------------------------------

    def line_chart(self) -> dict:
        return pivot.line_chart(self.page_rows(), self.year)

    def pie_chart(self) -> dict:
        return pivot.pie_chart(self.page_rows())

    def site_bar_chart(self) -> list[dict]:
        return pivot.site_bar_chart(self.page_rows())

    # -- dashboard panels (every loaded row) -----------------------------------

    def summary(self) -> dict:
        return pivot.summary(self.rows)

    def alerts(self) -> list[dict]:
        return pivot.alerts(self.rows)

    def monthly_trend(self) -> list[dict]:
        return pivot.monthly_trend(self.rows)

    # -- notes ----------------------------------------------------------------

    def find_row(self, channel_name: str, site_name: str | None = None) -> PivotRow | None:
        for row in self.rows:
            if row.channel_name == channel_name and (site_name is None or row.site_name == site_name):
                return row
        return None

    async def save_note(
        self,
        channel_name: str,
        month_key: str,
        text: str,
        site_name: str | None = None,
        confirmed: bool = False,
    ) -> PivotRow:
        """Create, update or delete the note of one (channel, month) cell.

        Empty text over an existing note is a delete and needs ``confirmed``.
        On failure nothing changes locally and NoteSaveError is raised.
        """
        row = self.find_row(channel_name, site_name)
        if row is None:
            raise ValidationFailed(f"Channel {channel_name!r} is not loaded", field="channel")
        if month_key not in row.monthly_vswr:
            raise ValidationFailed(f"{month_key!r} is not a month of {self.year}", field="month")

        text = (text or "").strip()
        prior = row.notes.get(month_key)
        deleting = not text
        if deleting and not prior:
            return row
        if deleting and not confirmed:
            raise ConfirmationRequired(
                f'Delete the note for {channel_name} ({month_key}): "{prior}"?'
            )

        verb = "delete" if deleting else "save"
        try:
            await self._push_note(row, month_key, text)
        except OpsdashError as exc:
            fallback = f"Failed to {verb} note"
            if isinstance(exc, BackendError):
                message = extract_error_message(exc.payload, fallback)
            else:
                message = exc.message or fallback
            log.warning("note_save_failed", channel=channel_name, month=month_key,
                        action=verb, error=message)
            raise NoteSaveError(message) from exc

        # rows may have been replaced by a refresh while the push was awaited
        current = self.find_row(row.channel_name, row.site_name) or row
        notes = dict(current.notes)
        if text:
            notes[month_key] = text
        else:
            notes.pop(month_key, None)
        updated = replace(current, notes=notes)
        self.rows = [
            updated if (r.channel_name, r.site_name) == (row.channel_name, row.site_name) else r
            for r in self.rows
        ]
        if text:
            self._cache.set_note(self.year, channel_name, month_key, text)
        else:
            self._cache.remove_note(self.year, channel_name, month_key)

        log.info("note_saved", channel=channel_name, month=month_key, action=verb)
        return updated

    async def _push_note(self, row: PivotRow, month_key: str, text: str) -> None:
        channel = await self._backend_channel(row)
        record = await self._history_for_month(channel.id, month_key)

        vswr = row.monthly_vswr.get(month_key)
        fpwr = row.monthly_fpwr.get(month_key)

        if record is not None:
            await self._api.update_history(record.id, {
                "fpwr": fpwr,
                "vswr": vswr if vswr is not None else DEFAULT_VSWR,
                "notes": text or None,
                "status": record.status,
            })
        elif text:
            month = pivot.month_number(month_key)
            await self._api.create_history({
                "swrChannelId": channel.id,
                "date": f"{self.year:04d}-{month:02d}-15",
                "fpwr": fpwr,
                "vswr": vswr if vswr is not None else DEFAULT_VSWR,
                "notes": text,
                "status": "Active",
            })

    async def _backend_channel(self, row: PivotRow) -> SwrChannel:
        channels = await self._api.channels()
        for channel in channels:
            if channel.channel_name == row.channel_name and (
                not row.site_name or channel.site_name == row.site_name
            ):
                return channel
        raise NoteSaveError(f"Channel {row.channel_name!r} not found on the server")

    async def _history_for_month(self, channel_id: int, month_key: str) -> SwrHistoryRecord | None:
        page = 1
        while True:
            records, info = await self._api.histories({
                "swrChannelId": channel_id,
                "page": page,
                "pageSize": HISTORY_PAGE_SIZE,
                "sortBy": "Date",
                "sortDir": "desc",
            })
            for record in records:
                if pivot.month_key_from_date(record.date) == month_key:
                    return record
            if not records or page >= info.total_pages:
                return None
            page += 1

    # -- import / export ------------------------------------------------------

    async def import_workbook(self, filename: str, content: bytes) -> SwrImportResult:
        result = await self._api.import_excel(filename, content)
        log.info("pivot_imported", filename=filename, success=result.success,
                 created=result.records_created, updated=result.records_updated,
                 channels=result.channels_created, errors=len(result.errors))
        if result.success:
            await self.refresh()
        return result

    async def export_workbook(self) -> bytes:
        return await self._api.export_yearly_excel(self.year, self.site)

    def snapshot(self) -> dict:
        """JSON-serializable view-model of the current page."""
        rows = self.page_rows()
        alerts = self.alerts()
        return {
            "year": self.year,
            "site": self.site,
            "filters": asdict(self.filters),
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
            "total_rows": len(self.filtered_rows()),
            "is_loading": self.is_loading,
            "error": self.error,
            "sites": [asdict(s) for s in self.sites],
            "months": pivot.month_keys(self.year),
            "rows": [
                {
                    **asdict(row),
                    "status": {
                        key: {kind: status.value for kind, status in cell.items()}
                        for key, cell in pivot.cell_statuses(row).items()
                    },
                }
                for row in rows
            ],
            "charts": {
                "line": self.line_chart(),
                "pie": {status.value: n for status, n in self.pie_chart().items()},
                "sites": self.site_bar_chart(),
            },
            "summary": self.summary(),
            "trend": self.monthly_trend(),
            "alerts": {"total": len(alerts), "items": alerts[:ALERT_LIMIT]},
        }
