"""Fleet / call statistics view.

Ranked top-N caller and called-fleet tables for a date range, plus a
drill-down detail per clicked row. A drill-down is always a fresh fetch;
nothing is derived from the already loaded ranking.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import TYPE_CHECKING

import structlog

from opsdash.core.errors import OpsdashError
from opsdash.core.models import (
    FleetContact,
    FleetStatistics,
    FleetStatisticType,
    SortOrder,
)

if TYPE_CHECKING:
    from opsdash.client.call_records import CallRecordApi

log = structlog.get_logger()


@dataclass
class FleetStatisticsQuery:
    start_date: str = field(default_factory=lambda: date.today().isoformat())
    end_date: str = field(default_factory=lambda: date.today().isoformat())
    top_n: int = 10
    type: FleetStatisticType = FleetStatisticType.ALL
    sort_order: SortOrder = SortOrder.DESC
    caller_filter: str | None = None
    called_filter: str | None = None


@dataclass
class DetailModal:
    is_open: bool = False
    kind: str = "caller"  # "caller": callers of a fleet, "called": fleets called by a caller
    fleet: str = ""
    rows: list[FleetContact] = field(default_factory=list)
    is_loading: bool = False


class FleetStatisticsView:
    def __init__(self, api: CallRecordApi, top_n: int = 10) -> None:
        self._api = api
        self.query = FleetStatisticsQuery(top_n=top_n)
        self.statistics: FleetStatistics | None = None
        self.is_loading = False
        self.error_banner: str | None = None
        self.detail = DetailModal()
        self._generation = 0

    async def load(self) -> FleetStatistics | None:
        self._generation += 1
        generation = self._generation
        q = self.query

        self.error_banner = None
        self.is_loading = True
        try:
            stats = await self._api.fleet_statistics(
                q.start_date, q.end_date, q.top_n, q.type, q.sort_order,
                q.caller_filter or None, q.called_filter or None,
            )
        except OpsdashError as exc:
            if generation == self._generation:
                self.statistics = None
                self.error_banner = exc.message or "Failed to load fleet statistics"
                log.warning("fleet_statistics_failed", error=self.error_banner)
            return self.statistics
        finally:
            if generation == self._generation:
                self.is_loading = False

        if generation == self._generation:
            self.statistics = stats
            log.info("fleet_statistics_loaded", start=q.start_date, end=q.end_date,
                     callers=len(stats.top_callers), called=len(stats.top_called_fleets))
        return self.statistics

    def dismiss_error(self) -> None:
        self.error_banner = None

    async def open_unique_callers(self, called_fleet: str) -> DetailModal:
        """Show which callers called ``called_fleet`` in the current date range."""
        return await self._open_detail("caller", called_fleet)

    async def open_unique_called(self, caller_fleet: str) -> DetailModal:
        """Show which fleets ``caller_fleet`` called in the current date range."""
        return await self._open_detail("called", caller_fleet)

    async def _open_detail(self, kind: str, fleet: str) -> DetailModal:
        self.detail = DetailModal(is_open=True, kind=kind, fleet=fleet, is_loading=True)
        q = self.query
        try:
            if kind == "caller":
                rows = await self._api.unique_callers_for_fleet(fleet, q.start_date, q.end_date)
            else:
                rows = await self._api.unique_called_fleets_for_caller(fleet, q.start_date, q.end_date)
        except OpsdashError as exc:
            log.warning("fleet_detail_failed", kind=kind, fleet=fleet, error=exc.message)
            rows = []

        if self.detail.fleet == fleet and self.detail.kind == kind:
            self.detail.rows = rows
            self.detail.is_loading = False
        return self.detail

    def close_detail(self) -> None:
        self.detail = DetailModal()

    def snapshot(self) -> dict:
        q = self.query
        return {
            "query": {
                "start_date": q.start_date,
                "end_date": q.end_date,
                "top_n": q.top_n,
                "type": q.type.value,
                "sort_order": q.sort_order.value,
                "caller_filter": q.caller_filter,
                "called_filter": q.called_filter,
            },
            "statistics": asdict(self.statistics) if self.statistics else None,
            "is_loading": self.is_loading,
            "error_banner": self.error_banner,
            "detail": asdict(self.detail),
        }
