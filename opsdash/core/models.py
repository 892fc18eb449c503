"""Core internal data models.

These are plain dataclasses with no framework dependencies.
Backend JSON (camelCase) is converted to/from these at the client boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class PageInfo:
    current_page: int = 1
    page_size: int = 10
    total_count: int = 0
    total_pages: int = 1
    has_next: bool = False
    has_previous: bool = False


@dataclass
class ListQuery:
    page: int = 1
    page_size: int = 10
    search: str = ""
    sort_by: str | None = None
    sort_dir: str | None = None  # "asc" or "desc"
    filters: dict[str, Any] = field(default_factory=dict)

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"page": self.page, "pageSize": self.page_size}
        if self.search:
            params["search"] = self.search
        if self.sort_by:
            params["sortBy"] = self.sort_by
        if self.sort_dir:
            params["sortDir"] = self.sort_dir
        for k, v in self.filters.items():
            if v is not None and v != "":
                params[k] = v
        return params


# --- SWR ---------------------------------------------------------------------

@dataclass(frozen=True)
class PivotRow:
    """One channel's readings across the 12 months of a year."""
    channel_name: str
    site_name: str
    site_type: str
    expected_swr_max: float
    monthly_vswr: dict[str, float | None]
    monthly_fpwr: dict[str, float | None]
    notes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SwrSite:
    id: int
    name: str
    type: str
    location: str | None = None
    channel_count: int = 0


@dataclass(frozen=True)
class SwrChannel:
    id: int
    channel_name: str
    site_id: int
    site_name: str
    site_type: str
    expected_swr_max: float
    expected_pwr_max: float | None = None


@dataclass(frozen=True)
class SwrHistoryRecord:
    id: int
    channel_id: int
    date: str
    vswr: float | None
    fpwr: float | None = None
    notes: str | None = None
    status: str | int = "Active"


@dataclass(frozen=True)
class SwrImportResult:
    success: bool
    records_created: int = 0
    records_updated: int = 0
    channels_created: int = 0
    errors: tuple[str, ...] = ()
    message: str = ""


# --- Call records ------------------------------------------------------------

class FleetStatisticType(str, Enum):
    ALL = "All"
    CALLER = "Caller"
    CALLED = "Called"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class TopCaller:
    rank: int
    caller_fleet: str
    total_calls: int
    total_duration_seconds: int = 0
    total_duration_formatted: str = ""
    average_duration_seconds: float = 0.0
    average_duration_formatted: str = ""
    unique_called_fleets: int = 0


@dataclass(frozen=True)
class TopCalled:
    rank: int
    called_fleet: str
    total_calls: int
    total_duration_seconds: int = 0
    total_duration_formatted: str = ""
    average_duration_seconds: float = 0.0
    average_duration_formatted: str = ""
    unique_callers: int = 0


@dataclass(frozen=True)
class FleetStatistics:
    date: str
    top_callers: list[TopCaller]
    top_called_fleets: list[TopCalled]
    total_calls: int = 0
    total_duration_seconds: int = 0
    total_duration_formatted: str = ""
    total_unique_callers: int = 0
    total_unique_called_fleets: int = 0


@dataclass(frozen=True)
class FleetContact:
    """One row of a drill-down: a caller of a fleet, or a fleet called by a caller."""
    fleet: str
    call_count: int
    total_duration_seconds: int = 0
    total_duration_formatted: str = ""


# --- Radio scrap -------------------------------------------------------------

@dataclass(frozen=True)
class ScrapCategorySummary:
    total: int
    monthly: tuple[int, ...]


@dataclass(frozen=True)
class ScrapSummary:
    year: int
    trunking: ScrapCategorySummary
    conventional: ScrapCategorySummary
    grand_total: int


# --- Radio inventories -------------------------------------------------------

@dataclass(frozen=True)
class RadioHistoryEntry:
    """One change of a trunking/conventional radio (reassignment, status, ...)."""
    id: int
    radio_id: int
    change_type: str
    changed_at: str
    previous_unit_number: str | None = None
    new_unit_number: str | None = None
    previous_dept: str | None = None
    new_dept: str | None = None
    previous_fleet: str | None = None
    new_fleet: str | None = None
    notes: str | None = None
    changed_by_name: str | None = None


@dataclass(frozen=True)
class RadioImportResult:
    success: int = 0
    failed: int = 0
    errors: tuple[str, ...] = ()
