"""SWR yearly pivot: month keys, row normalization, filters and chart projections.

A pivot row holds one channel's VSWR/FPWR readings for the 12 months of
a year, keyed ``"Jan-25" .. "Dec-25"``. Every row carries all 12 keys;
a month without a reading maps to ``None``.

Charts are projected from whatever rows they are given. The view passes
only the rows of the current table page, so legends and series stay
bounded to what is visible.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

from opsdash.core.models import PivotRow
from opsdash.core.status import DEFAULT_EXPECTED_SWR_MAX, Status, fpwr_status, vswr_status

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

SITE_TYPES = ("all", "Trunking", "Conventional")


def month_key(month: str | int, year: int) -> str:
    """``month_key("Jan", 2025) == month_key(1, 2025) == "Jan-25"``."""
    name = MONTHS[month - 1] if isinstance(month, int) else month
    return f"{name}-{year % 100:02d}"


def month_keys(year: int) -> list[str]:
    return [month_key(m, year) for m in MONTHS]


def month_number(key: str) -> int:
    """1-based month of a ``Mon-YY`` key."""
    return MONTHS.index(key.split("-", 1)[0]) + 1


def month_key_from_date(value: str) -> str | None:
    """Derive the month key of an ISO date or datetime string."""
    try:
        d = date.fromisoformat(str(value)[:10])
    except ValueError:
        return None
    return month_key(d.month, d.year)


def _reading(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_row(raw: dict, year: int) -> PivotRow:
    """Build a PivotRow from a backend pivot entry.

    Monthly maps are rebuilt on the 12 canonical keys of ``year``; keys the
    backend omitted become None and foreign keys are dropped.
    """
    keys = month_keys(year)
    vswr = raw.get("monthlyVswr") or {}
    fpwr = raw.get("monthlyFpwr") or {}
    notes = raw.get("notes") or {}
    expected = _reading(raw.get("expectedSwrMax")) or DEFAULT_EXPECTED_SWR_MAX

    return PivotRow(
        channel_name=str(raw.get("channelName") or ""),
        site_name=str(raw.get("siteName") or ""),
        site_type=str(raw.get("siteType") or ""),
        expected_swr_max=expected,
        monthly_vswr={k: _reading(vswr.get(k)) for k in keys},
        monthly_fpwr={k: _reading(fpwr.get(k)) for k in keys},
        notes={k: str(v) for k, v in notes.items() if k in keys and v},
    )


@dataclass(frozen=True)
class PivotFilters:
    search: str = ""
    site_names: tuple[str, ...] = ()
    site_type: str = "all"


def apply_filters(rows: Iterable[PivotRow], filters: PivotFilters) -> list[PivotRow]:
    """Search text, then site multi-select, then site type."""
    result = list(rows)

    term = filters.search.strip().lower()
    if term:
        result = [r for r in result
                  if term in r.channel_name.lower() or term in r.site_name.lower()]

    if filters.site_names:
        wanted = set(filters.site_names)
        result = [r for r in result if r.site_name in wanted]

    if filters.site_type != "all":
        result = [r for r in result if r.site_type == filters.site_type]

    return result


def total_pages(count: int, page_size: int) -> int:
    return max(1, -(-count // page_size))


def paginate(rows: list[PivotRow], page: int, page_size: int) -> list[PivotRow]:
    start = (page - 1) * page_size
    return rows[start:start + page_size]


def cell_statuses(row: PivotRow) -> dict[str, dict[str, Status]]:
    return {
        key: {
            "vswr": vswr_status(row.monthly_vswr.get(key), row.expected_swr_max),
            "fpwr": fpwr_status(row.monthly_fpwr.get(key)),
        }
        for key in row.monthly_vswr
    }


def line_chart(rows: list[PivotRow], year: int) -> dict:
    """One VSWR series per channel across the 12 months."""
    keys = month_keys(year)
    return {
        "months": list(MONTHS),
        "series": [
            {
                "channel": row.channel_name,
                "site": row.site_name,
                "values": [row.monthly_vswr.get(k) for k in keys],
            }
            for row in rows
        ],
    }


def pie_chart(rows: list[PivotRow]) -> dict[Status, int]:
    """Count every (channel, month) cell into the four VSWR buckets."""
    counts = {status: 0 for status in Status}
    for row in rows:
        for value in row.monthly_vswr.values():
            counts[vswr_status(value, row.expected_swr_max)] += 1
    return counts


def site_bar_chart(rows: list[PivotRow]) -> list[dict]:
    """Per site: share of good readings, average VSWR and channel count."""
    stats: dict[str, dict[str, float]] = {}
    for row in rows:
        s = stats.setdefault(row.site_name, {"readings": 0, "good": 0, "vswr_sum": 0.0, "channels": 0})
        s["channels"] += 1
        for value in row.monthly_vswr.values():
            if value is None:
                continue
            s["readings"] += 1
            s["vswr_sum"] += value
            if vswr_status(value, row.expected_swr_max) is Status.GOOD:
                s["good"] += 1

    bars = [
        {
            "site": site,
            "performance": (s["good"] / s["readings"] * 100) if s["readings"] else 0.0,
            "avg_vswr": (s["vswr_sum"] / s["readings"]) if s["readings"] else 0.0,
            "total_channels": int(s["channels"]),
        }
        for site, s in stats.items()
    ]
    bars.sort(key=lambda b: b["performance"], reverse=True)
    return bars


def summary(rows: list[PivotRow]) -> dict:
    """Headline numbers over every loaded row."""
    counts = {status: 0 for status in Status}
    total = 0.0
    for row in rows:
        for value in row.monthly_vswr.values():
            counts[vswr_status(value, row.expected_swr_max)] += 1
            if value is not None:
                total += value

    points = sum(n for status, n in counts.items() if status is not Status.NO_DATA)

    def pct(status: Status) -> float:
        return counts[status] / points * 100 if points else 0.0

    return {
        "total_channels": len(rows),
        "total_data_points": points,
        "average_vswr": round(total / points, 2) if points else 0.0,
        "good_percentage": pct(Status.GOOD),
        "warning_percentage": pct(Status.WARNING),
        "critical_percentage": pct(Status.CRITICAL),
    }


VSWR_DANGER_MIN = 3.0


def alerts(rows: list[PivotRow]) -> list[dict]:
    """Every critical reading, in row then month order.

    Readings of 3.0 and above are ``danger``; the rest of the critical
    bucket is a ``high`` warning.
    """
    found = []
    for row in rows:
        for key, value in row.monthly_vswr.items():
            if value is None or value <= 0:
                continue
            if vswr_status(value, row.expected_swr_max) is not Status.CRITICAL:
                continue
            danger = value >= VSWR_DANGER_MIN
            found.append({
                "level": "danger" if danger else "high",
                "message": "Critical VSWR detected" if danger else "High VSWR warning",
                "channel": row.channel_name,
                "site": row.site_name,
                "month": key.split("-")[0],
                "vswr": value,
            })
    return found


def monthly_trend(rows: list[PivotRow]) -> list[dict]:
    """Average positive VSWR per calendar month across channels."""
    sums = {month: 0.0 for month in MONTHS}
    counts = {month: 0 for month in MONTHS}
    for row in rows:
        for key, value in row.monthly_vswr.items():
            if value is None or value <= 0:
                continue
            month = key.split("-")[0]
            if month in sums:
                sums[month] += value
                counts[month] += 1
    return [
        {
            "month": month,
            "average": sums[month] / counts[month] if counts[month] else None,
            "count": counts[month],
        }
        for month in MONTHS
    ]
