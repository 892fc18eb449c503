"""Radio scrap yearly chart projection."""

from __future__ import annotations

from opsdash.core.models import ScrapSummary
from opsdash.core.pivot import MONTHS


def _monthly(values: tuple[int, ...]) -> list[int]:
    padded = list(values[:12])
    return padded + [0] * (12 - len(padded))


def scrap_chart(summary: ScrapSummary) -> list[dict]:
    """Twelve ``{month, trunking, conventional}`` points; missing months are 0."""
    trunking = _monthly(summary.trunking.monthly)
    conventional = _monthly(summary.conventional.monthly)
    return [
        {"month": name, "trunking": trunking[i], "conventional": conventional[i]}
        for i, name in enumerate(MONTHS)
    ]
