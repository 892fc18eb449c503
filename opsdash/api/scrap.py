"""Radio scrap yearly summary endpoint."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query

from opsdash.core.scrap import scrap_chart

router = APIRouter(prefix="/api/v1")


@router.get("/radio-scrap/yearly-summary")
async def yearly_summary(year: int | None = Query(None, ge=2000, le=2100)) -> dict:
    from opsdash.main import get_scrap_api

    summary = await get_scrap_api().yearly_summary(year or date.today().year)
    return {
        "year": summary.year,
        "grand_total": summary.grand_total,
        "trunking_total": summary.trunking.total,
        "conventional_total": summary.conventional.total,
        "chart": scrap_chart(summary),
    }
