"""Fleet statistics endpoints (call records)."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query

from opsdash.api.guards import require_permission
from opsdash.core.models import FleetStatisticType, SortOrder

router = APIRouter(
    prefix="/api/v1",
    dependencies=[Depends(require_permission("callrecord.view"))],
)


@router.get("/fleet-statistics")
async def fleet_statistics(
    start_date: str | None = None,
    end_date: str | None = None,
    top: int | None = Query(None, ge=1),
    type: FleetStatisticType | None = None,
    sort_order: SortOrder | None = None,
    caller_fleet: str | None = None,
    called_fleet: str | None = None,
) -> dict:
    """Load the ranked tables for the given query (unset fields keep their value)."""
    from opsdash.main import get_fleet_view

    view = get_fleet_view()
    q = view.query
    start, end = start_date or q.start_date, end_date or q.end_date
    if start > end:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")
    q.start_date, q.end_date = start, end
    if top is not None:
        q.top_n = top
    if type is not None:
        q.type = type
    if sort_order is not None:
        q.sort_order = sort_order
    if caller_fleet is not None:
        q.caller_filter = caller_fleet or None
    if called_fleet is not None:
        q.called_filter = called_fleet or None

    await view.load()
    return view.snapshot()


@router.post("/fleet-statistics/dismiss-error")
async def dismiss_error() -> dict:
    from opsdash.main import get_fleet_view

    view = get_fleet_view()
    view.dismiss_error()
    return view.snapshot()


@router.get("/fleet-statistics/unique-callers")
async def unique_callers(fleet: str = Query(..., min_length=1)) -> dict:
    """Callers that called ``fleet`` in the current date range."""
    from opsdash.main import get_fleet_view

    return asdict(await get_fleet_view().open_unique_callers(fleet))


@router.get("/fleet-statistics/unique-called-fleets")
async def unique_called_fleets(caller: str = Query(..., min_length=1)) -> dict:
    """Fleets called by ``caller`` in the current date range."""
    from opsdash.main import get_fleet_view

    return asdict(await get_fleet_view().open_unique_called(caller))


@router.delete("/fleet-statistics/detail")
async def close_detail() -> dict:
    from opsdash.main import get_fleet_view

    view = get_fleet_view()
    view.close_detail()
    return asdict(view.detail)
