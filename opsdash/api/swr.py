"""SWR yearly pivot endpoints: table, notes, workbook import/export."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Body, HTTPException, Query, Request, Response

router = APIRouter(prefix="/api/v1")

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/swr/pivot")
async def pivot(
    year: int | None = Query(None, ge=2000, le=2100),
    site: str | None = None,
    search: str | None = None,
    sites: list[str] | None = Query(None),
    site_type: str | None = None,
    page: int | None = Query(None, ge=1),
    refresh: bool = False,
) -> dict:
    """Current page of the pivot table with its charts and summary.

    Changing ``year`` or ``site`` refetches; the other parameters filter
    the already loaded rows.
    """
    from opsdash.main import get_swr_view

    view = get_swr_view()
    changed = view.select(year, site)
    if changed or refresh or not view.is_loaded:
        await view.refresh()
    if not view.sites:
        await view.load_sites()
    view.set_filters(search=search, site_names=sites, site_type=site_type)
    if page is not None:
        view.set_page(page)
    return view.snapshot()


@router.put("/swr/pivot/notes")
async def save_note(body: dict = Body(...)) -> dict:
    """Create, update or delete one cell note.

    Body: ``{"channel", "month", "text", "site"?, "confirm"?}``. An empty
    ``text`` deletes an existing note and needs ``confirm: true``.
    """
    from opsdash.main import get_swr_view

    channel = body.get("channel")
    month = body.get("month")
    if not channel or not month:
        raise HTTPException(status_code=400, detail="channel and month are required")

    row = await get_swr_view().save_note(
        channel, month, body.get("text") or "",
        site_name=body.get("site"),
        confirmed=bool(body.get("confirm", False)),
    )
    return {"channel": row.channel_name, "site": row.site_name, "notes": row.notes}


@router.post("/swr/import")
async def import_workbook(request: Request, filename: str = Query(..., min_length=1)) -> dict:
    """Upload a pivot workbook (raw request body) to the backend importer."""
    from opsdash.main import get_swr_view

    if not filename.lower().endswith((".xlsx", ".xls")):
        raise HTTPException(status_code=400, detail="Only Excel workbooks can be imported")
    content = await request.body()
    if not content:
        raise HTTPException(status_code=400, detail="Empty upload")

    result = await get_swr_view().import_workbook(filename, content)
    return asdict(result)


@router.get("/swr/export")
async def export_workbook(
    year: int | None = Query(None, ge=2000, le=2100),
    site: str | None = None,
) -> Response:
    from opsdash.main import get_swr_view

    view = get_swr_view()
    if view.select(year, site):
        await view.refresh()
    content = await view.export_workbook()
    suffix = f"_{view.site}" if view.site else ""
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="SWR_Pivot_{view.year}{suffix}.xlsx"'},
    )
