"""Generic list/create/update/delete endpoints over the registered resources.

Each resource is backed by one long-lived ResourceListController; the
response is always the controller's view-model after the action. The radio
collections also expose per-radio history, scrapping and CSV files.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Body, HTTPException, Query, Request, Response

from opsdash.api.guards import enforce
from opsdash.core.radio import RadioListController

router = APIRouter(prefix="/api/v1")

CSV_MEDIA_TYPE = "text/csv"

_INT_PARAMS = ("page", "page_size")
_STR_PARAMS = ("search", "sort_by", "sort_dir")


def _controller(name: str):
    from opsdash.main import get_controller, get_gate

    controller = get_controller(name)
    if controller is None:
        raise HTTPException(status_code=404, detail=f"Unknown resource {name!r}")
    enforce(controller.spec.permission, get_gate())
    return controller


def _query_changes(request: Request) -> dict:
    params = request.query_params
    changes: dict = {}
    for key in _INT_PARAMS:
        if key in params:
            try:
                changes[key] = max(1, int(params[key]))
            except ValueError:
                raise HTTPException(status_code=400, detail=f"{key} must be an integer") from None
    for key in _STR_PARAMS:
        if key in params:
            changes[key] = params[key]
    filters = {k: v for k, v in params.items() if k not in _INT_PARAMS + _STR_PARAMS}
    if filters:
        changes["filters"] = filters
    return changes


@router.get("/resources/{name}")
async def list_resource(name: str, request: Request) -> dict:
    controller = _controller(name)
    await controller.list(**_query_changes(request))
    return controller.snapshot()


@router.post("/resources/{name}", status_code=201)
async def create_resource(name: str, payload: dict = Body(...)) -> dict:
    controller = _controller(name)
    created = await controller.create(payload)
    return {"created": created, "list": controller.snapshot()}


@router.put("/resources/{name}/{item_id}")
async def update_resource(name: str, item_id: int, payload: dict = Body(...)) -> dict:
    controller = _controller(name)
    updated = await controller.update(item_id, payload)
    return {"updated": updated, "list": controller.snapshot()}


@router.delete("/resources/{name}/{item_id}")
async def delete_resource(name: str, item_id: int, confirm: bool = False) -> dict:
    """Delete one item. Without ``confirm=true`` answers 409 with the prompt."""
    controller = _controller(name)
    await controller.delete(item_id, confirmed=confirm)
    return {"deleted": item_id, "list": controller.snapshot()}


def _radio_controller(name: str, action: str):
    controller = _controller(name)
    if not isinstance(controller, RadioListController) or not controller.supports(action):
        raise HTTPException(status_code=404, detail=f"{name} has no {action} action")
    return controller


def _csv(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/resources/{name}/export")
async def export_resource(name: str) -> Response:
    """The collection as CSV, with the filters of the current list."""
    controller = _radio_controller(name, "export")
    content = await controller.export_csv()
    stem = name.replace("-", "_")
    return _csv(content, f"{stem}_{date.today().isoformat()}.csv")


@router.get("/resources/{name}/template")
async def import_template(name: str) -> Response:
    controller = _radio_controller(name, "import")
    content = await controller.template()
    return _csv(content, f"{name.replace('-', '_')}_template.csv")


@router.post("/resources/{name}/import")
async def import_resource(name: str, request: Request, filename: str = Query(..., min_length=1)) -> dict:
    """Upload a CSV file (raw request body), then re-list."""
    controller = _radio_controller(name, "import")
    if not filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Only CSV files can be imported")
    content = await request.body()
    if not content:
        raise HTTPException(status_code=400, detail="Empty upload")

    result = await controller.import_csv(filename, content)
    return {"imported": asdict(result), "list": controller.snapshot()}


@router.get("/resources/{name}/{item_id}/history")
async def radio_history(name: str, item_id: int) -> dict:
    controller = _radio_controller(name, "history")
    entries = await controller.history(item_id)
    return {"id": item_id, "history": [asdict(e) for e in entries]}


@router.post("/resources/{name}/{item_id}/scrap")
async def scrap_radio(name: str, item_id: int, payload: dict = Body(...)) -> dict:
    """Move one radio into the scrap register. Body: ``{dateScrap, jobNumber?, remarks?}``."""
    controller = _radio_controller(name, "scrap")
    scrapped = await controller.scrap(item_id, payload)
    return {"scrapped": scrapped, "list": controller.snapshot()}
