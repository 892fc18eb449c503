"""Tests for the radio inventory actions: history, scrap, CSV export/import."""

from __future__ import annotations

import pytest

from opsdash.core.errors import ValidationFailed
from opsdash.core.radio import RadioListController
from opsdash.main import get_controller


def _page(rows):
    return {"data": rows, "page": 1, "pageSize": 10, "totalCount": len(rows), "totalPages": 1}


def test_radio_collections_get_radio_controllers():
    for name in ("radio-trunking", "radio-conventional", "radio-grafir", "radio-scrap"):
        assert isinstance(get_controller(name), RadioListController)
    assert not isinstance(get_controller("companies"), RadioListController)


def test_supported_actions_per_collection():
    trunking = get_controller("radio-trunking")
    grafir = get_controller("radio-grafir")
    scrap = get_controller("radio-scrap")

    assert all(trunking.supports(a) for a in ("history", "scrap", "export", "import"))
    assert grafir.supports("import") and not grafir.supports("scrap")
    assert scrap.supports("export") and not scrap.supports("import")
    assert not scrap.supports("bogus")


@pytest.mark.asyncio
async def test_history_is_parsed(backend):
    backend.route("GET", "/radio-trunking/5/history", {"data": [{
        "id": 1, "radioId": 5, "changeType": "Reassign", "changedAt": "2025-01-02T10:00:00",
        "previousFleet": "FLT-A", "newFleet": "FLT-B", "changedByName": "ops",
    }]})

    entries = await get_controller("radio-trunking").history(5)

    assert len(entries) == 1
    assert entries[0].change_type == "Reassign"
    assert entries[0].previous_fleet == "FLT-A"
    assert entries[0].new_fleet == "FLT-B"
    assert entries[0].notes is None


@pytest.mark.asyncio
async def test_history_not_offered_for_grafir(backend):
    with pytest.raises(ValidationFailed):
        await get_controller("radio-grafir").history(1)
    assert backend.requests == []


@pytest.mark.asyncio
async def test_scrap_posts_then_relists(backend):
    backend.route("POST", "/radio-scrap/from-conventional/9",
                  {"data": {"id": 3, "scrapCategory": "Conventional"}})
    backend.route("GET", "/radio-conventional", _page([{"id": 10}]))
    ctrl = get_controller("radio-conventional")

    result = await ctrl.scrap(9, {"dateScrap": "2025-05-01", "jobNumber": "WO-1"})

    assert result == {"id": 3, "scrapCategory": "Conventional"}
    sent = backend.body(backend.calls("POST", "/radio-scrap/from-conventional/9")[0])
    assert sent == {"dateScrap": "2025-05-01", "jobNumber": "WO-1", "remarks": None}
    assert len(backend.calls("GET", "/radio-conventional")) == 1
    assert ctrl.rows == [{"id": 10}]


@pytest.mark.asyncio
async def test_scrap_requires_date(backend):
    with pytest.raises(ValidationFailed) as exc_info:
        await get_controller("radio-trunking").scrap(9, {"dateScrap": " "})
    assert exc_info.value.field == "dateScrap"
    assert backend.requests == []


@pytest.mark.asyncio
async def test_export_uses_current_filters(backend):
    backend.route("GET", "/radio-trunking/export", b"unitNumber,radioId\nU1,R1\n")
    ctrl = get_controller("radio-trunking")
    ctrl.update_query(filters={"status": "Active"})

    content = await ctrl.export_csv()

    assert content == b"unitNumber,radioId\nU1,R1\n"
    assert backend.requests[-1].url.params["status"] == "Active"


@pytest.mark.asyncio
async def test_import_uploads_file_then_relists(backend):
    backend.route("POST", "/radio-grafir/import",
                  {"data": {"success": 3, "failed": 1, "errors": ["Row 2: missing asset"]}})
    backend.route("GET", "/radio-grafir", _page([]))

    result = await get_controller("radio-grafir").import_csv("grafir.csv", b"noAsset\nA1\n")

    assert result.success == 3
    assert result.failed == 1
    assert result.errors == ("Row 2: missing asset",)
    upload = backend.calls("POST", "/radio-grafir/import")[0]
    assert b'name="file"' in upload.content
    assert b'filename="grafir.csv"' in upload.content
    assert len(backend.calls("GET", "/radio-grafir")) == 1


# -- HTTP surface -------------------------------------------------------------


@pytest.mark.asyncio
async def test_history_endpoint(client, backend):
    backend.route("GET", "/radio-conventional/4/history", [
        {"id": 2, "radioId": 4, "changeType": "StatusChange", "changedAt": "2025-02-01"},
    ])

    resp = await client.get("/api/v1/resources/radio-conventional/4/history")

    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == 4
    assert data["history"][0]["change_type"] == "StatusChange"


@pytest.mark.asyncio
async def test_unsupported_action_is_404(client):
    resp = await client.get("/api/v1/resources/radio-grafir/4/history")
    assert resp.status_code == 404
    resp = await client.get("/api/v1/resources/swr-sites/export")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_scrap_endpoint(client, backend):
    backend.route("POST", "/radio-scrap/from-trunking/7", {"data": {"id": 12}})
    backend.route("GET", "/radio-trunking", _page([]))

    resp = await client.post("/api/v1/resources/radio-trunking/7/scrap",
                             json={"dateScrap": "2025-06-01", "remarks": "Water damage"})

    assert resp.status_code == 200
    assert resp.json()["scrapped"] == {"id": 12}
    assert resp.json()["list"]["resource"] == "radio-trunking"

    resp = await client.post("/api/v1/resources/radio-trunking/7/scrap", json={})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_csv_endpoints(client, backend):
    backend.route("GET", "/radio-scrap/export", b"serialNumber\nS1\n")
    backend.route("GET", "/radio-trunking/template", b"unitNumber,radioId\n")
    backend.route("POST", "/radio-trunking/import", {"data": {"success": 1, "failed": 0, "errors": []}})
    backend.route("GET", "/radio-trunking", _page([]))

    resp = await client.get("/api/v1/resources/radio-scrap/export")
    assert resp.status_code == 200
    assert resp.content == b"serialNumber\nS1\n"
    assert 'filename="radio_scrap_' in resp.headers["content-disposition"]

    resp = await client.get("/api/v1/resources/radio-trunking/template")
    assert resp.status_code == 200
    assert "radio_trunking_template.csv" in resp.headers["content-disposition"]

    resp = await client.post("/api/v1/resources/radio-trunking/import",
                             params={"filename": "units.xlsx"}, content=b"x")
    assert resp.status_code == 400

    resp = await client.post("/api/v1/resources/radio-trunking/import",
                             params={"filename": "units.csv"}, content=b"unitNumber\nU1\n")
    assert resp.status_code == 200
    assert resp.json()["imported"] == {"success": 1, "failed": 0, "errors": []}
