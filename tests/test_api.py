"""Tests for the HTTP surface."""

from __future__ import annotations

from datetime import date

import httpx
import pytest

import opsdash.main as main_module

PIVOT = "/api/swr-signal/yearly-pivot"
YEAR = date.today().year
YY = f"{YEAR % 100:02d}"


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert "uptime_seconds" in data
    assert data["backend_base_url"] == "http://backend.test"


@pytest.mark.asyncio
async def test_login_stores_session(client, backend):
    backend.route("POST", "/api/auth/login", {"data": {
        "token": "jwt-abc",
        "user": {"id": 4, "username": "rina"},
        "permissions": ["letter.view", "callrecord.view"],
    }})

    resp = await client.post("/api/v1/session/login", json={"username": "rina", "password": "pw"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["authenticated"] is True
    assert data["user"]["username"] == "rina"
    assert data["default_route"] == "/letter-numbers"
    assert main_module.get_session().token == "jwt-abc"
    assert backend.body(backend.requests[-1]) == {"username": "rina", "password": "pw"}


@pytest.mark.asyncio
async def test_login_with_bad_envelope(client, backend):
    backend.route("POST", "/api/auth/login", {"token": "flat"})
    resp = await client.post("/api/v1/session/login", json={"username": "rina", "password": "pw"})
    assert resp.status_code == 502
    assert resp.json()["error"] == "Invalid response structure from server"
    assert main_module.get_session().token is None


@pytest.mark.asyncio
async def test_login_requires_username(client, backend):
    resp = await client.post("/api/v1/session/login", json={"password": "pw"})
    assert resp.status_code == 422
    assert resp.json()["field"] == "username"
    assert backend.requests == []


@pytest.mark.asyncio
async def test_logout_clears_session(client, grant):
    grant("dashboard.view")
    resp = await client.post("/api/v1/session/logout")
    assert resp.status_code == 200
    data = resp.json()
    assert data["authenticated"] is False
    assert data["permissions"] == []
    assert data["default_route"] == "/profile"


@pytest.mark.asyncio
async def test_navigation_filtered(client, grant):
    grant("letter.view")
    resp = await client.get("/api/v1/navigation")
    ids = [s["id"] for s in resp.json()["sections"]]
    assert "letter-numbers" in ids
    assert "admin" not in ids


@pytest.mark.asyncio
async def test_route_check(client, grant):
    grant("docs.view")

    resp = await client.get("/api/v1/routes/check", params={"path": "/docs"})
    assert resp.status_code == 200
    assert resp.json()["allowed"] is True

    resp = await client.get("/api/v1/routes/check", params={"path": "/callrecords"},
                            follow_redirects=False)
    assert resp.status_code == 307
    assert resp.headers["location"] == "/docs"
    assert resp.json()["required"] == "callrecord.view"

    resp = await client.get("/api/v1/routes/default")
    assert resp.json() == {"route": "/docs"}


@pytest.mark.asyncio
async def test_resource_list_guarded(client, grant, backend):
    grant("docs.view")
    resp = await client.get("/api/v1/resources/companies", follow_redirects=False)
    assert resp.status_code == 307
    assert resp.headers["location"] == "/docs"
    assert backend.requests == []


@pytest.mark.asyncio
async def test_resource_list_with_filters(client, grant, backend):
    grant("letter.view")
    backend.route("GET", "/api/letter-numbers", {
        "data": [{"id": 1, "formattedNumber": "001/ABC/2025"}],
        "page": 1, "pageSize": 10, "totalCount": 1, "totalPages": 1,
    })

    resp = await client.get("/api/v1/resources/letter-numbers",
                            params={"search": "abc", "companyId": "3", "unknown": "x"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["state"] == "loaded"
    assert data["rows"][0]["formattedNumber"] == "001/ABC/2025"
    assert data["pagination"]["total_count"] == 1
    params = backend.requests[-1].url.params
    assert params["search"] == "abc"
    assert params["companyId"] == "3"
    assert "unknown" not in params
    assert backend.requests[-1].headers["Authorization"] == "Bearer tok-123"


@pytest.mark.asyncio
async def test_unknown_resource(client):
    resp = await client.get("/api/v1/resources/nope")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_resource_create_validation(client, grant, backend):
    grant("letter.view")
    resp = await client.post("/api/v1/resources/letter-numbers",
                             json={"companyId": 1, "documentTypeId": 0, "subject": "s", "recipient": "r"})
    assert resp.status_code == 422
    assert resp.json()["field"] == "documentTypeId"
    assert backend.requests == []


@pytest.mark.asyncio
async def test_resource_delete_needs_confirm(client, backend):
    backend.route("DELETE", "/radio-trunking/5", None, status=204)
    backend.route("GET", "/radio-trunking", [])

    resp = await client.delete("/api/v1/resources/radio-trunking/5")
    assert resp.status_code == 409
    assert "prompt" in resp.json()

    resp = await client.delete("/api/v1/resources/radio-trunking/5", params={"confirm": "true"})
    assert resp.status_code == 200
    assert resp.json()["deleted"] == 5


@pytest.mark.asyncio
async def test_backend_unreachable_maps_to_503(client, backend):
    def down(request):
        raise httpx.ConnectError("refused", request=request)

    backend.route("POST", "/radio-scrap", handler=down)
    resp = await client.post("/api/v1/resources/radio-scrap",
                             json={"scrapCategory": "Trunking", "dateScrap": "2025-02-01"})
    assert resp.status_code == 503
    assert "Cannot reach the server" in resp.json()["error"]


@pytest.mark.asyncio
async def test_fleet_statistics_guarded(client, grant):
    grant("letter.view")
    resp = await client.get("/api/v1/fleet-statistics", follow_redirects=False)
    assert resp.status_code == 307
    assert resp.headers["location"] == "/letter-numbers"


@pytest.mark.asyncio
async def test_fleet_statistics(client, grant, backend):
    grant("callrecord.view")
    backend.route("GET", "/api/call-records/fleet-statistics", {"data": {
        "topCallers": [{"rank": 1, "callerFleet": "DT-1", "totalCalls": 3}],
        "topCalledFleets": [],
        "totalCallsInDay": 3,
    }})

    resp = await client.get("/api/v1/fleet-statistics",
                            params={"start_date": "2025-01-01", "end_date": "2025-01-31", "top": 5})

    assert resp.status_code == 200
    data = resp.json()
    assert data["statistics"]["top_callers"][0]["caller_fleet"] == "DT-1"
    assert data["query"]["top_n"] == 5
    assert backend.requests[-1].url.params["top"] == "5"


@pytest.mark.asyncio
async def test_fleet_statistics_rejects_inverted_range(client, grant):
    grant("callrecord.view")
    resp = await client.get("/api/v1/fleet-statistics",
                            params={"start_date": "2025-02-01", "end_date": "2025-01-01"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_swr_pivot_and_note(client, backend):
    backend.route("GET", PIVOT, {"data": [{
        "channelName": "CH1", "siteName": "Hill", "siteType": "Trunking",
        "expectedSwrMax": 1.5, "monthlyVswr": {f"Jan-{YY}": 1.2}, "monthlyFpwr": {},
    }]})
    backend.route("GET", "/api/swr-signal/sites", {"data": [{"id": 1, "name": "Hill", "type": "Trunking"}]})
    backend.route("GET", "/api/swr-signal/channels", [{"id": 7, "channelName": "CH1", "swrSiteName": "Hill"}])
    backend.route("GET", "/api/swr-signal/histories", {"data": [], "totalPages": 1, "totalCount": 0})
    backend.route("POST", "/api/swr-signal/histories", {"data": {"id": 1}})

    resp = await client.get("/api/v1/swr/pivot")
    assert resp.status_code == 200
    data = resp.json()
    assert data["year"] == YEAR
    assert len(data["months"]) == 12
    assert data["rows"][0]["status"][f"Jan-{YY}"]["vswr"] == "good"
    assert data["charts"]["pie"]["no_data"] == 11
    assert data["sites"][0]["name"] == "Hill"

    resp = await client.put("/api/v1/swr/pivot/notes",
                            json={"channel": "CH1", "month": f"Feb-{YY}", "text": "Antenna check"})
    assert resp.status_code == 200
    assert resp.json()["notes"] == {f"Feb-{YY}": "Antenna check"}

    resp = await client.put("/api/v1/swr/pivot/notes",
                            json={"channel": "CH1", "month": f"Feb-{YY}", "text": ""})
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_swr_pivot_bad_site_type(client, backend):
    backend.route("GET", PIVOT, [])
    resp = await client.get("/api/v1/swr/pivot", params={"site_type": "Satellite"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_swr_pivot_site_selection_can_be_cleared(client, backend):
    def row(channel, site):
        return {"channelName": channel, "siteName": site, "siteType": "Trunking",
                "expectedSwrMax": 1.5, "monthlyVswr": {}, "monthlyFpwr": {}}

    backend.route("GET", PIVOT, [row("CH1", "Hill"), row("CH2", "Hill"), row("CH3", "Port")])
    backend.route("GET", "/api/swr-signal/sites", [])

    resp = await client.get("/api/v1/swr/pivot", params={"year": 2025, "sites": "Hill"})
    assert resp.json()["total_rows"] == 2

    resp = await client.get("/api/v1/swr/pivot", params={"year": 2025})
    assert resp.json()["total_rows"] == 2

    resp = await client.get("/api/v1/swr/pivot", params={"year": 2025, "sites": ""})
    data = resp.json()
    assert data["total_rows"] == 3
    assert data["filters"]["site_names"] == []


@pytest.mark.asyncio
async def test_swr_import_and_export(client, backend):
    backend.route("POST", "/api/swr-signal/import-pivot-excel",
                  {"data": {"success": False, "errors": ["Row 4: unknown channel"], "message": "Failed"}})
    backend.route("GET", "/api/swr-signal/export-yearly-excel", b"PK\x03\x04")

    resp = await client.post("/api/v1/swr/import", params={"filename": "pivot.xlsx"}, content=b"PK\x03\x04")
    assert resp.status_code == 200
    assert resp.json()["errors"] == ["Row 4: unknown channel"]

    resp = await client.post("/api/v1/swr/import", params={"filename": "pivot.csv"}, content=b"a,b")
    assert resp.status_code == 400

    backend.route("GET", PIVOT, [])
    resp = await client.get("/api/v1/swr/export", params={"year": 2024, "site": "Hill"})
    assert resp.status_code == 200
    assert resp.content == b"PK\x03\x04"
    assert "SWR_Pivot_2024_Hill.xlsx" in resp.headers["content-disposition"]


@pytest.mark.asyncio
async def test_scrap_yearly_summary(client, backend):
    backend.route("GET", "/radio-scrap/yearly-summary", {"data": {
        "year": 2025,
        "trunking": {"total": 5, "monthly": [1, 0, 4]},
        "conventional": {"total": 2, "monthly": [0, 2, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0]},
        "grandTotal": 7,
    }})

    resp = await client.get("/api/v1/radio-scrap/yearly-summary", params={"year": 2025})

    assert resp.status_code == 200
    data = resp.json()
    assert data["grand_total"] == 7
    assert len(data["chart"]) == 12
    assert data["chart"][2] == {"month": "Mar", "trunking": 4, "conventional": 0}
    assert data["chart"][11]["trunking"] == 0
