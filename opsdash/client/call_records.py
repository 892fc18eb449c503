"""Call record statistics endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from opsdash.core.models import (
    FleetContact,
    FleetStatistics,
    FleetStatisticType,
    SortOrder,
    TopCalled,
    TopCaller,
)
from opsdash.core.pagination import unwrap_list

if TYPE_CHECKING:
    from opsdash.client.base import BackendClient

PREFIX = "/api/call-records"


def _parse_top_caller(data: dict) -> TopCaller:
    return TopCaller(
        rank=int(data.get("rank", 0)),
        caller_fleet=data.get("callerFleet", ""),
        total_calls=int(data.get("totalCalls", 0)),
        total_duration_seconds=int(data.get("totalDurationSeconds", 0)),
        total_duration_formatted=data.get("totalDurationFormatted", ""),
        average_duration_seconds=float(data.get("averageDurationSeconds", 0)),
        average_duration_formatted=data.get("averageDurationFormatted", ""),
        unique_called_fleets=int(data.get("uniqueCalledFleets", 0)),
    )


def _parse_top_called(data: dict) -> TopCalled:
    return TopCalled(
        rank=int(data.get("rank", 0)),
        called_fleet=data.get("calledFleet", ""),
        total_calls=int(data.get("totalCalls", 0)),
        total_duration_seconds=int(data.get("totalDurationSeconds", 0)),
        total_duration_formatted=data.get("totalDurationFormatted", ""),
        average_duration_seconds=float(data.get("averageDurationSeconds", 0)),
        average_duration_formatted=data.get("averageDurationFormatted", ""),
        unique_callers=int(data.get("uniqueCallers", 0)),
    )


def parse_fleet_statistics(data: Any) -> FleetStatistics:
    data = data if isinstance(data, dict) else {}
    return FleetStatistics(
        date=data.get("date", ""),
        top_callers=[_parse_top_caller(c) for c in data.get("topCallers") or []],
        top_called_fleets=[_parse_top_called(c) for c in data.get("topCalledFleets") or []],
        total_calls=int(data.get("totalCallsInDay", 0)),
        total_duration_seconds=int(data.get("totalDurationInDaySeconds", 0)),
        total_duration_formatted=data.get("totalDurationInDayFormatted", ""),
        total_unique_callers=int(data.get("totalUniqueCallers", 0)),
        total_unique_called_fleets=int(data.get("totalUniqueCalledFleets", 0)),
    )


def _parse_contact(data: dict, fleet_key: str) -> FleetContact:
    return FleetContact(
        fleet=data.get(fleet_key, ""),
        call_count=int(data.get("callCount", 0)),
        total_duration_seconds=int(data.get("totalDurationSeconds", 0)),
        total_duration_formatted=data.get("totalDurationFormatted", ""),
    )


class CallRecordApi:
    def __init__(self, client: BackendClient) -> None:
        self._client = client

    async def fleet_statistics(
        self,
        start_date: str,
        end_date: str,
        top: int = 10,
        type: FleetStatisticType = FleetStatisticType.ALL,
        sort_order: SortOrder = SortOrder.DESC,
        caller_filter: str | None = None,
        called_filter: str | None = None,
    ) -> FleetStatistics:
        params: dict[str, Any] = {
            "startDate": start_date,
            "endDate": end_date,
            "top": top,
            "sortOrder": sort_order.value,
        }
        if type is not FleetStatisticType.ALL:
            params["type"] = type.value
        if caller_filter:
            params["callerFleet"] = caller_filter
        if called_filter:
            params["calledFleet"] = called_filter

        payload = await self._client.get(f"{PREFIX}/fleet-statistics", params=params)
        data = payload.get("data") if isinstance(payload, dict) else None
        return parse_fleet_statistics(data)

    async def unique_callers_for_fleet(self, called_fleet: str, start_date: str, end_date: str) -> list[FleetContact]:
        payload = await self._client.get(
            f"{PREFIX}/fleet-statistics/unique-callers",
            params={"calledFleet": called_fleet, "startDate": start_date, "endDate": end_date},
        )
        return [_parse_contact(r, "callerFleet") for r in unwrap_list(payload) if isinstance(r, dict)]

    async def unique_called_fleets_for_caller(self, caller_fleet: str, start_date: str, end_date: str) -> list[FleetContact]:
        payload = await self._client.get(
            f"{PREFIX}/fleet-statistics/unique-called-fleets",
            params={"callerFleet": caller_fleet, "startDate": start_date, "endDate": end_date},
        )
        return [_parse_contact(r, "calledFleet") for r in unwrap_list(payload) if isinstance(r, dict)]
