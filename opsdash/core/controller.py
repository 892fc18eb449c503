"""Resource list controller.

One controller instance owns one resource collection: the current query
(page, page size, search text, filters, sort), the rows of the current
page and the pagination metadata. Any change to the query triggers a fresh
fetch. Create/update/delete each re-run the list on success.

Rows are cleared before every fetch; a failed fetch leaves them empty and
records the error message instead of showing stale data.
"""

from __future__ import annotations

from dataclasses import asdict, replace
from typing import TYPE_CHECKING, Any

import structlog

from opsdash.core.errors import BackendError, ConfirmationRequired, OpsdashError
from opsdash.core.models import ListQuery, LoadState, PageInfo
from opsdash.core.pagination import parse_page

if TYPE_CHECKING:
    from opsdash.client.base import BackendClient
    from opsdash.core.resources import ResourceSpec

log = structlog.get_logger()

_QUERY_FIELDS = ("page", "page_size", "search", "sort_by", "sort_dir")


class ResourceListController:
    """Fetches and mutates one paginated backend collection."""

    def __init__(self, spec: ResourceSpec, client: BackendClient, page_size: int = 10) -> None:
        self.spec = spec
        self._client = client
        self.query = ListQuery(page_size=page_size)
        self.state = LoadState.IDLE
        self.rows: list[dict] = []
        self.page_info = PageInfo(page_size=page_size)
        self.error: str | None = None
        self._generation = 0

    def update_query(self, **changes: Any) -> bool:
        """Apply query changes. Returns True when the query actually changed.

        Accepts the ListQuery fields plus ``filters`` (merged; None removes a
        filter). Changing anything but the page sends the view back to page 1.
        """
        query = replace(self.query, filters=dict(self.query.filters))
        filters = changes.pop("filters", None) or {}
        for key, value in filters.items():
            if key not in self.spec.filters:
                continue
            if value is None or value == "":
                query.filters.pop(key, None)
            else:
                query.filters[key] = value
        for key, value in changes.items():
            if key in _QUERY_FIELDS and value is not None:
                setattr(query, key, value)

        if query == self.query:
            return False
        if "page" not in changes:
            query.page = 1
        self.query = query
        return True

    async def refresh(self) -> list[dict]:
        """Fetch the current page for the current query."""
        self._generation += 1
        generation = self._generation
        query = self.query

        self.state = LoadState.LOADING
        self.rows = []
        self.error = None

        try:
            payload = await self._client.get(self.spec.path, params=query.to_params())
        except OpsdashError as exc:
            if generation != self._generation:
                log.debug("stale_response_dropped", resource=self.spec.name,
                          generation=generation)
                return self.rows
            self.state = LoadState.ERROR
            self.error = exc.message or f"Failed to load {self.spec.label} data"
            self.page_info = PageInfo(page_size=query.page_size)
            log.warning("resource_list_failed", resource=self.spec.name, error=self.error)
            return self.rows

        if generation != self._generation:
            log.debug("stale_response_dropped", resource=self.spec.name,
                      generation=generation)
            return self.rows

        rows, page_info = parse_page(payload, query.page, query.page_size)
        self.rows = [r for r in rows if isinstance(r, dict)]
        self.page_info = page_info
        self.state = LoadState.LOADED
        log.info("resource_listed", resource=self.spec.name, page=page_info.current_page,
                 rows=len(self.rows), total=page_info.total_count)
        return self.rows

    async def list(self, **changes: Any) -> list[dict]:
        """Apply query changes (if any) and fetch."""
        if changes:
            self.update_query(**changes)
        return await self.refresh()

    async def create(self, payload: dict) -> Any:
        self.spec.validate_create(payload)
        result = await self._call("create", self._client.post(self.spec.path, json=payload))
        log.info("resource_created", resource=self.spec.name)
        await self.refresh()
        return result

    async def update(self, item_id: int, payload: dict) -> Any:
        body = self.spec.update_body(item_id, payload)
        path = self.spec.path if self.spec.id_in_body else self.spec.item_path(item_id)
        result = await self._call("update", self._client.put(path, json=body))
        log.info("resource_updated", resource=self.spec.name, id=item_id)
        await self.refresh()
        return result

    async def delete(self, item_id: int, confirmed: bool = False) -> None:
        if not confirmed:
            row = next((r for r in self.rows if r.get("id") == item_id), None)
            raise ConfirmationRequired(self.spec.confirm_prompt(row, item_id))
        await self._call("delete", self._client.delete(self.spec.item_path(item_id)))
        log.info("resource_deleted", resource=self.spec.name, id=item_id)
        await self.refresh()

    async def _call(self, action: str, coro: Any) -> Any:
        try:
            payload = await coro
        except BackendError as exc:
            log.warning("resource_action_failed", resource=self.spec.name,
                        action=action, status=exc.status, error=exc.message)
            raise
        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    def snapshot(self) -> dict:
        """Return a JSON-serializable view of the controller state."""
        return {
            "resource": self.spec.name,
            "state": self.state.value,
            "query": asdict(self.query),
            "rows": self.rows,
            "pagination": asdict(self.page_info),
            "error": self.error,
        }
