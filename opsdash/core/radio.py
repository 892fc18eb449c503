"""Radio inventory list controller.

The radio screens are plain resource lists with extra actions on top.
Which of them a collection offers comes from the flags of its ResourceSpec.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from opsdash.core.controller import ResourceListController
from opsdash.core.errors import ValidationFailed
from opsdash.core.models import RadioHistoryEntry, RadioImportResult
from opsdash.core.resources import non_blank

if TYPE_CHECKING:
    from opsdash.client.base import BackendClient
    from opsdash.client.radio import RadioInventoryApi, RadioScrapApi
    from opsdash.core.resources import ResourceSpec

log = structlog.get_logger()

_check_scrap_date = non_blank("dateScrap", "Scrap date")


class RadioListController(ResourceListController):
    def __init__(
        self,
        spec: ResourceSpec,
        client: BackendClient,
        inventory: RadioInventoryApi,
        scrap_api: RadioScrapApi,
        page_size: int = 10,
    ) -> None:
        super().__init__(spec, client, page_size=page_size)
        self._inventory = inventory
        self._scrap_api = scrap_api

    def supports(self, action: str) -> bool:
        spec = self.spec
        return {
            "history": spec.history,
            "scrap": spec.scrap_category is not None,
            "export": spec.csv_export,
            "import": spec.csv_import,
        }.get(action, False)

    def _require(self, action: str) -> None:
        if not self.supports(action):
            raise ValidationFailed(f"{self.spec.label} does not support {action}")

    async def history(self, radio_id: int) -> list[RadioHistoryEntry]:
        self._require("history")
        return await self._inventory.history(radio_id)

    async def scrap(self, radio_id: int, payload: dict) -> Any:
        """Move one radio into the scrap register, then re-list."""
        self._require("scrap")
        _check_scrap_date(payload)
        body = {
            "dateScrap": payload["dateScrap"],
            "jobNumber": payload.get("jobNumber") or None,
            "remarks": payload.get("remarks") or None,
        }
        result = await self._call(
            "scrap", self._scrap_api.scrap_from(self.spec.scrap_category, radio_id, body),
        )
        log.info("radio_scrapped", resource=self.spec.name, id=radio_id)
        await self.refresh()
        return result

    async def export_csv(self) -> bytes:
        """The collection as CSV, filtered like the current list."""
        self._require("export")
        return await self._inventory.export_csv(self.query.to_params())

    async def template(self) -> bytes:
        self._require("import")
        return await self._inventory.template()

    async def import_csv(self, filename: str, content: bytes) -> RadioImportResult:
        self._require("import")
        result = await self._inventory.import_csv(filename, content)
        log.info("radio_imported", resource=self.spec.name, filename=filename,
                 success=result.success, failed=result.failed)
        await self.refresh()
        return result
