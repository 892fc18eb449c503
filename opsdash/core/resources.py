"""Resource descriptions for the list controllers.

Every CRUD screen of the dashboard follows the same pattern; what differs
is captured here: the backend path, which filters the list accepts, which
fields must be present before a create is sent, and which fields an update
may touch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from opsdash.core.errors import ValidationFailed

Check = Callable[[dict], None]


def non_blank(name: str, label: str | None = None) -> Check:
    def check(payload: dict) -> None:
        value = payload.get(name)
        if value is None or not str(value).strip():
            raise ValidationFailed(f"{label or name} is required", field=name)
    return check


def positive_id(name: str, label: str | None = None) -> Check:
    def check(payload: dict) -> None:
        try:
            value = int(payload.get(name) or 0)
        except (TypeError, ValueError):
            value = 0
        if value <= 0:
            raise ValidationFailed(f"Please select a {label or name}", field=name)
    return check


def one_of(name: str, allowed: tuple[str, ...]) -> Check:
    def check(payload: dict) -> None:
        if payload.get(name) not in allowed:
            raise ValidationFailed(f"{name} must be one of {', '.join(allowed)}", field=name)
    return check


def _notes_required_unless_active(payload: dict) -> None:
    status = payload.get("status", "Active")
    if status != "Active" and not str(payload.get("notes") or "").strip():
        raise ValidationFailed("Notes are required for non-Active status", field="notes")


@dataclass(frozen=True)
class ResourceSpec:
    name: str
    path: str
    label: str
    permission: str | None = None
    filters: tuple[str, ...] = ()
    create_checks: tuple[Check, ...] = ()
    update_checks: tuple[Check, ...] = ()
    update_fields: tuple[str, ...] = ()
    id_in_body: bool = False
    history: bool = False
    csv_export: bool = False
    csv_import: bool = False
    scrap_category: str | None = None
    describe: Callable[[dict], str] = field(default=lambda row: f"#{row.get('id')}")

    @property
    def radio_actions(self) -> bool:
        """True for the radio collections, which carry history, CSV and scrap calls."""
        return self.history or self.csv_export or self.csv_import or self.scrap_category is not None

    def item_path(self, item_id: int) -> str:
        return f"{self.path}/{item_id}"

    def validate_create(self, payload: dict) -> None:
        for check in self.create_checks:
            check(payload)

    def update_body(self, item_id: int, payload: dict) -> dict[str, Any]:
        """Restrict an update to the fields the form exposes."""
        for check in self.update_checks:
            check(payload)
        body = {k: payload[k] for k in self.update_fields if k in payload}
        if self.id_in_body:
            body["id"] = item_id
        return body

    def confirm_prompt(self, row: dict | None, item_id: int) -> str:
        what = self.describe(row) if row else f"#{item_id}"
        return f'Are you sure you want to delete {self.label} "{what}"? This action cannot be undone.'


_RADIO_TRUNKING_FIELDS = (
    "unitNumber", "dept", "fleet", "radioId", "serialNumber", "dateProgram",
    "radioType", "jobNumber", "status", "initiator", "firmware", "channelApply",
    "grafirId", "notes",
)
_RADIO_CONVENTIONAL_FIELDS = (
    "unitNumber", "radioId", "serialNumber", "dept", "fleet", "radioType",
    "frequency", "status", "grafirId", "notes",
)
_RADIO_GRAFIR_FIELDS = (
    "noAsset", "serialNumber", "typeRadio", "div", "dept", "fleetId", "tanggal", "status",
)
_RADIO_SCRAP_FIELDS = (
    "scrapCategory", "typeRadio", "serialNumber", "jobNumber", "dateScrap", "remarks",
)

RESOURCES: dict[str, ResourceSpec] = {spec.name: spec for spec in (
    ResourceSpec(
        name="companies",
        path="/api/companies",
        label="company",
        permission="letter.view",
        filters=("isActive",),
        create_checks=(non_blank("code", "Company code"), non_blank("name", "Company name")),
        update_checks=(non_blank("name", "Company name"),),
        update_fields=("name", "address", "isActive"),
        describe=lambda row: row.get("name") or row.get("code", ""),
    ),
    ResourceSpec(
        name="document-types",
        path="/api/document-types",
        label="document type",
        permission="letter.view",
        filters=("isActive",),
        create_checks=(non_blank("code", "Document type code"), non_blank("name", "Document type name")),
        update_checks=(non_blank("name", "Document type name"),),
        update_fields=("name", "description", "isActive"),
        describe=lambda row: row.get("name") or row.get("code", ""),
    ),
    ResourceSpec(
        name="letter-numbers",
        path="/api/letter-numbers",
        label="letter number",
        permission="letter.view",
        filters=("documentTypeId", "companyId", "status", "year", "month", "startDate", "endDate"),
        create_checks=(
            positive_id("companyId", "company"),
            positive_id("documentTypeId", "document type"),
            non_blank("subject", "Subject"),
            non_blank("recipient", "Recipient"),
        ),
        update_checks=(non_blank("subject", "Subject"), non_blank("recipient", "Recipient")),
        update_fields=("subject", "recipient", "attachmentUrl", "status"),
        describe=lambda row: row.get("formattedNumber", ""),
    ),
    ResourceSpec(
        name="radio-trunking",
        path="/radio-trunking",
        label="trunking radio",
        filters=("status", "dept", "fleet"),
        create_checks=(non_blank("unitNumber", "Unit number"), non_blank("radioId", "Radio ID")),
        update_fields=_RADIO_TRUNKING_FIELDS,
        history=True,
        csv_export=True,
        csv_import=True,
        scrap_category="Trunking",
        describe=lambda row: row.get("unitNumber", ""),
    ),
    ResourceSpec(
        name="radio-conventional",
        path="/radio-conventional",
        label="conventional radio",
        filters=("status", "dept", "fleet"),
        create_checks=(non_blank("unitNumber", "Unit number"), non_blank("radioId", "Radio ID")),
        update_fields=_RADIO_CONVENTIONAL_FIELDS,
        history=True,
        csv_export=True,
        csv_import=True,
        scrap_category="Conventional",
        describe=lambda row: row.get("unitNumber", ""),
    ),
    ResourceSpec(
        name="radio-grafir",
        path="/radio-grafir",
        label="grafir radio",
        filters=("status", "div", "dept"),
        create_checks=(non_blank("noAsset", "Asset number"), non_blank("serialNumber", "Serial number")),
        update_fields=_RADIO_GRAFIR_FIELDS,
        csv_export=True,
        csv_import=True,
        describe=lambda row: row.get("noAsset", ""),
    ),
    ResourceSpec(
        name="radio-scrap",
        path="/radio-scrap",
        label="scrap record",
        filters=("scrapCategory", "year", "startDate", "endDate"),
        create_checks=(
            one_of("scrapCategory", ("Trunking", "Conventional")),
            non_blank("dateScrap", "Scrap date"),
        ),
        update_checks=(one_of("scrapCategory", ("Trunking", "Conventional")),),
        update_fields=_RADIO_SCRAP_FIELDS,
        csv_export=True,
        describe=lambda row: row.get("serialNumber") or f"#{row.get('id')}",
    ),
    ResourceSpec(
        name="swr-sites",
        path="/api/swr-signal/sites",
        label="site",
        create_checks=(non_blank("name", "Site name"), one_of("type", ("Trunking", "Conventional"))),
        update_checks=(non_blank("name", "Site name"),),
        update_fields=("name", "location", "type"),
        id_in_body=True,
        describe=lambda row: row.get("name", ""),
    ),
    ResourceSpec(
        name="swr-channels",
        path="/api/swr-signal/channels",
        label="channel",
        create_checks=(non_blank("channelName", "Channel name"), positive_id("swrSiteId", "site")),
        update_checks=(non_blank("channelName", "Channel name"),),
        update_fields=("channelName", "swrSiteId", "expectedSwrMax", "expectedPwrMax"),
        id_in_body=True,
        describe=lambda row: row.get("channelName", ""),
    ),
    ResourceSpec(
        name="swr-histories",
        path="/api/swr-signal/histories",
        label="history record",
        filters=("swrChannelId", "swrSiteId", "siteType"),
        create_checks=(
            positive_id("swrChannelId", "valid channel"),
            non_blank("date", "Date"),
            _notes_required_unless_active,
        ),
        update_checks=(_notes_required_unless_active,),
        update_fields=("fpwr", "vswr", "notes", "status"),
        describe=lambda row: f"{row.get('channelName', '')} {row.get('date', '')}".strip(),
    ),
)}


def get_resource(name: str) -> ResourceSpec | None:
    return RESOURCES.get(name)
