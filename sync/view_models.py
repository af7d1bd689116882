# sync/view_models.py
"""
Read models built from raw remote rows.

Every row entering the sync layer passes through one of the projections
below, so no consumer ever sees a raw row. The projections are pure: no
I/O and no clock.
"""
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = structlog.get_logger(__name__)

UNASSIGNED = "Unassigned"
UNKNOWN_CATEGORY = "unknown"

ASSET_FIELDS = (
    "id",
    "device_type",
    "brand",
    "model",
    "serial_number",
    "status",
    "assigned_to",
    "location",
    "purchase_price",
    "purchase_date",
    "warranty_expiry",
    "maintenance_due",
    "notes",
    "qr_code",
    "created_at",
    "updated_at",
)


class EnrichedAsset(BaseModel):
    """Remote asset row plus the display fields every screen uses."""
    model_config = ConfigDict(frozen=True)

    id: str | None = None
    device_type: str
    brand: str
    model: str
    serial_number: str
    status: str
    assigned_to: str | None = None
    location: str | None = None
    purchase_price: float | None = None
    purchase_date: date | None = None
    warranty_expiry: date | None = None
    maintenance_due: date | None = None
    notes: str | None = None
    qr_code: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # Derived
    name: str
    category: str
    assignee: str
    value: float
    last_updated: datetime | None = None

    @property
    def is_assigned(self) -> bool:
        return bool(self.assigned_to)


class LocalAsset(EnrichedAsset):
    """Scanned asset kept in the device-local store, not confirmed remotely."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    is_local: bool = Field(default=True, alias="isLocal")
    scanned_at: datetime = Field(alias="scannedAt")
    local_id: str = Field(alias="localId")

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class AssetRequestView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    asset_id: str | None = None
    request_type: str
    description: str
    status: str
    requested_at: datetime | None = None
    processed_at: datetime | None = None
    processed_by: str | None = None


class AssignmentView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    asset_id: str
    user_id: str
    assigned_by: str
    status: str
    assigned_at: datetime | None = None
    returned_at: datetime | None = None


class NotificationView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    title: str
    message: str
    is_read: bool = False
    user_id: str | None = None
    asset_id: str | None = None
    created_at: datetime | None = None
    timestamp: datetime | None = None


class ActivityEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    action: str
    details: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime | None = None
    type: str
    asset_id: str | None = None
    user_id: str | None = None


# ---------- Projections ----------

def enrich(row: Mapping[str, Any]) -> EnrichedAsset:
    """
    Project a raw asset row into its read model.

    Raises:
        ValidationError: row lacks a required column or carries a bad value
    """
    values = {key: row.get(key) for key in ASSET_FIELDS}
    name = " ".join(str(part).strip() for part in (values["brand"], values["model"]) if part)

    return EnrichedAsset(
        **values,
        name=name,
        category=values["device_type"],
        assignee=values["assigned_to"] or UNASSIGNED,
        value=values["purchase_price"] or 0,
        last_updated=values["updated_at"] or values["created_at"],
    )


def placeholder_asset(key: str) -> EnrichedAsset:
    """Stand-in for a scanned code with no matching remote row."""
    return enrich(
        {
            "id": None,
            "device_type": UNKNOWN_CATEGORY,
            "brand": "Unknown",
            "model": "Asset",
            "serial_number": key,
            "status": "active",
            "notes": f"Scanned code: {key}",
        }
    )


def to_local_asset(asset: EnrichedAsset, *, local_id: str, scanned_at: datetime) -> LocalAsset:
    """Derived fields are recomputed from the source columns, never copied."""
    values = enrich({key: getattr(asset, key) for key in ASSET_FIELDS}).model_dump()
    return LocalAsset(**values, is_local=True, scanned_at=scanned_at, local_id=local_id)


def parse_request(row: Mapping[str, Any]) -> AssetRequestView:
    return AssetRequestView.model_validate(dict(row))


def parse_assignment(row: Mapping[str, Any]) -> AssignmentView:
    return AssignmentView.model_validate(dict(row))


def parse_notification(row: Mapping[str, Any]) -> NotificationView:
    values = dict(row)
    values["is_read"] = bool(values.get("is_read"))
    values["timestamp"] = values.get("created_at")
    return NotificationView.model_validate(values)


_ACTIVITY_SUBJECTS = ("asset", "assignment", "request", "notification")


def activity_type(action: str) -> str:
    subject = action.split("_", 1)[0]
    return subject if subject in _ACTIVITY_SUBJECTS else "system"


def parse_activity(row: Mapping[str, Any]) -> ActivityEntry:
    values = dict(row)
    values["details"] = values.get("details") or {}
    values["type"] = activity_type(values.get("action") or "")
    return ActivityEntry.model_validate(values)


T = TypeVar("T")


def parse_rows(rows: Iterable[Mapping[str, Any]], parser: Callable[[Mapping[str, Any]], T]) -> list[T]:
    """Apply a projection to every row, skipping rows it rejects."""
    parsed: list[T] = []
    for row in rows:
        try:
            parsed.append(parser(row))
        except (ValidationError, TypeError, ValueError) as exc:
            logger.warning(
                "malformed_row_skipped",
                parser=getattr(parser, "__name__", repr(parser)),
                row_id=row.get("id") if isinstance(row, Mapping) else None,
                error=str(exc),
            )
    return parsed


def enrich_many(rows: Iterable[Mapping[str, Any]]) -> list[EnrichedAsset]:
    return parse_rows(rows, enrich)
