# sync/commands.py
"""
Write payloads accepted by the mutation orchestrator.

Enumerated columns are typed with the closed enums so an unknown value is
rejected here, before a remote write is attempted. The remote store still
validates everything itself.
"""
from datetime import date
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.errors import ValidationFailedError
from db_models.enums import AssetStatus, DeviceType, RequestType


class AssetCreate(BaseModel):
    """Register a new asset."""
    model_config = ConfigDict(extra="forbid")

    device_type: DeviceType
    brand: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    serial_number: str = Field(..., min_length=1, max_length=100)
    status: AssetStatus = AssetStatus.ACTIVE
    location: str | None = Field(None, max_length=255)
    assigned_to: str | None = None
    purchase_price: float | None = Field(None, ge=0)
    purchase_date: date | None = None
    warranty_expiry: date | None = None
    maintenance_due: date | None = None
    notes: str | None = None
    qr_code: str | None = None

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class AssetUpdate(BaseModel):
    """Partial update; only fields that were sent are written, nulls included."""
    model_config = ConfigDict(extra="forbid")

    device_type: DeviceType | None = None
    brand: str | None = Field(None, min_length=1, max_length=100)
    model: str | None = Field(None, min_length=1, max_length=100)
    serial_number: str | None = Field(None, min_length=1, max_length=100)
    status: AssetStatus | None = None
    location: str | None = Field(None, max_length=255)
    assigned_to: str | None = None
    purchase_price: float | None = Field(None, ge=0)
    purchase_date: date | None = None
    warranty_expiry: date | None = None
    maintenance_due: date | None = None
    notes: str | None = None

    def to_row(self) -> dict[str, Any]:
        row = self.model_dump(mode="json", exclude_unset=True)
        # Required columns cannot be cleared
        for key in ("device_type", "brand", "model", "serial_number", "status"):
            if key in row and row[key] is None:
                row.pop(key)
        return row


class AssignmentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    asset_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    assigned_by: str | None = None


class RequestCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    request_type: RequestType
    description: str = Field(..., min_length=1)
    asset_id: str | None = None


class NotificationCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: str = Field(..., min_length=1, max_length=50)
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    user_id: str | None = None
    asset_id: str | None = None


M = TypeVar("M", bound=BaseModel)


def validate(model: type[M], data: Any) -> M:
    """
    Coerce caller input into a command model.

    Raises:
        ValidationFailedError: input outside the accepted shape or value sets
    """
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        errors = [
            {"loc": [str(part) for part in err["loc"]], "msg": err["msg"], "type": err["type"]}
            for err in exc.errors()
        ]
        summary = "; ".join(f"{'.'.join(e['loc']) or 'body'}: {e['msg']}" for e in errors)
        raise ValidationFailedError(f"Invalid {model.__name__}: {summary}", errors) from exc
