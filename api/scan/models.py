# api/scan/models.py
"""
Pydantic models for scanning and "my assets" endpoints.
"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from sync.view_models import EnrichedAsset, LocalAsset


class ScanRequest(BaseModel):
    payload: str = Field(..., description="Raw string read from the QR code")


class ScanResponse(BaseModel):
    found: bool
    # asset_id / tag / unrecognized
    identity: str
    key: str
    asset: EnrichedAsset


class LocalCacheResponse(BaseModel):
    """`persisted` is False when device storage refused the write."""
    persisted: bool
    assets: list[LocalAsset]


class RegisteredScanResponse(BaseModel):
    asset: EnrichedAsset
    persisted_locally: bool


class MyAssetItem(EnrichedAsset):
    """Remote or local asset in the merged "my assets" list."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    is_local: bool = Field(default=False, alias="isLocal")
    scanned_at: datetime | None = Field(default=None, alias="scannedAt")
    local_id: str | None = Field(default=None, alias="localId")
