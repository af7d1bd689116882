# api/scan/views.py
"""
QR scanning, the caller's local scan cache, and the merged "my assets" view.
"""
from fastapi import APIRouter, status

from core.deps import CurrentPrincipal, Workspace
from core.errors import AssetSyncError
from sync.commands import AssetCreate
from sync.qr_codec import ByAssetId, ByTag
from sync.view_models import EnrichedAsset, LocalAsset
from api.errors import to_http_error
from .models import (
    LocalCacheResponse,
    MyAssetItem,
    RegisteredScanResponse,
    ScanRequest,
    ScanResponse,
)

router = APIRouter(prefix="/scan", tags=["scan"])

# Merged view router
my_assets_router = APIRouter(prefix="/my-assets", tags=["scan"])


@router.post(
    "/decode",
    response_model=ScanResponse,
    summary="Resolve a scanned QR payload to an asset",
)
async def decode_scan_endpoint(
    payload: ScanRequest,
    current_user: CurrentPrincipal,
    workspace: Workspace,
) -> ScanResponse:
    """
    Known codes return the stored asset with `found = true`. Unknown or
    foreign codes return a placeholder asset (category "unknown") with
    `found = false`; that is not an error.
    """
    try:
        result = await workspace.scan_decode(payload.payload)
    except AssetSyncError as exc:
        raise to_http_error(exc) from exc

    identity = result.identity
    if isinstance(identity, ByAssetId):
        kind, key = "asset_id", identity.asset_id
    elif isinstance(identity, ByTag):
        kind, key = "tag", identity.tag
    else:
        kind, key = "unrecognized", identity.payload
    return ScanResponse(found=result.found, identity=kind, key=key, asset=result.asset)


@router.get(
    "/local",
    response_model=list[LocalAsset],
    summary="List the caller's locally kept scans",
)
async def list_local_endpoint(
    current_user: CurrentPrincipal,
    workspace: Workspace,
) -> list[LocalAsset]:
    return workspace.list_local_assets(current_user.user_id)


@router.post(
    "/local",
    response_model=LocalCacheResponse,
    summary="Keep a scanned asset in the caller's local scans",
)
async def commit_local_endpoint(
    asset: EnrichedAsset,
    current_user: CurrentPrincipal,
    workspace: Workspace,
) -> LocalCacheResponse:
    persisted = workspace.commit_scanned_asset(current_user.user_id, asset)
    return LocalCacheResponse(
        persisted=persisted,
        assets=workspace.list_local_assets(current_user.user_id),
    )


@router.delete(
    "/local/{local_id}",
    response_model=LocalCacheResponse,
    summary="Drop one local scan",
)
async def remove_local_endpoint(
    local_id: str,
    current_user: CurrentPrincipal,
    workspace: Workspace,
) -> LocalCacheResponse:
    persisted = workspace.remove_local_asset(current_user.user_id, local_id)
    return LocalCacheResponse(
        persisted=persisted,
        assets=workspace.list_local_assets(current_user.user_id),
    )


@router.delete(
    "/local",
    response_model=LocalCacheResponse,
    summary="Drop all of the caller's local scans",
)
async def clear_local_endpoint(
    current_user: CurrentPrincipal,
    workspace: Workspace,
) -> LocalCacheResponse:
    persisted = workspace.clear_local_assets(current_user.user_id)
    return LocalCacheResponse(persisted=persisted, assets=[])


@router.post(
    "/register",
    response_model=RegisteredScanResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a scanned asset remotely and keep it locally",
)
async def register_scan_endpoint(
    payload: AssetCreate,
    current_user: CurrentPrincipal,
    workspace: Workspace,
) -> RegisteredScanResponse:
    try:
        result = await workspace.register_scanned_asset(current_user.user_id, payload)
    except AssetSyncError as exc:
        raise to_http_error(exc) from exc
    return RegisteredScanResponse(asset=result.asset, persisted_locally=result.persisted_locally)


@my_assets_router.get(
    "",
    response_model=list[MyAssetItem],
    summary="Assets assigned to the caller plus their local scans",
)
async def my_assets_endpoint(
    current_user: CurrentPrincipal,
    workspace: Workspace,
) -> list[MyAssetItem]:
    return [
        MyAssetItem.model_validate(asset.model_dump(by_alias=True))
        for asset in workspace.list_my_assets(current_user.user_id)
    ]
