# api/assets/views.py
"""
Asset registry endpoints: reads come from the sync cache, writes go through
the mutation orchestrator.
"""
from fastapi import APIRouter, HTTPException, Query, Response, status

from core.deps import AdminPrincipal, CurrentPrincipal, Workspace
from core.errors import AssetSyncError
from sync.commands import AssetCreate, AssetUpdate
from sync.view_models import EnrichedAsset
from api.errors import to_http_error
from .models import QRCodeResponse

router = APIRouter(prefix="/assets", tags=["assets"])


@router.get(
    "",
    response_model=list[EnrichedAsset],
    summary="List assets from the sync cache",
)
async def list_assets_endpoint(
    current_user: CurrentPrincipal,
    workspace: Workspace,
    status_filter: str | None = Query(None, alias="status", description="Only assets with this status"),
    category: str | None = Query(None, description="Only assets of this category"),
) -> list[EnrichedAsset]:
    assets = list(workspace.cache.assets)
    if status_filter:
        assets = [a for a in assets if a.status == status_filter]
    if category:
        assets = [a for a in assets if a.category == category]
    return assets


@router.get(
    "/{asset_id}",
    response_model=EnrichedAsset,
    summary="Get one asset",
)
async def get_asset_endpoint(
    asset_id: str,
    current_user: CurrentPrincipal,
    workspace: Workspace,
) -> EnrichedAsset:
    asset = workspace.cache.find_asset(asset_id)
    if asset is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Asset {asset_id} not found",
        )
    return asset


@router.post(
    "",
    response_model=EnrichedAsset,
    status_code=status.HTTP_201_CREATED,
    summary="Register an asset",
)
async def create_asset_endpoint(
    payload: AssetCreate,
    admin: AdminPrincipal,
    workspace: Workspace,
) -> EnrichedAsset:
    try:
        return await workspace.create_asset(payload, actor_id=admin.user_id)
    except AssetSyncError as exc:
        raise to_http_error(exc) from exc


@router.patch(
    "/{asset_id}",
    response_model=EnrichedAsset,
    summary="Update status, assignee, location or details of an asset",
)
async def update_asset_endpoint(
    asset_id: str,
    payload: AssetUpdate,
    admin: AdminPrincipal,
    workspace: Workspace,
) -> EnrichedAsset:
    try:
        return await workspace.update_asset(asset_id, payload, actor_id=admin.user_id)
    except AssetSyncError as exc:
        raise to_http_error(exc) from exc


@router.delete(
    "/{asset_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an asset",
)
async def delete_asset_endpoint(
    asset_id: str,
    admin: AdminPrincipal,
    workspace: Workspace,
) -> Response:
    try:
        await workspace.delete_asset(asset_id, actor_id=admin.user_id)
    except AssetSyncError as exc:
        raise to_http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{asset_id}/qr",
    response_model=QRCodeResponse,
    summary="Payload to render into the asset's QR code",
)
async def asset_qr_endpoint(
    asset_id: str,
    current_user: CurrentPrincipal,
    workspace: Workspace,
) -> QRCodeResponse:
    return QRCodeResponse(asset_id=asset_id, payload=workspace.generate_qr_code(asset_id))
