# api/sync/views.py
from fastapi import APIRouter
from pydantic import BaseModel

from core.deps import AdminPrincipal, CurrentPrincipal, Workspace

router = APIRouter(prefix="/sync", tags=["sync"])


class SyncStatus(BaseModel):
    loading: bool
    last_error: str | None = None
    assets: int
    refreshed: bool | None = None


@router.get("/status", response_model=SyncStatus, summary="Sync cache state")
async def sync_status_endpoint(
    current_user: CurrentPrincipal,
    workspace: Workspace,
) -> SyncStatus:
    return SyncStatus(
        loading=workspace.loading,
        last_error=workspace.cache.last_error,
        assets=len(workspace.cache.assets),
    )


@router.post("/refresh", response_model=SyncStatus, summary="Reload every collection")
async def refresh_endpoint(
    admin: AdminPrincipal,
    workspace: Workspace,
) -> SyncStatus:
    """A failed reload keeps the previous data and reports `last_error`."""
    refreshed = await workspace.refresh()
    return SyncStatus(
        loading=workspace.loading,
        last_error=workspace.cache.last_error,
        assets=len(workspace.cache.assets),
        refreshed=refreshed,
    )
