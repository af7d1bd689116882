# api/requests/views.py
"""
Employee asset requests and their approval.
"""
from fastapi import APIRouter, Query, status

from core.deps import AdminPrincipal, CurrentPrincipal, Workspace
from core.errors import AssetSyncError
from sync.commands import RequestCreate
from sync.view_models import AssetRequestView
from api.errors import to_http_error

router = APIRouter(prefix="/requests", tags=["requests"])


@router.get(
    "",
    response_model=list[AssetRequestView],
    summary="List requests (admins see all, employees their own)",
)
async def list_requests_endpoint(
    current_user: CurrentPrincipal,
    workspace: Workspace,
    status_filter: str | None = Query(None, alias="status"),
) -> list[AssetRequestView]:
    requests = list(workspace.cache.requests)
    if not current_user.is_admin():
        requests = [r for r in requests if r.user_id == current_user.user_id]
    if status_filter:
        requests = [r for r in requests if r.status == status_filter]
    return requests


@router.post(
    "",
    response_model=AssetRequestView,
    status_code=status.HTTP_201_CREATED,
    summary="File an asset request",
)
async def create_request_endpoint(
    payload: RequestCreate,
    current_user: CurrentPrincipal,
    workspace: Workspace,
) -> AssetRequestView:
    try:
        return await workspace.create_request(payload, user_id=current_user.user_id)
    except AssetSyncError as exc:
        raise to_http_error(exc) from exc


@router.post(
    "/{request_id}/approve",
    response_model=AssetRequestView,
    summary="Approve a pending request",
)
async def approve_request_endpoint(
    request_id: str,
    admin: AdminPrincipal,
    workspace: Workspace,
) -> AssetRequestView:
    try:
        return await workspace.approve_request(request_id, actor_id=admin.user_id)
    except AssetSyncError as exc:
        raise to_http_error(exc) from exc


@router.post(
    "/{request_id}/decline",
    response_model=AssetRequestView,
    summary="Decline a pending request",
)
async def decline_request_endpoint(
    request_id: str,
    admin: AdminPrincipal,
    workspace: Workspace,
) -> AssetRequestView:
    try:
        return await workspace.decline_request(request_id, actor_id=admin.user_id)
    except AssetSyncError as exc:
        raise to_http_error(exc) from exc
