# api/assignments/views.py
from fastapi import APIRouter, status

from core.deps import AdminPrincipal, CurrentPrincipal, Workspace
from core.errors import AssetSyncError
from sync.commands import AssignmentCreate
from sync.view_models import AssignmentView
from api.assets.models import AssignmentResponse
from api.errors import to_http_error

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.get(
    "",
    response_model=list[AssignmentView],
    summary="List assignments (admins see all, employees their own)",
)
async def list_assignments_endpoint(
    current_user: CurrentPrincipal,
    workspace: Workspace,
) -> list[AssignmentView]:
    assignments = list(workspace.cache.assignments)
    if not current_user.is_admin():
        assignments = [a for a in assignments if a.user_id == current_user.user_id]
    return assignments


@router.post(
    "",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign an asset to a user",
)
async def create_assignment_endpoint(
    payload: AssignmentCreate,
    admin: AdminPrincipal,
    workspace: Workspace,
) -> AssignmentResponse:
    """
    Records the assignment and then updates the asset's assignee.

    A 409 with `partial: true` means the assignment exists but the asset was
    not updated; retrying would create a second assignment.
    """
    try:
        result = await workspace.create_assignment(payload, actor_id=admin.user_id)
    except AssetSyncError as exc:
        raise to_http_error(exc) from exc
    return AssignmentResponse(assignment=result.assignment, asset=result.asset)


@router.post(
    "/{assignment_id}/return",
    response_model=AssignmentResponse,
    summary="Close an assignment and free the asset",
)
async def return_assignment_endpoint(
    assignment_id: str,
    admin: AdminPrincipal,
    workspace: Workspace,
) -> AssignmentResponse:
    try:
        result = await workspace.return_assignment(assignment_id, actor_id=admin.user_id)
    except AssetSyncError as exc:
        raise to_http_error(exc) from exc
    return AssignmentResponse(assignment=result.assignment, asset=result.asset)
