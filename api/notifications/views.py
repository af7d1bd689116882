# api/notifications/views.py
from fastapi import APIRouter, HTTPException, status

from core.deps import AdminPrincipal, CurrentPrincipal, Workspace
from core.errors import AssetSyncError
from sync.commands import NotificationCreate
from sync.view_models import NotificationView
from api.errors import to_http_error

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _visible_to(notification: NotificationView, user_id: str, is_admin: bool) -> bool:
    if notification.user_id is None:
        return is_admin
    return notification.user_id == user_id


@router.get(
    "",
    response_model=list[NotificationView],
    summary="Notifications addressed to the caller",
)
async def list_notifications_endpoint(
    current_user: CurrentPrincipal,
    workspace: Workspace,
    unread_only: bool = False,
) -> list[NotificationView]:
    """Broadcast notifications (no recipient) are shown to admins."""
    items = [
        n for n in workspace.cache.notifications
        if _visible_to(n, current_user.user_id, current_user.is_admin())
    ]
    if unread_only:
        items = [n for n in items if not n.is_read]
    return items


@router.post(
    "",
    response_model=NotificationView,
    status_code=status.HTTP_201_CREATED,
    summary="Send a notification",
)
async def create_notification_endpoint(
    payload: NotificationCreate,
    admin: AdminPrincipal,
    workspace: Workspace,
) -> NotificationView:
    try:
        return await workspace.add_notification(payload, actor_id=admin.user_id)
    except AssetSyncError as exc:
        raise to_http_error(exc) from exc


@router.post(
    "/{notification_id}/read",
    response_model=NotificationView,
    summary="Mark a notification as read",
)
async def mark_read_endpoint(
    notification_id: str,
    current_user: CurrentPrincipal,
    workspace: Workspace,
) -> NotificationView:
    cached = next((n for n in workspace.cache.notifications if n.id == notification_id), None)
    if cached is not None and not _visible_to(cached, current_user.user_id, current_user.is_admin()):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions",
        )
    try:
        return await workspace.mark_notification_read(notification_id, actor_id=current_user.user_id)
    except AssetSyncError as exc:
        raise to_http_error(exc) from exc
