# sync/mutations.py
"""
Mutation orchestrator.

Every write is confirm-then-merge: the remote store is called first and the
cache only changes once the store has answered with the written row. A
rejected write leaves the cache exactly as it was.
"""
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from core.errors import PartialMultiStepFailure, RemoteWriteError, ValidationFailedError
from db_models.enums import AssignmentStatus, RequestStatus
from . import qr_codec
from .cache import SyncCache
from .commands import (
    AssetCreate,
    AssetUpdate,
    AssignmentCreate,
    NotificationCreate,
    RequestCreate,
    validate,
)
from .gateway import (
    ACTIVITY_LOG,
    ASSET_ASSIGNMENTS,
    ASSET_REQUESTS,
    ASSETS,
    NOTIFICATIONS,
    RemoteGateway,
)
from .view_models import (
    ActivityEntry,
    AssetRequestView,
    AssignmentView,
    EnrichedAsset,
    NotificationView,
    enrich,
    parse_activity,
    parse_assignment,
    parse_notification,
    parse_request,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AssignmentResult:
    assignment: AssignmentView
    asset: EnrichedAsset


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MutationOrchestrator:
    def __init__(
        self,
        gateway: RemoteGateway,
        cache: SyncCache,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._gateway = gateway
        self._cache = cache
        self._clock = clock

    async def _log_activity(
        self,
        action: str,
        actor_id: str | None,
        *,
        asset_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> ActivityEntry | None:
        """Append one activity entry; a failure here never undoes the write it describes."""
        row = {
            "action": action,
            "user_id": actor_id,
            "asset_id": asset_id,
            "details": details or {},
        }
        try:
            created = await self._gateway.insert_row(ACTIVITY_LOG, row)
        except RemoteWriteError as exc:
            logger.warning("activity_log_append_failed", action=action, error=exc.message)
            return None
        entry = parse_activity(created)
        self._cache.prepend("activity", entry)
        return entry

    # --- Assets ---

    async def create_asset(self, data: AssetCreate | dict, *, actor_id: str | None = None) -> EnrichedAsset:
        """
        Register an asset and prepend it to the cache.

        Raises:
            ValidationFailedError: before any remote call
            RemoteWriteError: store rejected the insert
        """
        payload = validate(AssetCreate, data)
        row = payload.to_row()
        if not row.get("qr_code"):
            row["qr_code"] = qr_codec.generate_tag(payload.serial_number, self._clock())

        created = await self._gateway.insert_row(ASSETS, row)
        asset = enrich(created)
        self._cache.prepend("assets", asset)
        logger.info("asset_created", asset_id=asset.id, serial_number=asset.serial_number)

        await self._log_activity(
            "asset_created",
            actor_id,
            asset_id=asset.id,
            details={"name": asset.name, "serial_number": asset.serial_number, "status": asset.status},
        )
        return asset

    async def update_asset(
        self, asset_id: str, patch: AssetUpdate | dict, *, actor_id: str | None = None
    ) -> EnrichedAsset:
        payload = validate(AssetUpdate, patch)
        row = payload.to_row()
        if not row:
            raise ValidationFailedError("Nothing to update")

        updated = await self._gateway.update_row(ASSETS, asset_id, row)
        asset = enrich(updated)
        self._cache.replace("assets", asset)
        logger.info("asset_updated", asset_id=asset_id, fields=sorted(row))

        await self._log_activity(
            "asset_updated",
            actor_id,
            asset_id=asset_id,
            details={"name": asset.name, "changes": row},
        )
        return asset

    async def delete_asset(self, asset_id: str, *, actor_id: str | None = None) -> None:
        previous = self._cache.find_asset(asset_id)

        await self._gateway.delete_row(ASSETS, asset_id)
        self._cache.remove("assets", asset_id)
        logger.info("asset_deleted", asset_id=asset_id)

        details = {"name": previous.name, "serial_number": previous.serial_number} if previous else {}
        await self._log_activity("asset_deleted", actor_id, asset_id=asset_id, details=details)

    # --- Assignments ---

    async def create_assignment(
        self, data: AssignmentCreate | dict, *, actor_id: str | None = None
    ) -> AssignmentResult:
        """
        Record an assignment, then point the asset's assignee at the user.

        These are two dependent writes, not one transaction.

        Raises:
            RemoteWriteError: the assignment insert failed (nothing written)
            PartialMultiStepFailure: assignment recorded, asset update failed
        """
        payload = validate(AssignmentCreate, data)
        assigned_by = payload.assigned_by or actor_id
        if not assigned_by:
            raise ValidationFailedError("assigned_by is required")

        created = await self._gateway.insert_row(
            ASSET_ASSIGNMENTS,
            {
                "asset_id": payload.asset_id,
                "user_id": payload.user_id,
                "assigned_by": assigned_by,
                "status": AssignmentStatus.ACTIVE.value,
            },
        )
        assignment = parse_assignment(created)
        self._cache.prepend("assignments", assignment)

        try:
            updated = await self._gateway.update_row(
                ASSETS, payload.asset_id, {"assigned_to": payload.user_id}
            )
        except RemoteWriteError as exc:
            logger.error(
                "assignment_partially_applied",
                assignment_id=assignment.id,
                asset_id=payload.asset_id,
                error=exc.message,
            )
            await self._log_activity(
                "assignment_created",
                actor_id,
                asset_id=payload.asset_id,
                details={"user_id": payload.user_id, "asset_update": "failed"},
            )
            raise PartialMultiStepFailure(
                f"Assignment recorded but asset update failed: {exc.message}",
                completed_step="assignment_insert",
                failed_step="asset_update",
                completed=assignment,
                cause=exc,
            ) from exc

        asset = enrich(updated)
        self._cache.replace("assets", asset)
        await self._log_activity(
            "assignment_created",
            actor_id,
            asset_id=asset.id,
            details={"user_id": payload.user_id, "assignment_id": assignment.id},
        )
        return AssignmentResult(assignment=assignment, asset=asset)

    async def return_assignment(self, assignment_id: str, *, actor_id: str | None = None) -> AssignmentResult:
        """Close an assignment and clear the asset's assignee (two writes)."""
        updated = await self._gateway.update_row(
            ASSET_ASSIGNMENTS,
            assignment_id,
            {"status": AssignmentStatus.RETURNED.value, "returned_at": self._clock().isoformat()},
        )
        assignment = parse_assignment(updated)
        self._cache.replace("assignments", assignment)

        try:
            asset_row = await self._gateway.update_row(ASSETS, assignment.asset_id, {"assigned_to": None})
        except RemoteWriteError as exc:
            await self._log_activity(
                "assignment_returned",
                actor_id,
                asset_id=assignment.asset_id,
                details={"assignment_id": assignment.id, "asset_update": "failed"},
            )
            raise PartialMultiStepFailure(
                f"Assignment closed but asset update failed: {exc.message}",
                completed_step="assignment_return",
                failed_step="asset_update",
                completed=assignment,
                cause=exc,
            ) from exc

        asset = enrich(asset_row)
        self._cache.replace("assets", asset)
        await self._log_activity(
            "assignment_returned",
            actor_id,
            asset_id=asset.id,
            details={"assignment_id": assignment.id, "user_id": assignment.user_id},
        )
        return AssignmentResult(assignment=assignment, asset=asset)

    # --- Requests ---

    async def create_request(self, data: RequestCreate | dict, *, user_id: str) -> AssetRequestView:
        payload = validate(RequestCreate, data)
        row = payload.model_dump(mode="json", exclude_none=True)
        row.update(user_id=user_id, status=RequestStatus.PENDING.value)

        created = await self._gateway.insert_row(ASSET_REQUESTS, row)
        request = parse_request(created)
        self._cache.prepend("requests", request)

        await self._log_activity(
            "request_created",
            user_id,
            asset_id=request.asset_id,
            details={"request_id": request.id, "request_type": request.request_type},
        )
        return request

    async def _process_request(
        self, request_id: str, status: RequestStatus, action: str, actor_id: str | None
    ) -> AssetRequestView:
        updated = await self._gateway.update_row(
            ASSET_REQUESTS,
            request_id,
            {
                "status": status.value,
                "processed_at": self._clock().isoformat(),
                "processed_by": actor_id,
            },
        )
        request = parse_request(updated)
        self._cache.replace("requests", request)
        await self._log_activity(
            action,
            actor_id,
            asset_id=request.asset_id,
            details={"request_id": request.id, "requested_by": request.user_id},
        )
        return request

    async def approve_request(self, request_id: str, *, actor_id: str | None = None) -> AssetRequestView:
        return await self._process_request(request_id, RequestStatus.APPROVED, "request_approved", actor_id)

    async def decline_request(self, request_id: str, *, actor_id: str | None = None) -> AssetRequestView:
        return await self._process_request(request_id, RequestStatus.DENIED, "request_declined", actor_id)

    # --- Notifications ---

    async def add_notification(
        self, data: NotificationCreate | dict, *, actor_id: str | None = None
    ) -> NotificationView:
        payload = validate(NotificationCreate, data)
        row = payload.model_dump(mode="json", exclude_none=True)
        row["is_read"] = False

        created = await self._gateway.insert_row(NOTIFICATIONS, row)
        notification = parse_notification(created)
        self._cache.prepend("notifications", notification)
        await self._log_activity(
            "notification_created",
            actor_id,
            asset_id=notification.asset_id,
            details={"notification_id": notification.id, "title": notification.title},
        )
        return notification

    async def mark_notification_read(
        self, notification_id: str, *, actor_id: str | None = None
    ) -> NotificationView:
        updated = await self._gateway.update_row(NOTIFICATIONS, notification_id, {"is_read": True})
        notification = parse_notification(updated)
        self._cache.replace("notifications", notification)
        await self._log_activity(
            "notification_read",
            actor_id,
            asset_id=notification.asset_id,
            details={"notification_id": notification.id},
        )
        return notification
