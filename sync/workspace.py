# sync/workspace.py
"""
Per-process facade over the sync layer.

Constructed once, passed by reference to whoever needs it (the FastAPI app
keeps it on ``app.state``). Lifecycle: ``init()`` subscribes and loads,
``refresh()`` reloads, ``dispose()`` stops listening and drops late results.
"""
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime

import structlog

from . import qr_codec, stats
from .cache import SyncCache
from .commands import AssetCreate, AssetUpdate, AssignmentCreate, NotificationCreate, RequestCreate
from .gateway import ASSETS, RemoteGateway
from .local_cache import LocalScanCache
from .mutations import AssignmentResult, MutationOrchestrator
from .qr_codec import ByAssetId, ByTag, ScanIdentity
from .view_models import (
    ActivityEntry,
    AssetRequestView,
    EnrichedAsset,
    LocalAsset,
    NotificationView,
    enrich,
    parse_rows,
    placeholder_asset,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ScanResult:
    payload: str
    identity: ScanIdentity
    asset: EnrichedAsset
    found: bool


@dataclass(frozen=True)
class RegisteredScan:
    asset: EnrichedAsset
    persisted_locally: bool


class AssetWorkspace:
    def __init__(
        self,
        gateway: RemoteGateway,
        local_cache: LocalScanCache,
        *,
        activity_window: int = 10,
        warranty_window_days: int = 30,
        clock: Callable[[], datetime] | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.gateway = gateway
        self.cache = SyncCache(gateway)
        self.local = local_cache
        if clock is None:
            self.mutations = MutationOrchestrator(gateway, self.cache)
        else:
            self.mutations = MutationOrchestrator(gateway, self.cache, clock=clock)
        self.activity_window = activity_window
        self.warranty_window_days = warranty_window_days
        self._today = today

    # --- Lifecycle ---

    @property
    def loading(self) -> bool:
        return self.cache.loading

    async def init(self) -> bool:
        return await self.cache.init()

    async def refresh(self) -> bool:
        return await self.cache.refresh()

    async def dispose(self) -> None:
        await self.cache.dispose()

    # --- Mutations ---

    async def create_asset(self, data: AssetCreate | dict, *, actor_id: str | None = None) -> EnrichedAsset:
        return await self.mutations.create_asset(data, actor_id=actor_id)

    async def update_asset(
        self, asset_id: str, patch: AssetUpdate | dict, *, actor_id: str | None = None
    ) -> EnrichedAsset:
        return await self.mutations.update_asset(asset_id, patch, actor_id=actor_id)

    async def delete_asset(self, asset_id: str, *, actor_id: str | None = None) -> None:
        await self.mutations.delete_asset(asset_id, actor_id=actor_id)

    async def create_assignment(
        self, data: AssignmentCreate | dict, *, actor_id: str | None = None
    ) -> AssignmentResult:
        return await self.mutations.create_assignment(data, actor_id=actor_id)

    async def return_assignment(self, assignment_id: str, *, actor_id: str | None = None) -> AssignmentResult:
        return await self.mutations.return_assignment(assignment_id, actor_id=actor_id)

    async def create_request(self, data: RequestCreate | dict, *, user_id: str) -> AssetRequestView:
        return await self.mutations.create_request(data, user_id=user_id)

    async def approve_request(self, request_id: str, *, actor_id: str | None = None) -> AssetRequestView:
        return await self.mutations.approve_request(request_id, actor_id=actor_id)

    async def decline_request(self, request_id: str, *, actor_id: str | None = None) -> AssetRequestView:
        return await self.mutations.decline_request(request_id, actor_id=actor_id)

    async def add_notification(
        self, data: NotificationCreate | dict, *, actor_id: str | None = None
    ) -> NotificationView:
        return await self.mutations.add_notification(data, actor_id=actor_id)

    async def mark_notification_read(
        self, notification_id: str, *, actor_id: str | None = None
    ) -> NotificationView:
        return await self.mutations.mark_notification_read(notification_id, actor_id=actor_id)

    # --- Stats ---

    def get_stats(self) -> dict:
        return stats.asset_stats(self.cache.assets)

    def get_status_totals(self) -> dict[str, int]:
        return stats.totals_by_status(self.cache.assets)

    def get_category_stats(self) -> list[dict]:
        return stats.totals_by_category(self.cache.assets)

    def get_utilization_rate(self) -> float:
        return stats.utilization_rate(self.cache.assets)

    def get_maintenance_rate(self) -> float:
        return stats.maintenance_rate(self.cache.assets)

    def get_average_asset_age(self) -> float:
        return stats.average_age_years(self.cache.assets, today=self._today())

    def get_upcoming_warranty_expiries(self, window_days: int | None = None) -> list[EnrichedAsset]:
        window = self.warranty_window_days if window_days is None else window_days
        return stats.upcoming_warranty_expirations(self.cache.assets, window, today=self._today())

    def get_overdue_maintenance_assets(self) -> list[EnrichedAsset]:
        return stats.overdue_maintenance(self.cache.assets, today=self._today())

    def get_recent_activity(self, limit: int | None = None) -> list[ActivityEntry]:
        return stats.recent_activity(self.cache.activity, self.activity_window if limit is None else limit)

    def get_upcoming_tasks(self) -> list[dict]:
        return stats.upcoming_tasks(
            self.cache.assets,
            self.cache.requests,
            self.warranty_window_days,
            today=self._today(),
        )

    def get_assignment_stats(self) -> dict:
        return stats.assignment_stats(self.cache.assignments)

    # --- QR scanning ---

    def generate_qr_code(self, asset_id: str) -> str:
        return qr_codec.encode(asset_id)

    async def lookup(self, identity: ScanIdentity) -> EnrichedAsset | None:
        """Resolve a classified payload against the remote store; None when absent."""
        if isinstance(identity, ByAssetId):
            row = await self.gateway.get_row(ASSETS, identity.asset_id)
            rows = [row] if row is not None else []
        elif isinstance(identity, ByTag):
            rows = await self.gateway.find_rows(ASSETS, "qr_code", identity.tag)
        else:
            return None
        assets = parse_rows(rows, enrich)
        return assets[0] if assets else None

    async def scan_decode(self, payload: str) -> ScanResult:
        """
        Classify a scanned payload and resolve it.

        Unknown and foreign codes yield a placeholder asset, never an error.
        """
        identity = qr_codec.classify(payload)
        asset = await self.lookup(identity)
        if asset is not None:
            logger.info("scan_resolved", asset_id=asset.id, identity=type(identity).__name__)
            return ScanResult(payload=payload, identity=identity, asset=asset, found=True)

        if isinstance(identity, ByAssetId):
            key = identity.asset_id
        elif isinstance(identity, ByTag):
            key = identity.tag
        else:
            key = identity.payload
        logger.info("scan_unresolved", identity=type(identity).__name__)
        return ScanResult(payload=payload, identity=identity, asset=placeholder_asset(key), found=False)

    # --- Local scan cache ---

    def list_local_assets(self, user_id: str) -> list[LocalAsset]:
        return self.local.list_for(user_id)

    def commit_scanned_asset(self, user_id: str, asset: EnrichedAsset) -> bool:
        return self.local.upsert(user_id, asset)

    def remove_local_asset(self, user_id: str, local_id: str) -> bool:
        return self.local.remove(user_id, local_id)

    def clear_local_assets(self, user_id: str) -> bool:
        return self.local.clear(user_id)

    async def register_scanned_asset(self, user_id: str, data: AssetCreate | dict) -> RegisteredScan:
        """
        Create the asset remotely, then keep it in the user's local scans.

        A local storage failure does not fail the registration.
        """
        asset = await self.create_asset(data, actor_id=user_id)
        persisted = self.local.upsert(user_id, asset)
        if not persisted:
            logger.warning("scan_registration_not_persisted", user_id=user_id, asset_id=asset.id)
        return RegisteredScan(asset=asset, persisted_locally=persisted)

    def list_my_assets(self, user_id: str) -> list[EnrichedAsset]:
        """
        Remote assets assigned to the user followed by the user's local scans.

        The two sides are not de-duplicated against each other.
        """
        remote = [asset for asset in self.cache.assets if asset.assigned_to == user_id]
        return remote + list(self.local.list_for(user_id))
