# sync/cache.py
"""
Sync Cache: the in-memory mirror of the remote collections.

All five collections live in one immutable snapshot that is swapped in a
single assignment, so a reader never sees assets from one refresh next to
notifications from another. Refreshes are serialized; a queued refresh that
a later-started refresh already covers is skipped.
"""
import asyncio
import dataclasses
from dataclasses import dataclass
from typing import Any, Callable

import structlog

from core.errors import RemoteGatewayError
from . import gateway as tables
from .gateway import RemoteGateway, Unsubscribe
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
    parse_rows,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CacheSnapshot:
    assets: tuple[EnrichedAsset, ...] = ()
    requests: tuple[AssetRequestView, ...] = ()
    assignments: tuple[AssignmentView, ...] = ()
    notifications: tuple[NotificationView, ...] = ()
    activity: tuple[ActivityEntry, ...] = ()


@dataclass(frozen=True)
class _Collection:
    table: str
    attr: str
    parser: Callable[[dict[str, Any]], Any]
    order_by: str
    descending: bool = True


COLLECTIONS = (
    _Collection(tables.ASSETS, "assets", enrich, "created_at"),
    _Collection(tables.ASSET_REQUESTS, "requests", parse_request, "requested_at"),
    _Collection(tables.ASSET_ASSIGNMENTS, "assignments", parse_assignment, "assigned_at"),
    _Collection(tables.NOTIFICATIONS, "notifications", parse_notification, "created_at"),
    _Collection(tables.ACTIVITY_LOG, "activity", parse_activity, "timestamp"),
)

_ATTRS = {c.attr for c in COLLECTIONS}


class SyncCache:
    def __init__(self, gateway: RemoteGateway):
        self._gateway = gateway
        self._snapshot = CacheSnapshot()
        self._lock = asyncio.Lock()
        self._requested = 0
        self._covered = 0
        self._subscriptions: list[Unsubscribe] = []
        self._background: set[asyncio.Task] = set()
        self._disposed = False
        # Merges applied while a refresh is listing, replayed onto its result
        self._journal: list[Callable[[CacheSnapshot], CacheSnapshot]] | None = None
        self.loading = False
        self.last_error: str | None = None

    # --- Read side ---

    @property
    def snapshot(self) -> CacheSnapshot:
        return self._snapshot

    @property
    def assets(self) -> tuple[EnrichedAsset, ...]:
        return self._snapshot.assets

    @property
    def requests(self) -> tuple[AssetRequestView, ...]:
        return self._snapshot.requests

    @property
    def assignments(self) -> tuple[AssignmentView, ...]:
        return self._snapshot.assignments

    @property
    def notifications(self) -> tuple[NotificationView, ...]:
        return self._snapshot.notifications

    @property
    def activity(self) -> tuple[ActivityEntry, ...]:
        return self._snapshot.activity

    @property
    def disposed(self) -> bool:
        return self._disposed

    def find_asset(self, asset_id: str) -> EnrichedAsset | None:
        return next((a for a in self._snapshot.assets if a.id == asset_id), None)

    # --- Lifecycle ---

    async def init(self) -> bool:
        """Subscribe to every table and load the first snapshot."""
        if not self._subscriptions:
            for collection in COLLECTIONS:
                self._subscriptions.append(
                    self._gateway.subscribe(collection.table, self._on_remote_change)
                )
        return await self.refresh()

    async def dispose(self) -> None:
        """Stop listening; results of refreshes still in flight are dropped."""
        self._disposed = True
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions.clear()
        pending = list(self._background)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def _on_remote_change(self, table: str) -> None:
        if self._disposed:
            return
        logger.debug("remote_change_received", table=table)
        task = asyncio.ensure_future(self.refresh())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    # --- Refresh ---

    async def refresh(self) -> bool:
        """
        Re-list every collection and swap in a new snapshot.

        Writes confirmed while the listing is in flight are replayed onto the
        fetched data, so a refresh never rolls back a merge it raced with.

        Returns:
            False if the remote store failed or the cache was disposed;
            the previous snapshot is kept in both cases.
        """
        if self._disposed:
            return False

        self._requested += 1
        ticket = self._requested

        async with self._lock:
            if self._covered >= ticket:
                # A refresh that started after this request already ran
                return self.last_error is None
            started_at = self._requested
            self.loading = True
            self._journal = []
            try:
                fetched: dict[str, tuple] = {}
                for collection in COLLECTIONS:
                    rows = await self._gateway.list_rows(
                        collection.table,
                        order_by=collection.order_by,
                        descending=collection.descending,
                    )
                    fetched[collection.attr] = tuple(parse_rows(rows, collection.parser))
            except RemoteGatewayError as exc:
                self.last_error = exc.message
                logger.error("sync_refresh_failed", table=exc.table, error=exc.message)
                return False
            finally:
                self.loading = False
                journal, self._journal = self._journal, None

            if self._disposed:
                logger.debug("sync_refresh_discarded")
                return False

            snapshot = CacheSnapshot(**fetched)
            for merge in journal:
                snapshot = merge(snapshot)
            self._snapshot = snapshot
            self._covered = started_at
            self.last_error = None
            logger.debug("sync_refreshed", assets=len(snapshot.assets), replayed=len(journal))
            return True

    # --- Confirmed-write merges ---

    def _merge(self, attr: str, edit: Callable[[tuple], tuple]) -> None:
        if attr not in _ATTRS:
            raise KeyError(attr)
        if self._disposed:
            return

        def merge(snapshot: CacheSnapshot) -> CacheSnapshot:
            return dataclasses.replace(snapshot, **{attr: edit(getattr(snapshot, attr))})

        self._snapshot = merge(self._snapshot)
        if self._journal is not None:
            self._journal.append(merge)

    def prepend(self, attr: str, item: Any) -> None:
        self._merge(attr, lambda current: (item,) + tuple(x for x in current if x.id != item.id))

    def replace(self, attr: str, item: Any) -> None:
        def edit(current: tuple) -> tuple:
            if any(x.id == item.id for x in current):
                return tuple(item if x.id == item.id else x for x in current)
            return (item,) + current

        self._merge(attr, edit)

    def remove(self, attr: str, item_id: str) -> None:
        self._merge(attr, lambda current: tuple(x for x in current if x.id != item_id))
