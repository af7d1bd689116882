# sync/local_cache.py
"""
Local Scan Cache: scanned assets kept on this device, keyed per user.

One storage entry holds a JSON object ``{user_id: [LocalAsset, ...]}``.
Every mutation re-reads the whole object, edits one user's partition and
writes the whole object back. Two processes sharing the same storage can
lose each other's updates (last writer wins); there is no locking.

This is a best-effort cache: storage failures come back as ``False`` and the
in-memory copy keeps serving the current session.
"""
import json
import os
import tempfile
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

import structlog

from core.errors import LocalPersistenceError
from .view_models import EnrichedAsset, LocalAsset, parse_rows, to_local_asset

logger = structlog.get_logger(__name__)

DEFAULT_KEY = "scannedAssets"


class KeyValueStorage(Protocol):
    """String key-value store. Implementations raise LocalPersistenceError."""

    def get_item(self, key: str) -> str | None:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    """In-process storage; `quota_bytes` and `disabled` simulate browser limits."""

    def __init__(self, quota_bytes: int | None = None, disabled: bool = False):
        self.items: dict[str, str] = {}
        self.quota_bytes = quota_bytes
        self.disabled = disabled

    def get_item(self, key: str) -> str | None:
        if self.disabled:
            raise LocalPersistenceError("storage is disabled")
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.disabled:
            raise LocalPersistenceError("storage is disabled")
        if self.quota_bytes is not None and len(value.encode("utf-8")) > self.quota_bytes:
            raise LocalPersistenceError(f"quota of {self.quota_bytes} bytes exceeded")
        self.items[key] = value


class JsonFileStorage:
    """One file per key under `directory`, replaced atomically on write."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise LocalPersistenceError(f"cannot read {path}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise LocalPersistenceError(f"cannot write {path}: {exc}") from exc


def new_local_id(now: datetime) -> str:
    return f"local_{int(now.timestamp() * 1000)}_{uuid.uuid4().hex[:9]}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocalScanCache:
    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = DEFAULT_KEY,
        *,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[datetime], str] = new_local_id,
    ):
        self._storage = storage
        self._key = key
        self._clock = clock
        self._new_id = id_factory
        self._memory: dict[str, list[dict[str, Any]]] = {}
        # Set while the in-memory copy holds changes storage refused
        self._unsaved = False

    def _load(self) -> dict[str, list[dict[str, Any]]]:
        if self._unsaved:
            return self._memory
        try:
            raw = self._storage.get_item(self._key)
            data = json.loads(raw) if raw else {}
            if not isinstance(data, dict):
                raise LocalPersistenceError(f"'{self._key}' does not hold a JSON object")
        except (LocalPersistenceError, json.JSONDecodeError) as exc:
            logger.warning("local_cache_read_failed", key=self._key, error=str(exc))
            return self._memory
        memory: dict[str, list[dict[str, Any]]] = {}
        for user_id, records in data.items():
            if not isinstance(records, list):
                continue
            kept = [rec for rec in records if isinstance(rec, dict)]
            if len(kept) != len(records):
                logger.warning(
                    "local_cache_records_dropped",
                    key=self._key,
                    user_id=user_id,
                    dropped=len(records) - len(kept),
                )
            memory[user_id] = kept
        self._memory = memory
        return self._memory

    def _persist(self, data: dict[str, list[dict[str, Any]]]) -> bool:
        self._memory = data
        try:
            self._storage.set_item(self._key, json.dumps(data))
        except LocalPersistenceError as exc:
            self._unsaved = True
            logger.warning("local_cache_persist_failed", key=self._key, error=str(exc))
            return False
        self._unsaved = False
        return True

    def list_for(self, user_id: str) -> list[LocalAsset]:
        records = self._load().get(user_id, [])
        return parse_rows(records, LocalAsset.model_validate)

    def upsert(self, user_id: str, asset: EnrichedAsset) -> bool:
        """
        Store a scanned asset for `user_id`, replacing any entry with the
        same serial number in place.

        Returns:
            False if the storage write failed (the session copy still changed)
        """
        data = self._load()
        partition = data.setdefault(user_id, [])
        now = self._clock()

        matches = [i for i, rec in enumerate(partition) if rec.get("serial_number") == asset.serial_number]
        local_id = None
        if matches:
            local_id = partition[matches[0]].get("localId")
        record = to_local_asset(
            asset,
            local_id=local_id or self._new_id(now),
            scanned_at=now,
        ).to_storage()

        if matches:
            position = matches[0]
            partition[:] = [rec for i, rec in enumerate(partition) if i not in matches[1:]]
            partition[position] = record
        else:
            partition.append(record)

        logger.debug("local_asset_upserted", user_id=user_id, serial_number=asset.serial_number,
                     replaced=bool(matches))
        return self._persist(data)

    def remove(self, user_id: str, local_id: str) -> bool:
        data = self._load()
        if user_id not in data:
            return True
        data[user_id] = [rec for rec in data[user_id] if rec.get("localId") != local_id]
        return self._persist(data)

    def clear(self, user_id: str) -> bool:
        data = self._load()
        data.pop(user_id, None)
        return self._persist(data)
