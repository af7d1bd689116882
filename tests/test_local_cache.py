import json
from datetime import datetime, timezone

from sync.local_cache import JsonFileStorage, LocalScanCache, MemoryStorage, new_local_id
from sync.view_models import enrich, placeholder_asset

SCANNED_AT = datetime(2025, 6, 15, 8, tzinfo=timezone.utc)


def _asset(serial, **overrides):
    row = {
        "id": f"id-{serial}",
        "device_type": "monitor",
        "brand": "LG",
        "model": "27UL850",
        "serial_number": serial,
        "status": "active",
    }
    row.update(overrides)
    return enrich(row)


def _cache(storage, ids=None):
    counter = iter(ids or [f"local_{n}" for n in range(1, 100)])
    return LocalScanCache(storage, clock=lambda: SCANNED_AT, id_factory=lambda now: next(counter))


def test_new_local_id_shape():
    local_id = new_local_id(SCANNED_AT)
    prefix, millis, suffix = local_id.split("_")
    assert prefix == "local"
    assert millis == str(int(SCANNED_AT.timestamp() * 1000))
    assert len(suffix) == 9


def test_upsert_and_list_per_user():
    storage = MemoryStorage()
    cache = _cache(storage)
    assert cache.upsert("u1", _asset("SN-1")) is True
    assert cache.upsert("u2", _asset("SN-2")) is True

    mine = cache.list_for("u1")
    assert [a.serial_number for a in mine] == ["SN-1"]
    assert mine[0].is_local
    assert mine[0].local_id == "local_1"
    assert mine[0].scanned_at == SCANNED_AT
    assert cache.list_for("nobody") == []

    stored = json.loads(storage.items["scannedAssets"])
    assert set(stored) == {"u1", "u2"}


def test_upsert_same_serial_replaces_in_place():
    cache = _cache(MemoryStorage())
    cache.upsert("u1", _asset("SN-1", location="Desk 1"))
    cache.upsert("u1", _asset("SN-2"))
    cache.upsert("u1", _asset("SN-1", location="Desk 9"))

    items = cache.list_for("u1")
    assert [a.serial_number for a in items] == ["SN-1", "SN-2"]
    assert items[0].location == "Desk 9"
    # The entry keeps the id it got on first scan
    assert items[0].local_id == "local_1"


def test_remove_and_clear():
    cache = _cache(MemoryStorage())
    cache.upsert("u1", _asset("SN-1"))
    cache.upsert("u1", _asset("SN-2"))
    cache.upsert("u2", _asset("SN-3"))

    assert cache.remove("u1", "local_1") is True
    assert [a.serial_number for a in cache.list_for("u1")] == ["SN-2"]
    assert cache.remove("u1", "does-not-exist") is True
    assert cache.remove("ghost", "local_2") is True

    assert cache.clear("u1") is True
    assert cache.list_for("u1") == []
    assert [a.serial_number for a in cache.list_for("u2")] == ["SN-3"]


def test_quota_exceeded_keeps_session_copy():
    storage = MemoryStorage(quota_bytes=10)
    cache = _cache(storage)

    assert cache.upsert("u1", _asset("SN-1")) is False
    assert "scannedAssets" not in storage.items
    # Still served for the rest of the session
    assert [a.serial_number for a in cache.list_for("u1")] == ["SN-1"]


def test_disabled_storage_never_raises():
    storage = MemoryStorage(disabled=True)
    cache = _cache(storage)
    assert cache.list_for("u1") == []
    assert cache.upsert("u1", placeholder_asset("RAW-1")) is False
    assert [a.serial_number for a in cache.list_for("u1")] == ["RAW-1"]
    assert cache.clear("u1") is False


def test_corrupt_storage_reads_as_empty():
    storage = MemoryStorage()
    storage.items["scannedAssets"] = "{not json"
    cache = _cache(storage)
    assert cache.list_for("u1") == []
    assert cache.upsert("u1", _asset("SN-1")) is True
    assert json.loads(storage.items["scannedAssets"])["u1"][0]["serial_number"] == "SN-1"


def test_malformed_records_are_skipped():
    storage = MemoryStorage()
    good = _cache(MemoryStorage())
    good.upsert("u1", _asset("SN-1"))
    record = good.list_for("u1")[0].to_storage()
    storage.items["scannedAssets"] = json.dumps({"u1": [{"serial_number": "half"}, record]})

    assert [a.serial_number for a in _cache(storage).list_for("u1")] == ["SN-1"]


def test_json_file_storage_survives_restart(tmp_path):
    first = _cache(JsonFileStorage(tmp_path / "store"))
    first.upsert("u1", _asset("SN-1"))

    assert (tmp_path / "store" / "scannedAssets.json").exists()
    second = _cache(JsonFileStorage(tmp_path / "store"))
    assert [a.serial_number for a in second.list_for("u1")] == ["SN-1"]


def test_json_file_storage_write_failure(tmp_path):
    blocker = tmp_path / "store"
    blocker.write_text("a file, not a directory")
    cache = _cache(JsonFileStorage(blocker))
    assert cache.upsert("u1", _asset("SN-1")) is False
    assert [a.serial_number for a in cache.list_for("u1")] == ["SN-1"]


def test_non_object_records_do_not_break_writes():
    good = _cache(MemoryStorage())
    good.upsert("u2", _asset("SN-2"))
    record = good.list_for("u2")[0].to_storage()
    storage = MemoryStorage()
    storage.items["scannedAssets"] = json.dumps({"u1": [1, "x", None], "u2": [record]})

    cache = _cache(storage)
    assert cache.upsert("u1", _asset("SN-1")) is True
    assert [a.serial_number for a in cache.list_for("u1")] == ["SN-1"]
    assert cache.remove("u2", "nope") is True
    assert [a.serial_number for a in cache.list_for("u2")] == ["SN-2"]

    bare = MemoryStorage()
    bare.items["scannedAssets"] = json.dumps({"u1": [1]})
    assert _cache(bare).remove("u1", "local_1") is True
    assert json.loads(bare.items["scannedAssets"]) == {"u1": []}


def test_upsert_recomputes_display_fields():
    cache = _cache(MemoryStorage())
    forged = _asset("SN-1").model_copy(
        update={"name": "Forged", "category": "printer", "value": 999.0, "assignee": "someone"}
    )
    cache.upsert("u1", forged)

    stored = cache.list_for("u1")[0]
    assert stored.name == "LG 27UL850"
    assert stored.category == "monitor"
    assert stored.value == 0
    assert stored.assignee == "Unassigned"


def test_rescan_moves_scanned_at_forward():
    first = datetime(2025, 6, 15, 8, tzinfo=timezone.utc)
    second = datetime(2025, 6, 15, 9, 30, tzinfo=timezone.utc)
    times = iter([first, second])
    counter = iter(["local_1", "local_2"])
    cache = LocalScanCache(MemoryStorage(), clock=lambda: next(times), id_factory=lambda now: next(counter))

    cache.upsert("u1", _asset("SN-1"))
    assert cache.list_for("u1")[0].scanned_at == first
    cache.upsert("u1", _asset("SN-1", location="Desk 4"))

    items = cache.list_for("u1")
    assert len(items) == 1
    assert items[0].scanned_at == second
    assert items[0].local_id == "local_1"
    assert items[0].location == "Desk 4"
