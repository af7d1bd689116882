from datetime import datetime, timezone

from sync.view_models import (
    UNASSIGNED,
    UNKNOWN_CATEGORY,
    activity_type,
    enrich,
    parse_activity,
    parse_notification,
    parse_rows,
    placeholder_asset,
    to_local_asset,
)


def _row(**overrides):
    row = {
        "id": "a-1",
        "device_type": "laptop",
        "brand": "Dell",
        "model": "Latitude 5520",
        "serial_number": "SN-1",
        "status": "active",
        "purchase_price": 999.5,
        "created_at": "2025-01-01T10:00:00+00:00",
        "updated_at": None,
    }
    row.update(overrides)
    return row


def test_enrich_derives_display_fields():
    asset = enrich(_row())
    assert asset.name == "Dell Latitude 5520"
    assert asset.category == "laptop"
    assert asset.assignee == UNASSIGNED
    assert asset.value == 999.5
    assert asset.last_updated == datetime(2025, 1, 1, 10, tzinfo=timezone.utc)
    assert not asset.is_assigned


def test_enrich_is_pure():
    row = _row(assigned_to="emp-1")
    before = dict(row)

    first = enrich(row)
    second = enrich(row)
    assert first == second
    assert first.model_dump() == second.model_dump()
    assert row == before


def test_enrich_assigned_and_missing_price():
    asset = enrich(_row(assigned_to="emp-7", purchase_price=None, updated_at="2025-02-01T00:00:00+00:00"))
    assert asset.assignee == "emp-7"
    assert asset.is_assigned
    assert asset.value == 0
    assert asset.last_updated == datetime(2025, 2, 1, tzinfo=timezone.utc)


def test_enrich_skips_blank_name_parts():
    assert enrich(_row(model="")).name == "Dell"


def test_placeholder_for_unknown_code():
    asset = placeholder_asset("XYZ-123")
    assert asset.id is None
    assert asset.category == UNKNOWN_CATEGORY
    assert asset.serial_number == "XYZ-123"
    assert asset.name == "Unknown Asset"
    assert "XYZ-123" in asset.notes


def test_local_asset_storage_uses_camel_case_markers():
    scanned = datetime(2025, 6, 1, tzinfo=timezone.utc)
    local = to_local_asset(enrich(_row()), local_id="local_1_abc", scanned_at=scanned)
    stored = local.to_storage()
    assert stored["isLocal"] is True
    assert stored["localId"] == "local_1_abc"
    assert stored["scannedAt"].startswith("2025-06-01")
    assert stored["serial_number"] == "SN-1"


def test_parse_rows_skips_malformed_rows():
    rows = [_row(), {"id": "broken"}, _row(id="a-2", serial_number="SN-2")]
    assets = parse_rows(rows, enrich)
    assert [a.id for a in assets] == ["a-1", "a-2"]


def test_notification_timestamp_mirrors_created_at():
    n = parse_notification({
        "id": "n-1", "type": "info", "title": "Hi", "message": "there",
        "is_read": 0, "created_at": "2025-01-01T00:00:00+00:00",
    })
    assert n.is_read is False
    assert n.timestamp == n.created_at


def test_activity_type_from_action():
    assert activity_type("asset_created") == "asset"
    assert activity_type("request_declined") == "request"
    assert activity_type("login") == "system"
    entry = parse_activity({"id": "l-1", "action": "assignment_created", "details": None})
    assert entry.type == "assignment"
    assert entry.details == {}
