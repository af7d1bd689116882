import json

import pytest

from sync.qr_codec import ByAssetId, ByTag, Unrecognized
from sync.view_models import UNKNOWN_CATEGORY

from conftest import ADMIN_ID, EMPLOYEE_ID, OTHER_EMPLOYEE_ID, asset_payload


@pytest.mark.anyio
async def test_scan_by_namespaced_id(workspace):
    asset = await workspace.create_asset(asset_payload("SN-1"))

    result = await workspace.scan_decode(workspace.generate_qr_code(asset.id))
    assert result.found
    assert result.identity == ByAssetId(asset.id)
    assert result.asset.id == asset.id


@pytest.mark.anyio
async def test_scan_by_stored_tag(workspace):
    asset = await workspace.create_asset(asset_payload("SN-1"))

    result = await workspace.scan_decode(asset.qr_code)
    assert result.found
    assert isinstance(result.identity, ByTag)
    assert result.asset.serial_number == "SN-1"


@pytest.mark.anyio
async def test_scan_json_label(workspace):
    asset = await workspace.create_asset(asset_payload("SN-1"))
    label = json.dumps({"id": asset.id, "serial": "SN-1", "generated": "2025-06-15"})

    result = await workspace.scan_decode(label)
    assert result.found
    assert result.asset.id == asset.id


@pytest.mark.anyio
@pytest.mark.parametrize(
    "payload",
    ["asset:no-such-id", "ASSET-1718000000000-NOPE", "https://vendor.example/p/123"],
)
async def test_unknown_codes_give_placeholder(workspace, payload):
    result = await workspace.scan_decode(payload)
    assert not result.found
    assert result.asset.id is None
    assert result.asset.category == UNKNOWN_CATEGORY
    assert result.asset.serial_number in payload


@pytest.mark.anyio
async def test_lookup_unrecognized_skips_the_store(workspace, gateway):
    assert await workspace.lookup(Unrecognized("whatever")) is None
    assert not [c for c in gateway.calls if c[0] in {"get", "find"}]


@pytest.mark.anyio
async def test_commit_scans_and_my_assets(workspace):
    assigned = await workspace.create_asset(asset_payload("SN-1"))
    await workspace.create_assignment({"asset_id": assigned.id, "user_id": EMPLOYEE_ID}, actor_id=ADMIN_ID)
    await workspace.create_asset(asset_payload("SN-2", assigned_to=OTHER_EMPLOYEE_ID))

    scanned = await workspace.scan_decode("QR1718000000000-foreign-2024")
    assert workspace.commit_scanned_asset(EMPLOYEE_ID, scanned.asset) is True
    # Re-scanning the same code does not duplicate it
    assert workspace.commit_scanned_asset(EMPLOYEE_ID, scanned.asset) is True

    mine = workspace.list_my_assets(EMPLOYEE_ID)
    assert [a.serial_number for a in mine] == ["SN-1", "QR1718000000000-foreign-2024"]
    assert not getattr(mine[0], "is_local", False)
    assert mine[1].is_local
    assert workspace.list_my_assets(OTHER_EMPLOYEE_ID)[0].serial_number == "SN-2"


@pytest.mark.anyio
async def test_my_assets_does_not_deduplicate_across_sources(workspace):
    asset = await workspace.create_asset(asset_payload("SN-1", assigned_to=EMPLOYEE_ID))
    workspace.commit_scanned_asset(EMPLOYEE_ID, asset)

    assert [a.serial_number for a in workspace.list_my_assets(EMPLOYEE_ID)] == ["SN-1", "SN-1"]


@pytest.mark.anyio
async def test_register_scanned_asset(workspace, storage):
    result = await workspace.register_scanned_asset(EMPLOYEE_ID, asset_payload("NEW-1"))
    assert result.persisted_locally
    assert workspace.cache.find_asset(result.asset.id) is not None
    assert [a.id for a in workspace.list_local_assets(EMPLOYEE_ID)] == [result.asset.id]

    storage.disabled = True
    result = await workspace.register_scanned_asset(EMPLOYEE_ID, asset_payload("NEW-2"))
    assert not result.persisted_locally
    assert workspace.cache.find_asset(result.asset.id) is not None
    assert len(workspace.list_local_assets(EMPLOYEE_ID)) == 2


@pytest.mark.anyio
async def test_remove_and_clear_local(workspace):
    scanned = await workspace.scan_decode("some-barcode")
    workspace.commit_scanned_asset(EMPLOYEE_ID, scanned.asset)
    local_id = workspace.list_local_assets(EMPLOYEE_ID)[0].local_id

    assert workspace.remove_local_asset(EMPLOYEE_ID, local_id)
    assert workspace.list_local_assets(EMPLOYEE_ID) == []

    workspace.commit_scanned_asset(EMPLOYEE_ID, scanned.asset)
    assert workspace.clear_local_assets(EMPLOYEE_ID)
    assert workspace.list_my_assets(EMPLOYEE_ID) == []


@pytest.mark.anyio
async def test_dashboard_getters_follow_the_cache(workspace):
    await workspace.create_asset(asset_payload("SN-1", assigned_to=EMPLOYEE_ID, purchase_date="2023-06-15"))
    await workspace.create_asset(asset_payload("SN-2", status="maintenance", warranty_expiry="2025-06-20"))
    await workspace.create_request({"request_type": "replacement", "description": "Broken"}, user_id=EMPLOYEE_ID)

    assert workspace.get_stats()["total"] == 2
    assert workspace.get_status_totals()["maintenance"] == 1
    assert workspace.get_category_stats() == [{"name": "laptop", "count": 2, "value": 2400.0}]
    assert workspace.get_utilization_rate() == pytest.approx(0.5)
    assert workspace.get_maintenance_rate() == pytest.approx(0.5)
    assert workspace.get_average_asset_age() == pytest.approx(731 / 365.25)
    assert [a.serial_number for a in workspace.get_upcoming_warranty_expiries()] == ["SN-2"]
    assert workspace.get_upcoming_warranty_expiries(window_days=1) == []
    assert [a.serial_number for a in workspace.get_overdue_maintenance_assets()] == ["SN-2"]
    assert len(workspace.get_recent_activity()) == 3
    assert len(workspace.get_recent_activity(limit=1)) == 1
    assert {t["task"] for t in workspace.get_upcoming_tasks()} == {
        "Warranty Renewals Due",
        "Maintenance Required",
        "Pending Assignment Requests",
    }
    assert workspace.get_assignment_stats() == {"active": 0, "pending": 0, "returned": 0}


@pytest.mark.anyio
async def test_refresh_picks_up_foreign_writes(workspace, remote):
    await remote.insert_row("assets", asset_payload("FOREIGN-1"))
    assert await workspace.refresh() is True
    assert [a.serial_number for a in workspace.cache.assets] == ["FOREIGN-1"]
    assert workspace.loading is False
