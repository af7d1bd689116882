import asyncio

import pytest

from core.errors import RemoteGatewayError, RemoteWriteError
from sync.gateway import ACTIVITY_LOG, ASSETS, NOTIFICATIONS

from conftest import asset_payload


@pytest.mark.anyio
async def test_insert_returns_stored_row(remote):
    row = await remote.insert_row(ASSETS, {**asset_payload("SN-1"), "purchase_date": "2024-03-01"})
    assert row["id"]
    assert row["status"] == "active"
    assert row["purchase_date"] == "2024-03-01"
    assert row["created_at"]

    fetched = await remote.get_row(ASSETS, row["id"])
    assert fetched["serial_number"] == "SN-1"
    assert await remote.get_row(ASSETS, "missing") is None


@pytest.mark.anyio
async def test_list_rows_ordering_and_find(remote):
    for serial in ("B", "A", "C"):
        await remote.insert_row(ASSETS, asset_payload(serial, qr_code=f"tag-{serial}"))
    rows = await remote.list_rows(ASSETS, order_by="serial_number")
    assert [r["serial_number"] for r in rows] == ["A", "B", "C"]
    rows = await remote.list_rows(ASSETS, order_by="serial_number", descending=True)
    assert [r["serial_number"] for r in rows] == ["C", "B", "A"]

    found = await remote.find_rows(ASSETS, "qr_code", "tag-B")
    assert [r["serial_number"] for r in found] == ["B"]


@pytest.mark.anyio
async def test_update_and_delete(remote):
    row = await remote.insert_row(ASSETS, asset_payload("SN-1"))
    updated = await remote.update_row(ASSETS, row["id"], {"status": "maintenance", "location": "Lab"})
    assert updated["status"] == "maintenance"
    assert updated["location"] == "Lab"

    await remote.delete_row(ASSETS, row["id"])
    assert await remote.get_row(ASSETS, row["id"]) is None


@pytest.mark.anyio
async def test_missing_rows_report_not_found(remote):
    with pytest.raises(RemoteWriteError) as exc_info:
        await remote.update_row(ASSETS, "nope", {"location": "x"})
    assert exc_info.value.not_found

    with pytest.raises(RemoteWriteError) as exc_info:
        await remote.delete_row(NOTIFICATIONS, "nope")
    assert exc_info.value.not_found


@pytest.mark.anyio
async def test_rejected_writes(remote):
    with pytest.raises(RemoteWriteError):
        await remote.insert_row(ASSETS, asset_payload("SN-1", status="exploded"))
    with pytest.raises(RemoteWriteError):
        await remote.insert_row(ASSETS, asset_payload("SN-1", colour="red"))
    with pytest.raises(RemoteWriteError):
        await remote.insert_row(ASSETS, {"brand": "no serial"})


@pytest.mark.anyio
async def test_unknown_table(remote):
    with pytest.raises(RemoteGatewayError):
        await remote.list_rows("licenses")


@pytest.mark.anyio
async def test_activity_details_round_trip_as_json(remote):
    row = await remote.insert_row(ACTIVITY_LOG, {"action": "asset_created", "details": {"name": "Dell XPS"}})
    assert row["details"] == {"name": "Dell XPS"}
    assert row["timestamp"]


@pytest.mark.anyio
async def test_subscribers_notified_after_commit(remote):
    seen: list[str] = []
    unsubscribe = remote.subscribe(ASSETS, seen.append)

    await remote.insert_row(ASSETS, asset_payload("SN-1"))
    # Delivered on a later loop iteration, not inside the write
    assert seen == []
    await asyncio.sleep(0)
    assert seen == [ASSETS]

    unsubscribe()
    await remote.insert_row(ASSETS, asset_payload("SN-2"))
    await asyncio.sleep(0)
    assert seen == [ASSETS]
