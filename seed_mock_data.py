"""
Seed Mock Data for the Asset Sync API
=====================================
Following the natural data flow of the application, every write goes
through the workspace so the activity log fills up the same way it does
in production:

1. ASSETS - The organization's devices are registered (QR tags generated)
2. ASSIGNMENTS - Admin hands devices to employees
3. REQUESTS - Employees ask for new devices, repairs and returns
4. NOTIFICATIONS - Admin broadcasts reminders

Run: python seed_mock_data.py
"""

import asyncio
import sys
from datetime import date, timedelta

from config import settings
from core.errors import AssetSyncError
from core.logging import setup_logging
from db import build_engine, build_session_factory, init_db
from sync.gateway import SqlAlchemyGateway
from sync.local_cache import LocalScanCache, MemoryStorage
from sync.workspace import AssetWorkspace

ADMIN_ID = "admin-0001"
EMPLOYEES = {
    "mike": "emp-0001",
    "lisa": "emp-0002",
    "david": "emp-0003",
}

TODAY = date.today()


# =============================================================================
# STEP 1: ASSETS - Devices owned by the organization
# =============================================================================

ASSETS = [
    # Laptops (assigned to specific employees)
    {"device_type": "laptop", "brand": "Dell", "model": "Latitude 5520", "serial_number": "DL5520-001",
     "purchase_price": 1299.0, "purchase_date": TODAY - timedelta(days=900), "warranty_expiry": TODAY + timedelta(days=12),
     "location": "HQ Floor 2", "owner": "mike"},
    {"device_type": "laptop", "brand": "Apple", "model": "MacBook Pro 14", "serial_number": "MBP14-002",
     "purchase_price": 2499.0, "purchase_date": TODAY - timedelta(days=300), "warranty_expiry": TODAY + timedelta(days=400),
     "location": "HQ Floor 3", "owner": "lisa"},
    {"device_type": "laptop", "brand": "HP", "model": "EliteBook 840 G8", "serial_number": "HP840-003",
     "purchase_price": 1149.0, "purchase_date": TODAY - timedelta(days=600), "warranty_expiry": TODAY + timedelta(days=25),
     "location": "HQ Floor 2", "owner": "david"},

    # Shared / unassigned
    {"device_type": "desktop", "brand": "Dell", "model": "OptiPlex 7090", "serial_number": "OPX7090-001",
     "purchase_price": 899.0, "purchase_date": TODAY - timedelta(days=1200), "location": "Reception"},
    {"device_type": "monitor", "brand": "LG", "model": "32UN880", "serial_number": "LG32-001",
     "purchase_price": 649.0, "purchase_date": TODAY - timedelta(days=200), "owner": "lisa"},
    {"device_type": "printer", "brand": "HP", "model": "LaserJet Pro MFP", "serial_number": "HPLJ-001",
     "purchase_price": 429.0, "status": "maintenance", "maintenance_due": TODAY - timedelta(days=5),
     "location": "Print Room"},
    {"device_type": "network_switch", "brand": "Cisco", "model": "Catalyst 9200", "serial_number": "C9200-001",
     "purchase_price": 3200.0, "purchase_date": TODAY - timedelta(days=1500), "location": "Server Room"},

    # Mobile devices
    {"device_type": "smartphone", "brand": "Apple", "model": "iPhone 15 Pro", "serial_number": "IP15P-001",
     "purchase_price": 1199.0, "purchase_date": TODAY - timedelta(days=120), "owner": "lisa"},
    {"device_type": "tablet", "brand": "Apple", "model": "iPad Pro 12.9", "serial_number": "IPADP-001",
     "purchase_price": 1099.0, "status": "maintenance", "maintenance_due": TODAY + timedelta(days=10),
     "owner": "david"},

    # Retired
    {"device_type": "laptop", "brand": "Dell", "model": "Latitude E5470", "serial_number": "E5470-OLD",
     "purchase_price": 0.0, "purchase_date": TODAY - timedelta(days=2600), "status": "retired"},
]


# =============================================================================
# STEP 3: REQUESTS - What employees ask for
# =============================================================================

REQUESTS = [
    {"employee": "mike", "request_type": "maintenance", "description": "Battery drains within two hours",
     "serial_number": "DL5520-001"},
    {"employee": "david", "request_type": "assignment", "description": "Need a second monitor for design work"},
    {"employee": "lisa", "request_type": "return", "description": "Returning the monitor after relocation",
     "serial_number": "LG32-001"},
]


NOTIFICATIONS = [
    {"type": "warranty", "title": "Warranty renewals due",
     "message": "Two laptops have warranties expiring this month."},
    {"type": "maintenance", "title": "Printer service overdue",
     "message": "The print room printer missed its service date.", "serial_number": "HPLJ-001"},
]


async def seed_database() -> bool:
    """Main seeding function following natural data flow"""
    setup_logging(settings.LOG_LEVEL)
    print("=" * 60)
    print("ASSET SYNC - MOCK DATA SEEDER")
    print("=" * 60)

    engine = build_engine(settings.DATABASE_URL)
    if settings.CREATE_TABLES:
        await init_db(engine)
    workspace = AssetWorkspace(
        SqlAlchemyGateway(build_session_factory(engine)),
        LocalScanCache(MemoryStorage()),
    )

    try:
        await workspace.init()
        if workspace.cache.assets:
            print("[SKIP] Assets already present; seed into an empty database.")
            return False

        # =================================================================
        # STEP 1: REGISTER ASSETS
        # =================================================================
        print("\nSTEP 1: ASSETS - Registering organization devices")
        asset_ids = {}  # serial_number -> id
        owners = {}
        for item in ASSETS:
            data = {k: v for k, v in item.items() if k != "owner"}
            asset = await workspace.create_asset(data, actor_id=ADMIN_ID)
            asset_ids[asset.serial_number] = asset.id
            if item.get("owner"):
                owners[asset.id] = EMPLOYEES[item["owner"]]
            print(f"  + [{asset.status:11}] {asset.name} ({asset.serial_number}) qr={asset.qr_code}")

        # =================================================================
        # STEP 2: ASSIGN DEVICES
        # =================================================================
        print("\nSTEP 2: ASSIGNMENTS - Handing devices to employees")
        for asset_id, user_id in owners.items():
            result = await workspace.create_assignment(
                {"asset_id": asset_id, "user_id": user_id}, actor_id=ADMIN_ID
            )
            print(f"  + {result.asset.name} -> {user_id}")

        # =================================================================
        # STEP 3: REQUESTS
        # =================================================================
        print("\nSTEP 3: REQUESTS - Employees file requests")
        for item in REQUESTS:
            request = await workspace.create_request(
                {
                    "request_type": item["request_type"],
                    "description": item["description"],
                    "asset_id": asset_ids.get(item.get("serial_number")),
                },
                user_id=EMPLOYEES[item["employee"]],
            )
            print(f"  + [{request.request_type:11}] {request.description}")

        # =================================================================
        # STEP 4: NOTIFICATIONS
        # =================================================================
        print("\nSTEP 4: NOTIFICATIONS - Admin reminders")
        for item in NOTIFICATIONS:
            notification = await workspace.add_notification(
                {
                    "type": item["type"],
                    "title": item["title"],
                    "message": item["message"],
                    "asset_id": asset_ids.get(item.get("serial_number")),
                },
                actor_id=ADMIN_ID,
            )
            print(f"  + {notification.title}")

        await workspace.refresh()
        summary = workspace.get_stats()
        print("\n" + "=" * 60)
        print("SUMMARY")
        print("=" * 60)
        print(f"  Assets:      {summary['total']} (assigned {summary['assigned']}, in repair {summary['in_repair']})")
        print(f"  Total value: {summary['total_value']}")
        print(f"  Tasks:       {[task['task'] for task in workspace.get_upcoming_tasks()]}")
        return True

    except AssetSyncError as e:
        print(f"\n[ERROR] {e}")
        return False
    finally:
        await workspace.dispose()
        await engine.dispose()


if __name__ == "__main__":
    success = asyncio.run(seed_database())
    if success:
        print("\n[OK] Database seeded successfully!")
        sys.exit(0)
    else:
        print("\n[FAILED] Seeding failed.")
        sys.exit(1)
