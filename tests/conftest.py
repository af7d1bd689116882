import asyncio
import os
from datetime import date, datetime, timezone

os.environ["MODE"] = "test"

import pytest
from httpx import AsyncClient, ASGITransport

# Import the app and DB helpers from the project.
from main import app as fastapi_app
from core.deps import get_workspace
from core.errors import RemoteGatewayError, RemoteWriteError
from core.security import create_access_token
from db import build_engine, build_session_factory, init_db
from sync.gateway import SqlAlchemyGateway
from sync.local_cache import LocalScanCache, MemoryStorage
from sync.workspace import AssetWorkspace

TODAY = date(2025, 6, 15)
NOW = datetime(2025, 6, 15, 9, 30, tzinfo=timezone.utc)

ADMIN_ID = "admin-1"
EMPLOYEE_ID = "employee-1"
OTHER_EMPLOYEE_ID = "employee-2"

_READS = {"list", "get", "find"}


class FailingGateway:
    """
    Wraps a real gateway, records calls and fails the ones it is told to.

    `list_gate` holds every `list_rows` call until the event is set.
    """

    def __init__(self, inner):
        self.inner = inner
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], int | None] = {}
        self.list_gate: asyncio.Event | None = None

    def fail(self, operation: str, table: str, times: int | None = None) -> None:
        self.failures[(operation, table)] = times

    def heal(self) -> None:
        self.failures.clear()

    def _check(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))
        key = (operation, table)
        if key not in self.failures:
            return
        remaining = self.failures[key]
        if remaining is not None:
            if remaining <= 1:
                del self.failures[key]
            else:
                self.failures[key] = remaining - 1
        message = f"injected {operation} failure on {table}"
        if operation in _READS:
            raise RemoteGatewayError(message, table=table, operation=operation)
        raise RemoteWriteError(message, table=table, operation=operation)

    async def list_rows(self, table, order_by=None, descending=False):
        self._check("list", table)
        if self.list_gate is not None:
            await self.list_gate.wait()
        return await self.inner.list_rows(table, order_by, descending)

    async def get_row(self, table, row_id):
        self._check("get", table)
        return await self.inner.get_row(table, row_id)

    async def find_rows(self, table, field, value):
        self._check("find", table)
        return await self.inner.find_rows(table, field, value)

    async def insert_row(self, table, row):
        self._check("insert", table)
        return await self.inner.insert_row(table, row)

    async def update_row(self, table, row_id, patch):
        self._check("update", table)
        return await self.inner.update_row(table, row_id, patch)

    async def delete_row(self, table, row_id):
        self._check("delete", table)
        return await self.inner.delete_row(table, row_id)

    def subscribe(self, table, on_change):
        return self.inner.subscribe(table, on_change)


def asset_payload(serial: str = "SN-001", **overrides) -> dict:
    payload = {
        "device_type": "laptop",
        "brand": "Dell",
        "model": "Latitude 5520",
        "serial_number": serial,
        "purchase_price": 1200.0,
    }
    payload.update(overrides)
    return payload


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def engine(tmp_path):
    # One throwaway sqlite file per test
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'remote.db'}", echo=False)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def remote(engine):
    """The real gateway, for arranging data behind the workspace's back."""
    return SqlAlchemyGateway(build_session_factory(engine))


@pytest.fixture
def gateway(remote):
    return FailingGateway(remote)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
async def workspace(gateway, storage):
    ws = AssetWorkspace(
        gateway,
        LocalScanCache(storage),
        clock=lambda: NOW,
        today=lambda: TODAY,
    )
    await ws.init()
    yield ws
    await ws.dispose()


@pytest.fixture
async def async_client(workspace):
    # The lifespan does not run under ASGITransport; hand the test workspace in directly
    fastapi_app.dependency_overrides[get_workspace] = lambda: workspace

    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://testserver") as ac:
        yield ac

    # Clean up
    fastapi_app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def admin_token():
    """Generate an admin JWT token for tests."""
    return create_access_token(data={"sub": ADMIN_ID, "role": "admin"})


@pytest.fixture(scope="session")
def employee_token():
    """Generate an employee JWT token for tests."""
    return create_access_token(data={"sub": EMPLOYEE_ID, "role": "employee"})


@pytest.fixture(scope="session")
def other_employee_token():
    return create_access_token(data={"sub": OTHER_EMPLOYEE_ID, "role": "employee"})


@pytest.fixture(scope="session")
def admin_headers(admin_token):
    """Return authorization headers for admin user."""
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture(scope="session")
def employee_headers(employee_token):
    """Return authorization headers for employee user."""
    return {"Authorization": f"Bearer {employee_token}"}


@pytest.fixture(scope="session")
def other_employee_headers(other_employee_token):
    return {"Authorization": f"Bearer {other_employee_token}"}
