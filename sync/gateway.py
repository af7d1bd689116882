# sync/gateway.py
"""
Remote Gateway: row-level access to the authoritative relational store.

The rest of the sync layer only sees flat dict rows keyed by column name,
with ISO-8601 strings for dates and timestamps and plain strings for enums.
"""
import asyncio
import enum
from collections.abc import Callable
from datetime import date, datetime
from typing import Any, Protocol

import structlog
from sqlalchemy import Date, DateTime, Enum as SAEnum
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.errors import RemoteGatewayError, RemoteWriteError
from db_base import Base
from db_models import ActivityLog, Asset, AssetAssignment, AssetRequest, Notification
from . import queries

logger = structlog.get_logger(__name__)

Row = dict[str, Any]
ChangeListener = Callable[[str], None]
Unsubscribe = Callable[[], None]

ASSETS = "assets"
ASSET_REQUESTS = "asset_requests"
ASSET_ASSIGNMENTS = "asset_assignments"
NOTIFICATIONS = "notifications"
ACTIVITY_LOG = "activity_log"

TABLES: dict[str, type[Base]] = {
    ASSETS: Asset,
    ASSET_REQUESTS: AssetRequest,
    ASSET_ASSIGNMENTS: AssetAssignment,
    NOTIFICATIONS: Notification,
    ACTIVITY_LOG: ActivityLog,
}


class RemoteGateway(Protocol):
    """Operations the sync layer needs from the remote store."""

    async def list_rows(
        self, table: str, order_by: str | None = None, descending: bool = False
    ) -> list[Row]:
        ...

    async def get_row(self, table: str, row_id: str) -> Row | None:
        ...

    async def find_rows(self, table: str, field: str, value: Any) -> list[Row]:
        ...

    async def insert_row(self, table: str, row: Row) -> Row:
        ...

    async def update_row(self, table: str, row_id: str, patch: Row) -> Row:
        ...

    async def delete_row(self, table: str, row_id: str) -> None:
        ...

    def subscribe(self, table: str, on_change: ChangeListener) -> Unsubscribe:
        ...


def row_to_dict(obj: Base) -> Row:
    """Flatten an ORM instance into the wire shape of the remote store."""
    row: Row = {}
    for column in obj.__table__.columns:
        value = getattr(obj, column.key)
        if isinstance(value, enum.Enum):
            value = value.value
        elif isinstance(value, (datetime, date)):
            value = value.isoformat()
        row[column.key] = value
    return row


def _coerce_value(column_type, value: Any) -> Any:
    if value is None or not isinstance(value, str):
        return value
    if isinstance(column_type, SAEnum) and value not in column_type.enums:
        raise ValueError(f"'{value}' is not a valid {column_type.name}")
    if isinstance(column_type, DateTime):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(column_type, Date):
        return date.fromisoformat(value[:10])
    return value


def _coerce_row(model: type[Base], row: Row) -> Row:
    """
    Convert wire values into column values.

    Raises:
        ValueError: unknown column or unparseable date
    """
    columns = model.__table__.columns
    coerced: Row = {}
    for key, value in row.items():
        if key not in columns:
            raise ValueError(f"Unknown column '{key}' for table {model.__tablename__}")
        coerced[key] = _coerce_value(columns[key].type, value)
    return coerced


def _describe(exc: Exception) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc)


class SqlAlchemyGateway:
    """
    RemoteGateway over an async SQLAlchemy engine.

    Each call runs in its own session. Writes commit before returning and then
    notify the table's subscribers on the next loop iteration, without payload.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._listeners: dict[str, list[ChangeListener]] = {}

    def _model(self, table: str, operation: str) -> type[Base]:
        try:
            return TABLES[table]
        except KeyError:
            raise RemoteGatewayError(
                f"Unknown table '{table}'", table=table, operation=operation
            ) from None

    # --- Reads ---

    async def list_rows(
        self, table: str, order_by: str | None = None, descending: bool = False
    ) -> list[Row]:
        model = self._model(table, "list")
        try:
            async with self._session_factory() as session:
                result = await session.execute(queries.select_rows(model, order_by, descending))
                return [row_to_dict(obj) for obj in result.scalars().all()]
        except (SQLAlchemyError, AttributeError) as exc:
            raise RemoteGatewayError(_describe(exc), table=table, operation="list") from exc

    async def get_row(self, table: str, row_id: str) -> Row | None:
        model = self._model(table, "get")
        try:
            async with self._session_factory() as session:
                result = await session.execute(queries.select_row_by_id(model, row_id))
                obj = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise RemoteGatewayError(_describe(exc), table=table, operation="get") from exc
        return row_to_dict(obj) if obj is not None else None

    async def find_rows(self, table: str, field: str, value: Any) -> list[Row]:
        model = self._model(table, "find")
        try:
            async with self._session_factory() as session:
                result = await session.execute(queries.select_rows_by_field(model, field, value))
                return [row_to_dict(obj) for obj in result.scalars().all()]
        except (SQLAlchemyError, AttributeError) as exc:
            raise RemoteGatewayError(_describe(exc), table=table, operation="find") from exc

    # --- Writes ---

    async def insert_row(self, table: str, row: Row) -> Row:
        model = self._model(table, "insert")
        try:
            values = _coerce_row(model, row)
            async with self._session_factory() as session:
                obj = model(**values)
                session.add(obj)
                await session.commit()
                await session.refresh(obj)
                created = row_to_dict(obj)
        except (SQLAlchemyError, ValueError) as exc:
            logger.warning("remote_write_rejected", table=table, operation="insert", error=_describe(exc))
            raise RemoteWriteError(_describe(exc), table=table, operation="insert") from exc

        self._notify(table)
        return created

    async def update_row(self, table: str, row_id: str, patch: Row) -> Row:
        model = self._model(table, "update")
        try:
            values = _coerce_row(model, patch)
            values.pop("id", None)
            async with self._session_factory() as session:
                result = await session.execute(queries.select_row_by_id(model, row_id))
                obj = result.scalar_one_or_none()
                if obj is None:
                    raise RemoteWriteError(
                        f"{table} row {row_id} not found",
                        table=table,
                        operation="update",
                        not_found=True,
                    )
                for key, value in values.items():
                    setattr(obj, key, value)
                await session.commit()
                await session.refresh(obj)
                updated = row_to_dict(obj)
        except (SQLAlchemyError, ValueError) as exc:
            logger.warning("remote_write_rejected", table=table, operation="update", error=_describe(exc))
            raise RemoteWriteError(_describe(exc), table=table, operation="update") from exc

        self._notify(table)
        return updated

    async def delete_row(self, table: str, row_id: str) -> None:
        model = self._model(table, "delete")
        try:
            async with self._session_factory() as session:
                result = await session.execute(queries.select_row_by_id(model, row_id))
                obj = result.scalar_one_or_none()
                if obj is None:
                    raise RemoteWriteError(
                        f"{table} row {row_id} not found",
                        table=table,
                        operation="delete",
                        not_found=True,
                    )
                await session.delete(obj)
                await session.commit()
        except SQLAlchemyError as exc:
            logger.warning("remote_write_rejected", table=table, operation="delete", error=_describe(exc))
            raise RemoteWriteError(_describe(exc), table=table, operation="delete") from exc

        self._notify(table)

    # --- Change notifications ---

    def subscribe(self, table: str, on_change: ChangeListener) -> Unsubscribe:
        self._model(table, "subscribe")
        listeners = self._listeners.setdefault(table, [])
        listeners.append(on_change)

        def unsubscribe() -> None:
            if on_change in listeners:
                listeners.remove(on_change)

        return unsubscribe

    def _notify(self, table: str) -> None:
        listeners = list(self._listeners.get(table, ()))
        if not listeners:
            return
        loop = asyncio.get_running_loop()
        for listener in listeners:
            loop.call_soon(listener, table)
