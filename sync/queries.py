"""
SQLAlchemy query builders for the remote gateway.
"""
from sqlalchemy import select

from db_base import Base


def select_rows(model: type[Base], order_by: str | None = None, descending: bool = False):
    """Select every row of a table, optionally ordered by one column."""
    stmt = select(model)
    if order_by is not None:
        column = getattr(model, order_by)
        stmt = stmt.order_by(column.desc() if descending else column.asc())
    return stmt


def select_row_by_id(model: type[Base], row_id: str):
    """Select a row by its primary key."""
    return select(model).where(model.id == row_id)


def select_rows_by_field(model: type[Base], field: str, value):
    """Select rows where one column equals a value."""
    return select(model).where(getattr(model, field) == value)
