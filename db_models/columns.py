# db_models/columns.py
"""
Shared column helpers for the asset tables.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Enum as SAEnum


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_column(enum_cls: type[Enum], name: str) -> SAEnum:
    """
    Non-native enum stored as its string value, checked by a CHECK constraint
    and rejected before the statement runs when the string is not a member.
    """
    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        validate_strings=True,
        length=20,
        values_callable=lambda members: [m.value for m in members],
    )
