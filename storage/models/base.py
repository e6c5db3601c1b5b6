"""
Base ORM Model and Column Types.

============================================================
PURPOSE
============================================================
Provides the declarative base and the custom column types
used by all ORM models in the indexer.

============================================================
COMPONENTS
============================================================
- Base: SQLAlchemy declarative base for all models
- DecimalText: arbitrary-precision Decimal stored as text
- JsonList: JSON array column (sets, histograms)
- BlockTimestampMixin: created_at/updated_at as block time

============================================================
"""

import json
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy import JSON, BigInteger, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class Base(DeclarativeBase):
    """
    Declarative base for all ORM models.
    
    Every entity is addressed by a deterministic string key
    derived from event data, so the primary key is always a
    String column named ``id``.
    """


class DecimalText(TypeDecorator):
    """
    Decimal persisted as its canonical string form.
    
    Numeric columns lose precision on SQLite and cap scale on
    PostgreSQL; running averages need every digit.
    """
    
    impl = String(80)
    cache_ok = True
    
    def process_bind_param(self, value: Optional[Decimal], dialect: Any) -> Optional[str]:
        if value is None:
            return None
        return str(Decimal(value))
    
    def process_result_value(self, value: Optional[str], dialect: Any) -> Optional[Decimal]:
        if value is None:
            return None
        return Decimal(value)


class BigIntText(TypeDecorator):
    """Unbounded integer (e.g. EIP-155 chain ids from off-chain files)."""
    
    impl = String(80)
    cache_ok = True
    
    def process_bind_param(self, value: Optional[int], dialect: Any) -> Optional[str]:
        if value is None:
            return None
        return str(int(value))
    
    def process_result_value(self, value: Optional[str], dialect: Any) -> Optional[int]:
        if value is None:
            return None
        return int(value)


JsonList = JSON().with_variant(JSONB(), "postgresql")


class BlockTimestampMixin:
    """
    Mixin providing block-time timestamp columns.
    
    Values are the unix seconds of the block that created or
    last changed the entity, never the wall clock, so a replay
    reproduces them exactly.
    """
    
    created_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Block timestamp of creation (unix seconds)"
    )
    
    updated_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Block timestamp of last change (unix seconds)"
    )


def canonical_json(value: Any) -> str:
    """Stable JSON text for nested values kept as opaque strings."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def empty_list() -> List[str]:
    return []


__all__ = [
    "Base",
    "BigIntText",
    "BlockTimestampMixin",
    "DecimalText",
    "JsonList",
    "canonical_json",
    "empty_list",
]
