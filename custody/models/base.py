from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

# Monetary amounts: up to 9,999,999,999.99, never stored as floats.
MONEY_TYPE = sa.Numeric(12, 2)


def now_utc() -> datetime:
    """Return the current UTC time."""
    return datetime.now(UTC)


def money_field(**kwargs: Any) -> Any:
    """Field for a fixed-point amount column."""
    return Field(sa_type=MONEY_TYPE, **kwargs)  # ty: ignore[invalid-argument-type]


def reference_field(target: str, *, index: bool = False) -> Any:
    """Required UUID column with a foreign key to ``target`` (``table.column``)."""
    return Field(sa_column=sa.Column(sa.Uuid, sa.ForeignKey(target), nullable=False, index=index))


def timestamp_field(*, nullable: bool = False, index: bool = False) -> Any:
    """Timezone-aware timestamp; non-nullable ones default to now."""
    if nullable:
        return Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    return Field(
        default_factory=now_utc,
        index=index,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )


class UUIDBase(SQLModel):
    """Base model with a UUID v4 primary key."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, sa_type=sa.Uuid)


class TimestampMixin(SQLModel):
    """Mixin that adds an indexed created_at timestamp."""

    created_at: datetime = timestamp_field(index=True)
