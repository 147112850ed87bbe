# ruff: noqa: TC003
"""Append-only audit trail shared by every mutating service."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, time, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlmodel import col

from custody.exceptions import ValidationError
from custody.models.audit import AuditLog
from custody.models.enums import AuditAction, AuditEntityType
from custody.schemas.audit import AuditEntryResponse, AuditTrailResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel


def model_to_audit_dict(model: SQLModel) -> dict[str, Any]:
    """Snapshot a row as JSON-safe values (UUIDs, datetimes and amounts become strings)."""
    return model.model_dump(mode="json")


async def write_audit_log(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
    action: AuditAction,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    """Add an audit entry to the caller's transaction; it commits or rolls back with the change."""
    entry = AuditLog(
        actor_id=actor_id,
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    return entry


async def entity_history(
    session: AsyncSession,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
) -> list[AuditLog]:
    """Every audit entry for one entity, oldest first."""
    result = await session.execute(
        select(AuditLog)
        .where(
            col(AuditLog.entity_type) == entity_type.value,
            col(AuditLog.entity_id) == entity_id,
        )
        .order_by(col(AuditLog.created_at), col(AuditLog.id))
    )
    return list(result.scalars().all())


def day_window(start_date: date | None, end_date: date | None) -> tuple[datetime | None, datetime | None]:
    """Half-open UTC bounds ``[start 00:00, day after end 00:00)`` so both days are included."""
    if start_date is not None and end_date is not None and start_date > end_date:
        raise ValidationError("start_date must not be after end_date")
    lower = datetime.combine(start_date, time.min, tzinfo=UTC) if start_date is not None else None
    upper = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=UTC) if end_date is not None else None
    return lower, upper


async def search_audit_log(
    session: AsyncSession,
    *,
    entity_type: AuditEntityType | None = None,
    entity_id: uuid.UUID | None = None,
    action: AuditAction | None = None,
    actor_id: uuid.UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    offset: int = 0,
    limit: int = 50,
) -> AuditTrailResponse:
    """Newest-first page of audit entries, e.g. every approval a manager made last week."""
    filters = []
    if entity_type is not None:
        filters.append(col(AuditLog.entity_type) == entity_type.value)
    if entity_id is not None:
        filters.append(col(AuditLog.entity_id) == entity_id)
    if action is not None:
        filters.append(col(AuditLog.action) == action.value)
    if actor_id is not None:
        filters.append(col(AuditLog.actor_id) == actor_id)

    lower, upper = day_window(start_date, end_date)
    if lower is not None:
        filters.append(col(AuditLog.created_at) >= lower)
    if upper is not None:
        filters.append(col(AuditLog.created_at) < upper)

    total = (await session.execute(select(func.count()).select_from(AuditLog).where(*filters))).scalar_one()
    result = await session.execute(
        select(AuditLog)
        .where(*filters)
        .order_by(col(AuditLog.created_at).desc(), col(AuditLog.id).desc())
        .offset(offset)
        .limit(limit)
    )
    return AuditTrailResponse(
        items=[AuditEntryResponse.model_validate(entry) for entry in result.scalars()],
        total=total,
    )
