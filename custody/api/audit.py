# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query

from custody.api.deps import ManagerDep
from custody.db import SessionDep
from custody.models.enums import AuditAction, AuditEntityType
from custody.schemas.audit import AuditTrailResponse
from custody.services import audit as audit_service

audit_router = APIRouter(prefix="/audit-log", tags=["audit"])


@audit_router.get("", response_model=AuditTrailResponse)
async def search_audit_log(
    session: SessionDep,
    auth: ManagerDep,
    entity_type: AuditEntityType | None = Query(default=None),
    entity_id: uuid.UUID | None = Query(default=None),
    action: AuditAction | None = Query(default=None),
    actor_id: uuid.UUID | None = Query(default=None),
    start_date: date | None = Query(default=None, description="First day included (UTC)"),
    end_date: date | None = Query(default=None, description="Last day included (UTC)"),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> AuditTrailResponse:
    """Search the audit trail (managers only)."""
    return await audit_service.search_audit_log(
        session,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        actor_id=actor_id,
        start_date=start_date,
        end_date=end_date,
        offset=offset,
        limit=limit,
    )
