# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from custody.models.enums import AuditAction, AuditEntityType


class AuditEntryResponse(BaseModel):
    """One recorded mutation with its before/after snapshots."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    actor_id: uuid.UUID
    entity_type: AuditEntityType
    entity_id: uuid.UUID
    action: AuditAction
    before_json: dict[str, Any] | None
    after_json: dict[str, Any] | None
    created_at: datetime


class AuditTrailResponse(BaseModel):
    items: list[AuditEntryResponse]
    total: int
