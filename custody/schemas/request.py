# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from custody.models.enums import AuditAction, RequestKind, RequestStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitCashRequestPayload(BaseModel):
    """Request body for submitting a custody advance."""

    project_id: uuid.UUID
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    reason: str = Field(min_length=1, max_length=2000)

    @field_validator("reason")
    @classmethod
    def _strip_reason(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "reason must not be blank"
            raise ValueError(msg)
        return value


class SubmitExpensePayload(SubmitCashRequestPayload):
    """Request body for submitting an expense claim with its receipt."""

    receipt_url: str = Field(min_length=1, max_length=2048)


class DecisionPayload(BaseModel):
    """Request body for project-manager and general-manager decisions."""

    approve: bool


class CompleteTransferPayload(BaseModel):
    """Request body for completing a custody transfer."""

    proof_reference: str = Field(min_length=1, max_length=2048)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class MoneyRequestResponse(BaseModel):
    """Response schema for a single cash request or expense."""

    id: uuid.UUID
    kind: RequestKind
    employee_id: uuid.UUID
    employee_name: str
    project_id: uuid.UUID
    amount: Decimal
    reason: str
    receipt_url: str | None
    transfer_proof_url: str | None
    status: RequestStatus
    pm_decided_by: uuid.UUID | None
    pm_decided_at: datetime | None
    gm_decided_by: uuid.UUID | None
    gm_decided_at: datetime | None
    transferred_by: uuid.UUID | None
    transferred_at: datetime | None
    created_at: datetime


class MoneyRequestListResponse(BaseModel):
    """Paginated list of money requests."""

    items: list[MoneyRequestResponse]
    total: int


class StatusChange(BaseModel):
    """One step of a request's status history."""

    action: AuditAction
    from_status: RequestStatus | None
    to_status: RequestStatus
    actor_id: uuid.UUID
    at: datetime


class RequestHistoryResponse(BaseModel):
    """Ordered status history of a request, oldest first."""

    request_id: uuid.UUID
    items: list[StatusChange]
