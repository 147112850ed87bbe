# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from custody.models.base import TimestampMixin, UUIDBase, money_field, reference_field, timestamp_field
from custody.models.enums import RequestStatus


class MoneyRequest(UUIDBase, TimestampMixin, table=True):
    """A custody advance or an expense claim moving through the approval chain.

    ``amount`` is fixed at submission. ``status`` only moves forward and is
    written exclusively through compare-and-set updates.
    """

    __tablename__ = "money_request"
    __table_args__ = (
        sa.Index("ix_request_employee_kind_status", "employee_id", "kind", "status"),
        sa.Index("ix_request_project_kind_status", "project_id", "kind", "status"),
        sa.CheckConstraint("amount > 0", name="ck_money_request_amount_positive"),
    )

    kind: str = Field(max_length=50, index=True)
    employee_id: uuid.UUID = reference_field("app_user.id")
    employee_name: str = Field(max_length=255)
    project_id: uuid.UUID = reference_field("project.id")
    amount: Decimal = money_field()
    reason: str
    receipt_url: str | None = None
    transfer_proof_url: str | None = None
    status: str = Field(
        default=RequestStatus.PENDING_PM,
        max_length=50,
        index=True,
        sa_column_kwargs={"server_default": "PENDING_PM"},
    )
    pm_decided_by: uuid.UUID | None = None
    pm_decided_at: datetime | None = timestamp_field(nullable=True)
    gm_decided_by: uuid.UUID | None = None
    gm_decided_at: datetime | None = timestamp_field(nullable=True)
    transferred_by: uuid.UUID | None = None
    transferred_at: datetime | None = timestamp_field(nullable=True)
