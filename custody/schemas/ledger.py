# ruff: noqa: TC003
from __future__ import annotations

import uuid
from decimal import Decimal

from pydantic import BaseModel

# ---------------------------------------------------------------------------
# Per-employee totals
# ---------------------------------------------------------------------------


class EmployeeTotalsResponse(BaseModel):
    """Approved custody (inflow), approved expenses (outflow) and their difference."""

    employee_id: uuid.UUID
    inflow: Decimal
    outflow: Decimal
    balance: Decimal


class EmployeeSummaryRow(BaseModel):
    """One employee's line in the organization custody report."""

    employee_id: uuid.UUID
    employee_name: str
    inflow: Decimal
    outflow: Decimal
    balance: Decimal


class OrganizationSummaryResponse(BaseModel):
    """Custody report across all active employees."""

    items: list[EmployeeSummaryRow]
    total_inflow: Decimal
    total_outflow: Decimal
    total_balance: Decimal


# ---------------------------------------------------------------------------
# Project expense breakdown
# ---------------------------------------------------------------------------


class ProjectExpenseBreakdownResponse(BaseModel):
    """Approved expenses of one project grouped by employee name."""

    project_id: uuid.UUID
    per_employee_total: dict[str, Decimal]
    total: Decimal
