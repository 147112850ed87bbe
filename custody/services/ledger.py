# ruff: noqa: TC003
"""Balance and report calculations over approved requests.

Nothing here is cached: each call re-reads the persisted requests, so a
balance can only ever reflect rows whose status is APPROVED.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import case, func, select
from sqlmodel import col

from custody.exceptions import NotFoundError
from custody.models.enums import RequestKind, RequestStatus, Role
from custody.models.project import Project
from custody.models.request import MoneyRequest
from custody.models.user import User
from custody.schemas.ledger import (
    EmployeeSummaryRow,
    EmployeeTotalsResponse,
    OrganizationSummaryResponse,
    ProjectExpenseBreakdownResponse,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

_CENTS = Decimal("0.01")
_ZERO = Decimal("0.00")


def _to_money(value: Any) -> Decimal:
    """Normalize a driver value (Decimal, float, int or None) to a 2-place Decimal."""
    if value is None:
        return _ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(_CENTS)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


async def _approved_sums(session: AsyncSession, employee_id: uuid.UUID) -> tuple[Decimal, Decimal]:
    """Sum approved cash requests (inflow) and approved expenses (outflow) for one employee."""
    query = select(
        func.coalesce(
            func.sum(
                case(
                    (col(MoneyRequest.kind) == RequestKind.CASH_REQUEST.value, col(MoneyRequest.amount)),
                    else_=0,
                )
            ),
            0,
        ).label("inflow"),
        func.coalesce(
            func.sum(
                case(
                    (col(MoneyRequest.kind) == RequestKind.EXPENSE.value, col(MoneyRequest.amount)),
                    else_=0,
                )
            ),
            0,
        ).label("outflow"),
    ).where(
        col(MoneyRequest.employee_id) == employee_id,
        col(MoneyRequest.status) == RequestStatus.APPROVED.value,
    )

    result = await session.execute(query)
    row = result.one()
    return _to_money(row.inflow), _to_money(row.outflow)


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def employee_totals(session: AsyncSession, employee_id: uuid.UUID) -> EmployeeTotalsResponse:
    """Approved custody in, approved expenses out, and the running balance (may be negative)."""
    if await session.get(User, employee_id) is None:
        raise NotFoundError("Employee not found")

    inflow, outflow = await _approved_sums(session, employee_id)
    return EmployeeTotalsResponse(
        employee_id=employee_id,
        inflow=inflow,
        outflow=outflow,
        balance=inflow - outflow,
    )


async def organization_summary(session: AsyncSession) -> OrganizationSummaryResponse:
    """Custody report over every active employee.

    Totals are the sum of the per-employee figures rather than a separate
    aggregate query, so the rows and the totals always agree.
    """
    employees_result = await session.execute(
        select(User)
        .where(
            col(User.role) == Role.EMPLOYEE.value,
            col(User.is_active).is_(True),
        )
        .order_by(col(User.name))
    )
    employees = list(employees_result.scalars().all())

    items: list[EmployeeSummaryRow] = []
    total_inflow = _ZERO
    total_outflow = _ZERO
    for employee in employees:
        inflow, outflow = await _approved_sums(session, employee.id)
        items.append(
            EmployeeSummaryRow(
                employee_id=employee.id,
                employee_name=employee.name,
                inflow=inflow,
                outflow=outflow,
                balance=inflow - outflow,
            )
        )
        total_inflow += inflow
        total_outflow += outflow

    return OrganizationSummaryResponse(
        items=items,
        total_inflow=total_inflow,
        total_outflow=total_outflow,
        total_balance=total_inflow - total_outflow,
    )


async def project_expense_breakdown(
    session: AsyncSession,
    project_id: uuid.UUID,
) -> ProjectExpenseBreakdownResponse:
    """Approved expenses of a project grouped by employee name."""
    if await session.get(Project, project_id) is None:
        raise NotFoundError("Project not found")

    result = await session.execute(
        select(MoneyRequest).where(
            col(MoneyRequest.project_id) == project_id,
            col(MoneyRequest.kind) == RequestKind.EXPENSE.value,
            col(MoneyRequest.status) == RequestStatus.APPROVED.value,
        )
    )

    per_employee: dict[str, Decimal] = defaultdict(lambda: _ZERO)
    total = _ZERO
    for expense in result.scalars().all():
        name = expense.employee_name or str(expense.employee_id)
        amount = _to_money(expense.amount)
        per_employee[name] += amount
        total += amount

    return ProjectExpenseBreakdownResponse(
        project_id=project_id,
        per_employee_total=dict(sorted(per_employee.items())),
        total=total,
    )


# ---------------------------------------------------------------------------
# Export rows
# ---------------------------------------------------------------------------


def organization_summary_rows(summary: OrganizationSummaryResponse) -> list[list[Any]]:
    """Header, one row per employee, and a total row for spreadsheet export."""
    rows: list[list[Any]] = [["Employee", "Approved custody", "Approved expenses", "Balance"]]
    rows.extend([item.employee_name, item.inflow, item.outflow, item.balance] for item in summary.items)
    rows.append(["Total", summary.total_inflow, summary.total_outflow, summary.total_balance])
    return rows


def project_expense_rows(breakdown: ProjectExpenseBreakdownResponse) -> list[list[Any]]:
    """Header, one row per employee, and a total row for spreadsheet export."""
    rows: list[list[Any]] = [["Employee", "Approved expenses"]]
    rows.extend([name, amount] for name, amount in breakdown.per_employee_total.items())
    rows.append(["Total", breakdown.total])
    return rows
