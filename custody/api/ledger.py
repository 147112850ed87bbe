# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Response

from custody.api.deps import AuthDep, ExporterDep, ManagerDep
from custody.db import SessionDep
from custody.exceptions import AuthorizationError
from custody.schemas.ledger import (
    EmployeeTotalsResponse,
    OrganizationSummaryResponse,
    ProjectExpenseBreakdownResponse,
)
from custody.services import ledger as ledger_service
from custody.services.export import XLSX_MEDIA_TYPE

employee_totals_router = APIRouter(prefix="/employees/{employee_id}/totals", tags=["ledger"])
ledger_reports_router = APIRouter(prefix="/reports", tags=["ledger"])


def _xlsx_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@employee_totals_router.get("", response_model=EmployeeTotalsResponse)
async def get_employee_totals(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> EmployeeTotalsResponse:
    """Approved inflow, outflow and balance. Employees may only read their own."""
    if not auth.is_manager and auth.user_id != employee_id:
        raise AuthorizationError("Employees may only view their own totals")
    return await ledger_service.employee_totals(session, employee_id)


@ledger_reports_router.get("/custody", response_model=OrganizationSummaryResponse)
async def get_custody_report(
    session: SessionDep,
    auth: ManagerDep,
) -> OrganizationSummaryResponse:
    """Custody, expenses and balance for every active employee."""
    return await ledger_service.organization_summary(session)


@ledger_reports_router.get("/custody/export")
async def export_custody_report(
    session: SessionDep,
    auth: ManagerDep,
    exporter: ExporterDep,
) -> Response:
    """Download the custody report as a spreadsheet."""
    summary = await ledger_service.organization_summary(session)
    content = exporter.export(ledger_service.organization_summary_rows(summary), "Custody report")
    return _xlsx_response(content, "custody-report.xlsx")


@ledger_reports_router.get("/projects/{project_id}/expenses", response_model=ProjectExpenseBreakdownResponse)
async def get_project_expenses(
    project_id: uuid.UUID,
    session: SessionDep,
    auth: ManagerDep,
) -> ProjectExpenseBreakdownResponse:
    """Approved expenses of a project grouped by employee."""
    return await ledger_service.project_expense_breakdown(session, project_id)


@ledger_reports_router.get("/projects/{project_id}/expenses/export")
async def export_project_expenses(
    project_id: uuid.UUID,
    session: SessionDep,
    auth: ManagerDep,
    exporter: ExporterDep,
) -> Response:
    """Download a project's approved expenses as a spreadsheet."""
    breakdown = await ledger_service.project_expense_breakdown(session, project_id)
    content = exporter.export(ledger_service.project_expense_rows(breakdown), "Project expenses")
    return _xlsx_response(content, f"project-{project_id}-expenses.xlsx")
