"""Tests for balance computation, the custody report, project expense
breakdowns and their spreadsheet exports.
"""

from __future__ import annotations

import io
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from openpyxl import load_workbook

from custody.models.enums import RequestKind, RequestStatus, Role
from custody.models.request import MoneyRequest
from custody.services import ledger as ledger_service
from custody.services.export import XLSX_MEDIA_TYPE
from tests.factories import add_project, add_user, headers_for, manager_headers

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from custody.models.project import Project
    from custody.models.user import User

PM_HEADERS = manager_headers(Role.PROJECT_MANAGER)
GM_HEADERS = manager_headers(Role.GENERAL_MANAGER)


async def _add_request(
    session: AsyncSession,
    employee: User,
    project: Project,
    kind: RequestKind,
    amount: str,
    status: RequestStatus = RequestStatus.APPROVED,
) -> MoneyRequest:
    money_request = MoneyRequest(
        kind=kind.value,
        employee_id=employee.id,
        employee_name=employee.name,
        project_id=project.id,
        amount=Decimal(amount),
        reason="seeded",
        receipt_url="memory://objects/r.jpg" if kind == RequestKind.EXPENSE else None,
        status=status.value,
    )
    session.add(money_request)
    await session.commit()
    return money_request


@pytest.fixture
async def project(db_session: AsyncSession) -> Project:
    return await add_project(db_session, "Warehouse Fit-out")


# ---------------------------------------------------------------------------
# Employee totals
# ---------------------------------------------------------------------------


async def test_totals_only_count_approved(db_session: AsyncSession, project: Project) -> None:
    employee = await add_user(db_session, "Sara Ahmed")
    await _add_request(db_session, employee, project, RequestKind.CASH_REQUEST, "500.00")
    await _add_request(db_session, employee, project, RequestKind.EXPENSE, "200.00")
    for status in (
        RequestStatus.PENDING_PM,
        RequestStatus.PENDING_GM,
        RequestStatus.WAITING_TRANSFER,
        RequestStatus.REJECTED,
    ):
        await _add_request(db_session, employee, project, RequestKind.CASH_REQUEST, "1000.00", status)
    await _add_request(db_session, employee, project, RequestKind.EXPENSE, "999.00", RequestStatus.PENDING_GM)

    totals = await ledger_service.employee_totals(db_session, employee.id)
    assert totals.inflow == Decimal("500.00")
    assert totals.outflow == Decimal("200.00")
    assert totals.balance == Decimal("300.00")


async def test_totals_zero_without_requests(db_session: AsyncSession) -> None:
    employee = await add_user(db_session, "Sara Ahmed")
    totals = await ledger_service.employee_totals(db_session, employee.id)
    assert (totals.inflow, totals.outflow, totals.balance) == (Decimal("0"), Decimal("0"), Decimal("0"))


async def test_totals_keep_cents(db_session: AsyncSession, project: Project) -> None:
    employee = await add_user(db_session, "Sara Ahmed")
    await _add_request(db_session, employee, project, RequestKind.CASH_REQUEST, "0.10")
    await _add_request(db_session, employee, project, RequestKind.CASH_REQUEST, "0.20")
    await _add_request(db_session, employee, project, RequestKind.EXPENSE, "0.05")

    totals = await ledger_service.employee_totals(db_session, employee.id)
    assert totals.inflow == Decimal("0.30")
    assert totals.balance == Decimal("0.25")


async def test_totals_unknown_employee_returns_404(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"/employees/{uuid.uuid4()}/totals", headers=GM_HEADERS)
    assert resp.status_code == 404


async def test_totals_of_other_employee_forbidden(async_client: AsyncClient, db_session: AsyncSession) -> None:
    employee = await add_user(db_session, "Sara Ahmed")
    resp = await async_client.get(
        f"/employees/{employee.id}/totals", headers=headers_for(uuid.uuid4(), Role.EMPLOYEE)
    )
    assert resp.status_code == 403

    resp = await async_client.get(f"/employees/{employee.id}/totals", headers=PM_HEADERS)
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Organization custody report
# ---------------------------------------------------------------------------


async def test_organization_summary(async_client: AsyncClient, db_session: AsyncSession, project: Project) -> None:
    sara = await add_user(db_session, "Sara Ahmed")
    omar = await add_user(db_session, "Omar Faisal")
    former = await add_user(db_session, "Former Staff", is_active=False)
    await add_user(db_session, "Noura Saleh", Role.PROJECT_MANAGER)

    await _add_request(db_session, sara, project, RequestKind.CASH_REQUEST, "500.00")
    await _add_request(db_session, sara, project, RequestKind.EXPENSE, "200.00")
    await _add_request(db_session, omar, project, RequestKind.EXPENSE, "50.50")
    await _add_request(db_session, former, project, RequestKind.CASH_REQUEST, "9999.00")

    resp = await async_client.get("/reports/custody", headers=GM_HEADERS)
    assert resp.status_code == 200
    data = resp.json()

    # Active employees only, ordered by name.
    assert [row["employee_name"] for row in data["items"]] == ["Omar Faisal", "Sara Ahmed"]
    omar_row, sara_row = data["items"]
    assert Decimal(omar_row["balance"]) == Decimal("-50.50")
    assert Decimal(sara_row["balance"]) == Decimal("300.00")

    assert Decimal(data["total_inflow"]) == Decimal("500.00")
    assert Decimal(data["total_outflow"]) == Decimal("250.50")
    assert Decimal(data["total_balance"]) == Decimal("249.50")


async def test_organization_summary_requires_manager(async_client: AsyncClient) -> None:
    resp = await async_client.get("/reports/custody", headers=headers_for(uuid.uuid4(), Role.EMPLOYEE))
    assert resp.status_code == 403


async def test_custody_report_export(async_client: AsyncClient, db_session: AsyncSession, project: Project) -> None:
    sara = await add_user(db_session, "Sara Ahmed")
    await _add_request(db_session, sara, project, RequestKind.CASH_REQUEST, "500.00")
    await _add_request(db_session, sara, project, RequestKind.EXPENSE, "120.25")

    resp = await async_client.get("/reports/custody/export", headers=PM_HEADERS)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == XLSX_MEDIA_TYPE
    assert "custody-report.xlsx" in resp.headers["content-disposition"]

    sheet = load_workbook(io.BytesIO(resp.content)).active
    rows = [list(row) for row in sheet.iter_rows(values_only=True)]
    assert rows[0] == ["Employee", "Approved custody", "Approved expenses", "Balance"]
    assert rows[1][0] == "Sara Ahmed"
    assert rows[1][1:] == pytest.approx([500.0, 120.25, 379.75])
    assert rows[-1][0] == "Total"
    assert rows[-1][3] == pytest.approx(379.75)


# ---------------------------------------------------------------------------
# Project expense breakdown
# ---------------------------------------------------------------------------


async def test_project_expense_breakdown(async_client: AsyncClient, db_session: AsyncSession, project: Project) -> None:
    other_project = await add_project(db_session, "Survey")
    sara = await add_user(db_session, "Sara Ahmed")
    omar = await add_user(db_session, "Omar Faisal")

    await _add_request(db_session, sara, project, RequestKind.EXPENSE, "100.00")
    await _add_request(db_session, sara, project, RequestKind.EXPENSE, "25.50")
    await _add_request(db_session, omar, project, RequestKind.EXPENSE, "40.00")
    # Not counted: pending, cash, other project.
    await _add_request(db_session, omar, project, RequestKind.EXPENSE, "70.00", RequestStatus.PENDING_GM)
    await _add_request(db_session, sara, project, RequestKind.CASH_REQUEST, "800.00")
    await _add_request(db_session, sara, other_project, RequestKind.EXPENSE, "15.00")

    resp = await async_client.get(f"/reports/projects/{project.id}/expenses", headers=PM_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert {name: Decimal(v) for name, v in data["per_employee_total"].items()} == {
        "Omar Faisal": Decimal("40.00"),
        "Sara Ahmed": Decimal("125.50"),
    }
    assert Decimal(data["total"]) == Decimal("165.50")


async def test_project_expense_breakdown_empty(async_client: AsyncClient, project: Project) -> None:
    resp = await async_client.get(f"/reports/projects/{project.id}/expenses", headers=GM_HEADERS)
    data = resp.json()
    assert data["per_employee_total"] == {}
    assert Decimal(data["total"]) == Decimal("0")


async def test_project_expense_breakdown_unknown_project(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"/reports/projects/{uuid.uuid4()}/expenses", headers=GM_HEADERS)
    assert resp.status_code == 404


async def test_project_expense_export(async_client: AsyncClient, db_session: AsyncSession, project: Project) -> None:
    sara = await add_user(db_session, "Sara Ahmed")
    await _add_request(db_session, sara, project, RequestKind.EXPENSE, "60.00")

    resp = await async_client.get(f"/reports/projects/{project.id}/expenses/export", headers=GM_HEADERS)
    assert resp.status_code == 200
    sheet = load_workbook(io.BytesIO(resp.content)).active
    rows = [list(row) for row in sheet.iter_rows(values_only=True)]
    assert rows == [["Employee", "Approved expenses"], ["Sara Ahmed", 60], ["Total", 60]]
