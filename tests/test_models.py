from __future__ import annotations

import uuid
from decimal import Decimal

from custody.models import (
    AuditLog,
    MoneyRequest,
    Project,
    ProjectMembership,
    SQLModel,
    User,
)
from custody.models.enums import RequestKind, RequestStatus, Role

EXPECTED_TABLES = {
    "app_user",
    "audit_log",
    "money_request",
    "project",
    "project_membership",
}


def test_all_tables_registered() -> None:
    table_names = set(SQLModel.metadata.tables.keys())
    assert EXPECTED_TABLES.issubset(table_names)


def test_user_defaults() -> None:
    user = User(name="Sara Ahmed")
    assert user.role == Role.EMPLOYEE
    assert user.is_active is True
    assert user.id is not None


def test_project_defaults() -> None:
    project = Project(name="Survey")
    assert project.is_active is True
    assert project.description == ""
    assert project.created_by is None


def test_membership_instantiation() -> None:
    employee_id, project_id = uuid.uuid4(), uuid.uuid4()
    membership = ProjectMembership(employee_id=employee_id, project_id=project_id)
    assert membership.employee_id == employee_id
    assert membership.project_id == project_id


def test_money_request_starts_pending_pm() -> None:
    request = MoneyRequest(
        kind=RequestKind.CASH_REQUEST,
        employee_id=uuid.uuid4(),
        employee_name="Sara Ahmed",
        project_id=uuid.uuid4(),
        amount=Decimal("500.00"),
        reason="Site materials",
    )
    assert request.status == RequestStatus.PENDING_PM
    assert request.receipt_url is None
    assert request.transfer_proof_url is None
    assert request.pm_decided_by is None
    assert request.gm_decided_at is None
    assert request.transferred_at is None
    assert request.created_at is not None


def test_money_request_amount_constraint_declared() -> None:
    constraints = {c.name for c in SQLModel.metadata.tables["money_request"].constraints}
    assert "ck_money_request_amount_positive" in constraints


def test_audit_log_instantiation() -> None:
    entry = AuditLog(
        actor_id=uuid.uuid4(),
        entity_type="REQUEST",
        entity_id=uuid.uuid4(),
        action="SUBMIT",
        after_json={"status": "PENDING_PM"},
    )
    assert entry.before_json is None
    assert entry.after_json == {"status": "PENDING_PM"}


def test_request_status_terminal() -> None:
    assert RequestStatus.APPROVED.is_terminal
    assert RequestStatus.REJECTED.is_terminal
    assert not RequestStatus.WAITING_TRANSFER.is_terminal
