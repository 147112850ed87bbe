# ruff: noqa: TC003
"""Submission and lookup of cash requests and expenses."""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from custody.config import get_settings
from custody.exceptions import AuthorizationError, NotFoundError, ValidationError
from custody.models.enums import AuditAction, AuditEntityType, RequestKind, RequestStatus, Role
from custody.models.project import Project
from custody.models.request import MoneyRequest
from custody.models.user import User
from custody.schemas.request import (
    MoneyRequestListResponse,
    MoneyRequestResponse,
    RequestHistoryResponse,
    StatusChange,
)
from custody.services.audit import entity_history, model_to_audit_dict, write_audit_log
from custody.services.membership import projects_for

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from custody.schemas.auth import AuthContext
    from custody.schemas.request import SubmitCashRequestPayload, SubmitExpensePayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_request_response(request: MoneyRequest) -> MoneyRequestResponse:
    """Map a request model to its response schema."""
    return MoneyRequestResponse(
        id=request.id,
        kind=RequestKind(request.kind),
        employee_id=request.employee_id,
        employee_name=request.employee_name,
        project_id=request.project_id,
        amount=request.amount,
        reason=request.reason,
        receipt_url=request.receipt_url,
        transfer_proof_url=request.transfer_proof_url,
        status=RequestStatus(request.status),
        pm_decided_by=request.pm_decided_by,
        pm_decided_at=request.pm_decided_at,
        gm_decided_by=request.gm_decided_by,
        gm_decided_at=request.gm_decided_at,
        transferred_by=request.transferred_by,
        transferred_at=request.transferred_at,
        created_at=request.created_at,
    )


async def get_request_or_404(
    session: AsyncSession,
    request_id: uuid.UUID,
    kind: RequestKind | None = None,
) -> MoneyRequest:
    """Fetch a request by ID, optionally restricted to one kind. Raises 404 if not found."""
    query = select(MoneyRequest).where(col(MoneyRequest.id) == request_id)
    if kind is not None:
        query = query.where(col(MoneyRequest.kind) == kind.value)
    result = await session.execute(query)
    request = result.scalar_one_or_none()
    if request is None:
        label = "Cash request" if kind == RequestKind.CASH_REQUEST else "Expense" if kind else "Request"
        raise NotFoundError(f"{label} not found")
    return request


def _ensure_can_view(auth: AuthContext, request: MoneyRequest) -> None:
    if not auth.is_manager and request.employee_id != auth.user_id:
        raise AuthorizationError("Employees may only view their own requests")


async def _resolve_submitter(session: AsyncSession, auth: AuthContext) -> User:
    if auth.role != Role.EMPLOYEE:
        raise AuthorizationError("Only employees can submit requests")
    user = await session.get(User, auth.user_id)
    if user is None:
        raise NotFoundError("Employee not found")
    if not user.is_active:
        raise AuthorizationError("Employee account is disabled")
    return user


async def _resolve_project(session: AsyncSession, employee_id: uuid.UUID, project_id: uuid.UUID) -> Project:
    project = await session.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project not found")
    if not project.is_active:
        raise ValidationError("Project is not active")
    if get_settings().enforce_project_membership:
        linked = await projects_for(session, employee_id)
        if project_id not in linked:
            raise ValidationError("Employee is not a member of this project")
    return project


def _validate_submission(amount: Decimal, reason: str, receipt_url: str | None, kind: RequestKind) -> str:
    """Check the submission rules and return the cleaned reason."""
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    cleaned = (reason or "").strip()
    if not cleaned:
        raise ValidationError("Reason is required")
    if kind == RequestKind.EXPENSE and not (receipt_url or "").strip():
        raise ValidationError("A receipt is required for expenses")
    return cleaned


async def _submit(
    session: AsyncSession,
    auth: AuthContext,
    kind: RequestKind,
    project_id: uuid.UUID,
    amount: Decimal,
    reason: str,
    receipt_url: str | None = None,
) -> MoneyRequestResponse:
    """Validate everything up front, then create the request in PENDING_PM."""
    cleaned_reason = _validate_submission(amount, reason, receipt_url, kind)
    employee = await _resolve_submitter(session, auth)
    await _resolve_project(session, employee.id, project_id)

    money_request = MoneyRequest(
        kind=kind.value,
        employee_id=employee.id,
        employee_name=employee.name,
        project_id=project_id,
        amount=amount,
        reason=cleaned_reason,
        receipt_url=receipt_url.strip() if receipt_url else None,
        status=RequestStatus.PENDING_PM.value,
    )
    session.add(money_request)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.REQUEST,
        entity_id=money_request.id,
        action=AuditAction.SUBMIT,
        after_json=model_to_audit_dict(money_request),
    )

    await session.commit()
    await session.refresh(money_request)
    logger.info("%s %s submitted by %s for %s", kind.value, money_request.id, employee.id, amount)
    return build_request_response(money_request)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_cash_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitCashRequestPayload,
) -> MoneyRequestResponse:
    """Submit a custody advance. It affects no balance until the transfer is completed."""
    return await _submit(
        session,
        auth,
        RequestKind.CASH_REQUEST,
        payload.project_id,
        payload.amount,
        payload.reason,
    )


async def submit_expense(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitExpensePayload,
) -> MoneyRequestResponse:
    """Submit an expense claim with its receipt URL."""
    return await _submit(
        session,
        auth,
        RequestKind.EXPENSE,
        payload.project_id,
        payload.amount,
        payload.reason,
        payload.receipt_url,
    )


async def get_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> MoneyRequestResponse:
    """Get a single request by ID."""
    money_request = await get_request_or_404(session, request_id)
    _ensure_can_view(auth, money_request)
    return build_request_response(money_request)


async def list_requests(
    session: AsyncSession,
    auth: AuthContext,
    *,
    kind: RequestKind | None = None,
    status_filter: RequestStatus | None = None,
    employee_id: uuid.UUID | None = None,
    project_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 50,
) -> MoneyRequestListResponse:
    """List requests with optional filters, ordered by created_at DESC.

    Employees are always restricted to their own requests.
    """
    if not auth.is_manager:
        employee_id = auth.user_id

    filters = []
    if kind is not None:
        filters.append(col(MoneyRequest.kind) == kind.value)
    if status_filter is not None:
        filters.append(col(MoneyRequest.status) == status_filter.value)
    if employee_id is not None:
        filters.append(col(MoneyRequest.employee_id) == employee_id)
    if project_id is not None:
        filters.append(col(MoneyRequest.project_id) == project_id)

    count_result = await session.execute(select(func.count()).select_from(MoneyRequest).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(MoneyRequest)
        .where(*filters)
        .order_by(col(MoneyRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    requests = list(result.scalars().all())

    return MoneyRequestListResponse(
        items=[build_request_response(r) for r in requests],
        total=total,
    )


async def get_request_history(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> RequestHistoryResponse:
    """Reconstruct the status path of a request from its audit trail."""
    money_request = await get_request_or_404(session, request_id)
    _ensure_can_view(auth, money_request)

    items: list[StatusChange] = []
    for entry in await entity_history(session, AuditEntityType.REQUEST, request_id):
        after = entry.after_json or {}
        before = entry.before_json or {}
        if "status" not in after:
            continue
        items.append(
            StatusChange(
                action=AuditAction(entry.action),
                from_status=RequestStatus(before["status"]) if "status" in before else None,
                to_status=RequestStatus(after["status"]),
                actor_id=entry.actor_id,
                at=entry.created_at,
            )
        )
    return RequestHistoryResponse(request_id=request_id, items=items)
