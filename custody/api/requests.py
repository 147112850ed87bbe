# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from custody.api.deps import AuthDep, NotifierDep
from custody.db import SessionDep
from custody.models.enums import RequestKind, RequestStatus
from custody.schemas.request import (
    CompleteTransferPayload,
    DecisionPayload,
    MoneyRequestListResponse,
    MoneyRequestResponse,
    RequestHistoryResponse,
    SubmitCashRequestPayload,
    SubmitExpensePayload,
)
from custody.services import request as request_service
from custody.services import transfer as transfer_service
from custody.services import transition as transition_service

cash_requests_router = APIRouter(prefix="/cash-requests", tags=["cash requests"])
expenses_router = APIRouter(prefix="/expenses", tags=["expenses"])
requests_router = APIRouter(prefix="/requests", tags=["requests"])


# ---------------------------------------------------------------------------
# Cash requests (custody advances)
# ---------------------------------------------------------------------------


@cash_requests_router.post("", response_model=MoneyRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_cash_request(
    payload: SubmitCashRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> MoneyRequestResponse:
    """Submit a custody advance (employee only)."""
    return await request_service.submit_cash_request(session, auth, payload)


@cash_requests_router.post("/{request_id}/pm-decision", response_model=MoneyRequestResponse)
async def cash_pm_decision(
    request_id: uuid.UUID,
    payload: DecisionPayload,
    session: SessionDep,
    auth: AuthDep,
    notifier: NotifierDep,
) -> MoneyRequestResponse:
    """Project-manager decision on a pending cash request."""
    return await transition_service.pm_decision(
        session, auth, request_id, payload.approve, notifier, RequestKind.CASH_REQUEST
    )


@cash_requests_router.post("/{request_id}/gm-decision", response_model=MoneyRequestResponse)
async def cash_gm_decision(
    request_id: uuid.UUID,
    payload: DecisionPayload,
    session: SessionDep,
    auth: AuthDep,
    notifier: NotifierDep,
) -> MoneyRequestResponse:
    """General-manager decision; approval leaves the request waiting for transfer."""
    return await transition_service.gm_decision(
        session, auth, request_id, payload.approve, notifier, RequestKind.CASH_REQUEST
    )


@cash_requests_router.post("/{request_id}/complete-transfer", response_model=MoneyRequestResponse)
async def complete_transfer(
    request_id: uuid.UUID,
    payload: CompleteTransferPayload,
    session: SessionDep,
    auth: AuthDep,
    notifier: NotifierDep,
) -> MoneyRequestResponse:
    """Attach the transfer proof and add the advance to the employee's balance."""
    return await transfer_service.complete_transfer(session, auth, request_id, payload.proof_reference, notifier)


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


@expenses_router.post("", response_model=MoneyRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_expense(
    payload: SubmitExpensePayload,
    session: SessionDep,
    auth: AuthDep,
) -> MoneyRequestResponse:
    """Submit an expense claim with its receipt (employee only)."""
    return await request_service.submit_expense(session, auth, payload)


@expenses_router.post("/{request_id}/pm-decision", response_model=MoneyRequestResponse)
async def expense_pm_decision(
    request_id: uuid.UUID,
    payload: DecisionPayload,
    session: SessionDep,
    auth: AuthDep,
    notifier: NotifierDep,
) -> MoneyRequestResponse:
    """Project-manager decision on a pending expense."""
    return await transition_service.pm_decision(
        session, auth, request_id, payload.approve, notifier, RequestKind.EXPENSE
    )


@expenses_router.post("/{request_id}/gm-decision", response_model=MoneyRequestResponse)
async def expense_gm_decision(
    request_id: uuid.UUID,
    payload: DecisionPayload,
    session: SessionDep,
    auth: AuthDep,
    notifier: NotifierDep,
) -> MoneyRequestResponse:
    """General-manager decision; approval is immediately balance-effective."""
    return await transition_service.gm_decision(
        session, auth, request_id, payload.approve, notifier, RequestKind.EXPENSE
    )


# ---------------------------------------------------------------------------
# Queries across both kinds
# ---------------------------------------------------------------------------


@requests_router.get("", response_model=MoneyRequestListResponse)
async def list_requests(
    session: SessionDep,
    auth: AuthDep,
    kind: RequestKind | None = Query(default=None),
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    employee_id: uuid.UUID | None = Query(default=None),
    project_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> MoneyRequestListResponse:
    """List requests. Employees only see their own."""
    return await request_service.list_requests(
        session,
        auth,
        kind=kind,
        status_filter=status_filter,
        employee_id=employee_id,
        project_id=project_id,
        offset=offset,
        limit=limit,
    )


@requests_router.get("/{request_id}", response_model=MoneyRequestResponse)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> MoneyRequestResponse:
    """Get a single request."""
    return await request_service.get_request(session, auth, request_id)


@requests_router.get("/{request_id}/history", response_model=RequestHistoryResponse)
async def get_request_history(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> RequestHistoryResponse:
    """Status history of a request, oldest first."""
    return await request_service.get_request_history(session, auth, request_id)
