# ruff: noqa: TC003
"""Request state machine.

Every status change goes through :func:`compare_and_set_status`, which only
updates the row while it still holds the expected status. Concurrent or
repeated decisions on the same request therefore fail with
:class:`StateConflictError` instead of overwriting each other.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import update
from sqlmodel import col

from custody.config import get_settings
from custody.exceptions import StateConflictError
from custody.models.enums import AuditAction, AuditEntityType, RequestKind, RequestStatus, Transition
from custody.models.request import MoneyRequest
from custody.services.audit import model_to_audit_dict, write_audit_log
from custody.services.authorization import authorize
from custody.services.notification import notify_best_effort
from custody.services.request import build_request_response, get_request_or_404

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from custody.schemas.auth import AuthContext
    from custody.schemas.request import MoneyRequestResponse
    from custody.services.notification import NotificationDispatcher

logger = logging.getLogger(__name__)

# Status a request must hold for each transition to apply.
EXPECTED_STATUS: dict[Transition, RequestStatus] = {
    Transition.PM_DECISION: RequestStatus.PENDING_PM,
    Transition.GM_DECISION: RequestStatus.PENDING_GM,
    Transition.COMPLETE_TRANSFER: RequestStatus.WAITING_TRANSFER,
}

# (kind, current status, approve) -> next status. Anything absent is not a legal move.
TRANSITION_TABLE: dict[tuple[RequestKind, RequestStatus, bool], RequestStatus] = {
    (RequestKind.CASH_REQUEST, RequestStatus.PENDING_PM, True): RequestStatus.PENDING_GM,
    (RequestKind.CASH_REQUEST, RequestStatus.PENDING_PM, False): RequestStatus.REJECTED,
    (RequestKind.CASH_REQUEST, RequestStatus.PENDING_GM, True): RequestStatus.WAITING_TRANSFER,
    (RequestKind.CASH_REQUEST, RequestStatus.PENDING_GM, False): RequestStatus.REJECTED,
    (RequestKind.CASH_REQUEST, RequestStatus.WAITING_TRANSFER, True): RequestStatus.APPROVED,
    (RequestKind.EXPENSE, RequestStatus.PENDING_PM, True): RequestStatus.PENDING_GM,
    (RequestKind.EXPENSE, RequestStatus.PENDING_PM, False): RequestStatus.REJECTED,
    (RequestKind.EXPENSE, RequestStatus.PENDING_GM, True): RequestStatus.APPROVED,
    (RequestKind.EXPENSE, RequestStatus.PENDING_GM, False): RequestStatus.REJECTED,
}

_KIND_LABELS = {
    RequestKind.CASH_REQUEST: "Cash request",
    RequestKind.EXPENSE: "Expense",
}


# ---------------------------------------------------------------------------
# Pure transition rules
# ---------------------------------------------------------------------------


def next_status(kind: RequestKind, current: RequestStatus, approve: bool) -> RequestStatus:
    """Look up the status reached from ``current``. Raises on illegal moves."""
    try:
        return TRANSITION_TABLE[(kind, current, approve)]
    except KeyError:
        verb = "approve" if approve else "reject"
        raise StateConflictError(f"Cannot {verb} a {kind.value} in status {current.value}") from None


def allowed_next_statuses(kind: RequestKind, current: RequestStatus) -> set[RequestStatus]:
    """Every status directly reachable from ``current`` for ``kind``."""
    return {target for (k, status, _), target in TRANSITION_TABLE.items() if k == kind and status == current}


def ensure_expected_status(request: MoneyRequest, transition: Transition) -> RequestStatus:
    """Raise :class:`StateConflictError` unless the request is at the stage ``transition`` acts on."""
    expected = EXPECTED_STATUS[transition]
    if request.status != expected.value:
        raise StateConflictError(
            f"{_KIND_LABELS[RequestKind(request.kind)]} is {request.status}, expected {expected.value}"
        )
    return expected


def _format_amount(request: MoneyRequest) -> str:
    return f"{request.amount:.2f} {get_settings().currency}"


def describe_status(request: MoneyRequest) -> tuple[str, str]:
    """Notification title and body announcing the request's current status."""
    kind = RequestKind(request.kind)
    status = RequestStatus(request.status)
    label = _KIND_LABELS[kind]
    amount = _format_amount(request)

    if status == RequestStatus.REJECTED:
        return f"{label} rejected", f"Your {label.lower()} of {amount} was rejected."
    if status == RequestStatus.PENDING_GM:
        return (
            f"{label} approved by project manager",
            f"Your {label.lower()} of {amount} was approved and forwarded to the general manager.",
        )
    if status == RequestStatus.WAITING_TRANSFER:
        return (
            f"{label} approved",
            f"Your {label.lower()} of {amount} received final approval and is awaiting transfer.",
        )
    if status == RequestStatus.APPROVED and kind == RequestKind.CASH_REQUEST:
        return "Custody transferred", f"{amount} has been transferred to your account."
    if status == RequestStatus.APPROVED:
        return f"{label} approved", f"Your {label.lower()} of {amount} received final approval."
    return f"{label} updated", f"Your {label.lower()} of {amount} is now {status.value}."


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


async def compare_and_set_status(
    session: AsyncSession,
    request_id: uuid.UUID,
    expected: RequestStatus,
    new_status: RequestStatus,
    extra_fields: dict[str, Any] | None = None,
) -> None:
    """Atomically move ``request_id`` from ``expected`` to ``new_status``.

    Rolls back and raises :class:`StateConflictError` when the persisted
    status is no longer ``expected``.
    """
    values: dict[str, Any] = {"status": new_status.value, **(extra_fields or {})}
    result = await session.execute(
        update(MoneyRequest)
        .where(
            col(MoneyRequest.id) == request_id,
            col(MoneyRequest.status) == expected.value,
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await session.rollback()
        raise StateConflictError(f"Request {request_id} is no longer {expected.value}")


async def apply_transition(
    session: AsyncSession,
    auth: AuthContext,
    request: MoneyRequest,
    transition: Transition,
    new_status: RequestStatus,
    audit_action: AuditAction,
    extra_fields: dict[str, Any],
    notifier: NotificationDispatcher,
) -> MoneyRequestResponse:
    """Shared tail of every transition: CAS, audit, commit, notify.

    1. Compare-and-set the status with the transition's extra fields.
    2. Reload the row inside the same transaction.
    3. Audit log with before/after.
    4. Commit.
    5. Best-effort notification to the employee.
    """
    expected = EXPECTED_STATUS[transition]
    before_dict = model_to_audit_dict(request)

    await compare_and_set_status(session, request.id, expected, new_status, extra_fields)
    await session.refresh(request)

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request.id,
        action=audit_action,
        before_json=before_dict,
        after_json=model_to_audit_dict(request),
    )

    await session.commit()
    await session.refresh(request)
    logger.info(
        "%s %s: %s -> %s by %s",
        request.kind,
        request.id,
        expected.value,
        new_status.value,
        auth.user_id,
    )

    title, body = describe_status(request)
    await notify_best_effort(notifier, request.employee_id, title, body)
    return build_request_response(request)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def decide(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    transition: Transition,
    approve: bool,
    notifier: NotificationDispatcher,
    kind: RequestKind | None = None,
) -> MoneyRequestResponse:
    """Apply a project-manager or general-manager decision.

    Rejection is terminal from either stage. Approval moves a request from
    PENDING_PM to PENDING_GM; from PENDING_GM an expense becomes APPROVED
    while a cash request only reaches WAITING_TRANSFER.
    """
    if transition not in (Transition.PM_DECISION, Transition.GM_DECISION):
        msg = f"{transition.value} is not a decision"
        raise ValueError(msg)

    authorize(auth.role, transition)

    money_request = await get_request_or_404(session, request_id, kind)
    expected = ensure_expected_status(money_request, transition)
    new_status = next_status(RequestKind(money_request.kind), expected, approve)

    now = datetime.now(UTC)
    if transition == Transition.PM_DECISION:
        extra = {"pm_decided_by": auth.user_id, "pm_decided_at": now}
    else:
        extra = {"gm_decided_by": auth.user_id, "gm_decided_at": now}

    return await apply_transition(
        session,
        auth,
        money_request,
        transition,
        new_status,
        AuditAction.APPROVE if approve else AuditAction.REJECT,
        extra,
        notifier,
    )


async def pm_decision(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    approve: bool,
    notifier: NotificationDispatcher,
    kind: RequestKind | None = None,
) -> MoneyRequestResponse:
    """First-stage decision by a project manager."""
    return await decide(session, auth, request_id, Transition.PM_DECISION, approve, notifier, kind)


async def gm_decision(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    approve: bool,
    notifier: NotificationDispatcher,
    kind: RequestKind | None = None,
) -> MoneyRequestResponse:
    """Second-stage decision by the general manager."""
    return await decide(session, auth, request_id, Transition.GM_DECISION, approve, notifier, kind)
