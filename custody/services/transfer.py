# ruff: noqa: TC003
"""Transfer completion: the only step that makes a custody advance count toward a balance."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from custody.exceptions import ValidationError
from custody.models.enums import AuditAction, RequestKind, Transition
from custody.services.authorization import authorize
from custody.services.request import get_request_or_404
from custody.services.transition import apply_transition, ensure_expected_status, next_status

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from custody.schemas.auth import AuthContext
    from custody.schemas.request import MoneyRequestResponse
    from custody.services.notification import NotificationDispatcher


async def complete_transfer(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    proof_reference: str,
    notifier: NotificationDispatcher,
) -> MoneyRequestResponse:
    """Record the transfer proof and finalize a cash request as APPROVED.

    The proof must already be stored; this handler never uploads.
    """
    authorize(auth.role, Transition.COMPLETE_TRANSFER)

    proof = (proof_reference or "").strip()
    if not proof:
        raise ValidationError("A transfer proof is required")

    money_request = await get_request_or_404(session, request_id, RequestKind.CASH_REQUEST)
    expected = ensure_expected_status(money_request, Transition.COMPLETE_TRANSFER)
    new_status = next_status(RequestKind.CASH_REQUEST, expected, approve=True)

    return await apply_transition(
        session,
        auth,
        money_request,
        Transition.COMPLETE_TRANSFER,
        new_status,
        AuditAction.COMPLETE_TRANSFER,
        {
            "transfer_proof_url": proof,
            "transferred_by": auth.user_id,
            "transferred_at": datetime.now(UTC),
        },
        notifier,
    )
