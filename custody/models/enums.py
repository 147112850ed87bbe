from __future__ import annotations

import enum


class Role(enum.StrEnum):
    """Role of an actor in the approval workflow."""

    EMPLOYEE = "employee"
    PROJECT_MANAGER = "project_manager"
    GENERAL_MANAGER = "general_manager"


class RequestKind(enum.StrEnum):
    """Kind tag shared by custody advances and expense claims."""

    CASH_REQUEST = "CASH_REQUEST"
    EXPENSE = "EXPENSE"


class RequestStatus(enum.StrEnum):
    """State machine for money requests."""

    PENDING_PM = "PENDING_PM"
    PENDING_GM = "PENDING_GM"
    WAITING_TRANSFER = "WAITING_TRANSFER"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.APPROVED, RequestStatus.REJECTED)


class Transition(enum.StrEnum):
    """Role-gated operations that move a request forward."""

    PM_DECISION = "PM_DECISION"
    GM_DECISION = "GM_DECISION"
    COMPLETE_TRANSFER = "COMPLETE_TRANSFER"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    USER = "USER"
    PROJECT = "PROJECT"
    MEMBERSHIP = "MEMBERSHIP"
    REQUEST = "REQUEST"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    COMPLETE_TRANSFER = "COMPLETE_TRANSFER"
