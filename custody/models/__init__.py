from sqlmodel import SQLModel

from custody.models.audit import AuditLog
from custody.models.base import TimestampMixin, UUIDBase
from custody.models.enums import (
    AuditAction,
    AuditEntityType,
    RequestKind,
    RequestStatus,
    Role,
    Transition,
)
from custody.models.project import Project, ProjectMembership
from custody.models.request import MoneyRequest
from custody.models.user import User

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "MoneyRequest",
    "Project",
    "ProjectMembership",
    "RequestKind",
    "RequestStatus",
    "Role",
    "SQLModel",
    "TimestampMixin",
    "Transition",
    "UUIDBase",
    "User",
]
