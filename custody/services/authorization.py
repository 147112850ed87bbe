"""Role gate for request transitions and role-string parsing."""

from __future__ import annotations

import logging

from custody.exceptions import AuthorizationError
from custody.models.enums import Role, Transition

logger = logging.getLogger(__name__)

# Exactly one role may invoke each transition.
TRANSITION_ROLES: dict[Transition, Role] = {
    Transition.PM_DECISION: Role.PROJECT_MANAGER,
    Transition.GM_DECISION: Role.GENERAL_MANAGER,
    Transition.COMPLETE_TRANSFER: Role.GENERAL_MANAGER,
}

# Role codes stored by the legacy mobile client.
_LEGACY_ROLE_CODES: dict[str, Role] = {
    "pm": Role.PROJECT_MANAGER,
    "gm": Role.GENERAL_MANAGER,
}


def required_role(transition: Transition) -> Role:
    """Return the single role permitted to invoke ``transition``."""
    return TRANSITION_ROLES[transition]


def authorize(role: Role, transition: Transition) -> None:
    """Permit or deny ``role`` performing ``transition``. Never touches state."""
    expected = TRANSITION_ROLES[transition]
    if role != expected:
        raise AuthorizationError(f"{transition.value} requires role {expected.value}, got {role.value}")


def require_role(role: Role, *allowed: Role) -> None:
    """Deny unless ``role`` is one of ``allowed``."""
    if role not in allowed:
        names = ", ".join(r.value for r in allowed)
        raise AuthorizationError(f"This operation requires one of: {names}")


def parse_role(value: str | None, *, strict: bool = True) -> Role:
    """Turn a role string into a :class:`Role`.

    A missing value means ``employee``. Unknown values raise
    :class:`AuthorizationError` in strict mode and fall back to ``employee``
    otherwise.
    """
    if value is None or not value.strip():
        return Role.EMPLOYEE
    normalized = value.strip().lower()
    if normalized in _LEGACY_ROLE_CODES:
        return _LEGACY_ROLE_CODES[normalized]
    try:
        return Role(normalized)
    except ValueError:
        if strict:
            raise AuthorizationError(f"Unknown role: {value!r}") from None
        logger.warning("Unknown role %r treated as %s", value, Role.EMPLOYEE.value)
        return Role.EMPLOYEE
