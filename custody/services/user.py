# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from custody.exceptions import AppError, NotFoundError
from custody.models.enums import AuditAction, AuditEntityType, Role
from custody.models.user import User
from custody.schemas.user import UserListResponse, UserResponse
from custody.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from custody.schemas.auth import AuthContext
    from custody.schemas.user import ProvisionUserRequest


def build_user_response(user: User) -> UserResponse:
    """Map a user model to its response schema."""
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=Role(user.role),
        is_active=user.is_active,
        created_at=user.created_at,
    )


async def get_user_or_404(session: AsyncSession, user_id: uuid.UUID) -> User:
    """Fetch a user by ID. Raises 404 if not found."""
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def provision_user(
    session: AsyncSession,
    auth: AuthContext,
    payload: ProvisionUserRequest,
) -> UserResponse:
    """Create a user record for an identity that already exists upstream."""
    if payload.id is not None and await session.get(User, payload.id) is not None:
        raise AppError("User already exists", status_code=409)

    user = User(name=payload.name.strip(), email=payload.email, role=payload.role.value)
    if payload.id is not None:
        user.id = payload.id
    session.add(user)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise AppError("User already exists", status_code=409) from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.USER,
        entity_id=user.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(user),
    )

    await session.commit()
    await session.refresh(user)
    return build_user_response(user)


async def set_user_active(
    session: AsyncSession,
    auth: AuthContext,
    user_id: uuid.UUID,
    is_active: bool,
) -> UserResponse:
    """Activate or deactivate a user. Users are never deleted."""
    user = await get_user_or_404(session, user_id)
    before = model_to_audit_dict(user)
    user.is_active = is_active
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.USER,
        entity_id=user.id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(user),
    )

    await session.commit()
    await session.refresh(user)
    return build_user_response(user)


async def get_user(session: AsyncSession, user_id: uuid.UUID) -> UserResponse:
    """Get a single user."""
    return build_user_response(await get_user_or_404(session, user_id))


async def list_users(
    session: AsyncSession,
    *,
    role: Role | None = None,
    is_active: bool | None = None,
    offset: int = 0,
    limit: int = 50,
) -> UserListResponse:
    """List users ordered by name."""
    filters = []
    if role is not None:
        filters.append(col(User.role) == role.value)
    if is_active is not None:
        filters.append(col(User.is_active).is_(is_active))

    count_result = await session.execute(select(func.count()).select_from(User).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(User).where(*filters).order_by(col(User.name)).offset(offset).limit(limit)
    )
    return UserListResponse(
        items=[build_user_response(u) for u in result.scalars().all()],
        total=total,
    )
