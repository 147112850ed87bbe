"""Tests for user provisioning and activation."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from custody.exceptions import AppError
from custody.models.audit import AuditLog
from custody.models.enums import Role
from custody.models.user import User
from custody.schemas.auth import AuthContext
from custody.schemas.user import ProvisionUserRequest
from custody.services import user as user_service
from tests.factories import add_user, headers_for, manager_headers

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import async_sessionmaker

PM_HEADERS = manager_headers(Role.PROJECT_MANAGER)
GM_HEADERS = manager_headers(Role.GENERAL_MANAGER)


async def test_provision_user(async_client: AsyncClient) -> None:
    user_id = uuid.uuid4()
    resp = await async_client.post(
        "/users",
        json={"id": str(user_id), "name": "Sara Ahmed", "email": "sara@example.com", "role": "employee"},
        headers=GM_HEADERS,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["id"] == str(user_id)
    assert data["role"] == "employee"
    assert data["is_active"] is True


async def test_provision_user_defaults_to_employee(async_client: AsyncClient) -> None:
    resp = await async_client.post("/users", json={"name": "Omar Faisal"}, headers=GM_HEADERS)
    assert resp.status_code == 201
    assert resp.json()["role"] == "employee"


async def test_provision_user_requires_general_manager(async_client: AsyncClient) -> None:
    resp = await async_client.post("/users", json={"name": "Omar Faisal"}, headers=PM_HEADERS)
    assert resp.status_code == 403


async def test_provision_existing_id_conflicts(async_client: AsyncClient, db_session: AsyncSession) -> None:
    existing = await add_user(db_session, "Sara Ahmed")
    resp = await async_client.post(
        "/users",
        json={"id": str(existing.id), "name": "Someone Else"},
        headers=GM_HEADERS,
    )
    assert resp.status_code == 409


async def test_provision_unknown_role_rejected(async_client: AsyncClient) -> None:
    resp = await async_client.post("/users", json={"name": "X", "role": "director"}, headers=GM_HEADERS)
    assert resp.status_code == 422


async def test_list_users_filters(async_client: AsyncClient, db_session: AsyncSession) -> None:
    await add_user(db_session, "Sara Ahmed")
    await add_user(db_session, "Former Staff", is_active=False)
    await add_user(db_session, "Noura Saleh", Role.PROJECT_MANAGER)

    resp = await async_client.get("/users", headers=PM_HEADERS)
    assert resp.json()["total"] == 3

    resp = await async_client.get("/users", params={"role": "employee", "is_active": "true"}, headers=PM_HEADERS)
    data = resp.json()
    assert data["total"] == 1
    assert data["items"][0]["name"] == "Sara Ahmed"


async def test_list_users_forbidden_for_employee(async_client: AsyncClient) -> None:
    resp = await async_client.get("/users", headers=headers_for(uuid.uuid4(), Role.EMPLOYEE))
    assert resp.status_code == 403


async def test_get_own_profile(async_client: AsyncClient, db_session: AsyncSession) -> None:
    employee = await add_user(db_session, "Sara Ahmed")
    resp = await async_client.get(f"/users/{employee.id}", headers=headers_for(employee.id, Role.EMPLOYEE))
    assert resp.status_code == 200
    assert resp.json()["name"] == "Sara Ahmed"

    resp = await async_client.get(f"/users/{employee.id}", headers=headers_for(uuid.uuid4(), Role.EMPLOYEE))
    assert resp.status_code == 403


async def test_get_unknown_user_returns_404(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"/users/{uuid.uuid4()}", headers=GM_HEADERS)
    assert resp.status_code == 404


async def test_deactivate_user_is_audited(async_client: AsyncClient, db_session: AsyncSession) -> None:
    employee = await add_user(db_session, "Sara Ahmed")
    resp = await async_client.patch(f"/users/{employee.id}/active", json={"is_active": False}, headers=PM_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False

    resp = await async_client.get(
        "/audit-log",
        params={"entity_type": "USER", "entity_id": str(employee.id)},
        headers=GM_HEADERS,
    )
    entries = resp.json()["items"]
    assert len(entries) == 1
    assert entries[0]["action"] == "UPDATE"
    assert entries[0]["before_json"]["is_active"] is True
    assert entries[0]["after_json"]["is_active"] is False


async def test_audit_log_forbidden_for_employee(async_client: AsyncClient) -> None:
    resp = await async_client.get("/audit-log", headers=headers_for(uuid.uuid4(), Role.EMPLOYEE))
    assert resp.status_code == 403


async def test_concurrent_provision_of_same_id_conflicts(
    session_factory: async_sessionmaker[AsyncSession],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    gm = AuthContext(user_id=uuid.uuid4(), role=Role.GENERAL_MANAGER)
    payload = ProvisionUserRequest(id=uuid.uuid4(), name="Sara Ahmed")

    original_get = AsyncSession.get

    async with session_factory() as first, session_factory() as second:

        async def _get(self: AsyncSession, *args: Any, **kwargs: Any) -> Any:
            if self is not first:
                return await original_get(self, *args, **kwargs)
            # The other provisioning commits between this existence check and the insert.
            await user_service.provision_user(second, gm, payload)
            return None

        monkeypatch.setattr(AsyncSession, "get", _get)
        with pytest.raises(AppError) as exc_info:
            await user_service.provision_user(first, gm, payload)
        assert exc_info.value.status_code == 409

    async with session_factory() as check:
        assert await check.get(User, payload.id) is not None
        count = await check.execute(select(func.count()).select_from(AuditLog))
        assert count.scalar_one() == 1
