"""Tests for the audit trail search."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from custody.exceptions import ValidationError
from custody.models.enums import Role
from custody.services.audit import day_window
from tests.factories import headers_for

if TYPE_CHECKING:
    from httpx import AsyncClient

GM_ID = uuid.uuid4()
GM_HEADERS = headers_for(GM_ID, Role.GENERAL_MANAGER)
PM_HEADERS = headers_for(uuid.uuid4(), Role.PROJECT_MANAGER)


async def _provision(async_client: AsyncClient, name: str) -> str:
    resp = await async_client.post("/users", json={"name": name}, headers=GM_HEADERS)
    assert resp.status_code == 201
    return resp.json()["id"]


# ---------------------------------------------------------------------------
# Date range
# ---------------------------------------------------------------------------


def test_day_window_includes_end_day() -> None:
    lower, upper = day_window(date(2026, 3, 1), date(2026, 3, 1))
    assert lower == datetime(2026, 3, 1, tzinfo=UTC)
    assert upper == datetime(2026, 3, 2, tzinfo=UTC)
    assert day_window(None, None) == (None, None)


def test_day_window_rejects_inverted_range() -> None:
    with pytest.raises(ValidationError):
        day_window(date(2026, 3, 2), date(2026, 3, 1))


async def test_single_day_range_returns_todays_entries(async_client: AsyncClient) -> None:
    user_id = await _provision(async_client, "Sara Ahmed")
    today = datetime.now(UTC).date().isoformat()

    resp = await async_client.get(
        "/audit-log",
        params={"start_date": today, "end_date": today},
        headers=PM_HEADERS,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 1
    assert data["items"][0]["entity_id"] == user_id
    assert data["items"][0]["action"] == "CREATE"


async def test_range_before_today_is_empty(async_client: AsyncClient) -> None:
    await _provision(async_client, "Sara Ahmed")
    yesterday = (datetime.now(UTC).date() - timedelta(days=1)).isoformat()

    resp = await async_client.get("/audit-log", params={"end_date": yesterday}, headers=PM_HEADERS)
    assert resp.status_code == 200
    assert resp.json() == {"items": [], "total": 0}


async def test_inverted_range_rejected(async_client: AsyncClient) -> None:
    resp = await async_client.get(
        "/audit-log",
        params={"start_date": "2026-03-02", "end_date": "2026-03-01"},
        headers=PM_HEADERS,
    )
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Entity and action filters
# ---------------------------------------------------------------------------


async def test_filter_by_entity_type_action_and_actor(async_client: AsyncClient) -> None:
    sara = await _provision(async_client, "Sara Ahmed")
    await _provision(async_client, "Omar Faisal")
    resp = await async_client.patch(f"/users/{sara}/active", json={"is_active": False}, headers=PM_HEADERS)
    assert resp.status_code == 200

    resp = await async_client.get(
        "/audit-log",
        params={"entity_type": "USER", "action": "CREATE", "actor_id": str(GM_ID)},
        headers=PM_HEADERS,
    )
    data = resp.json()
    assert data["total"] == 2
    assert {item["action"] for item in data["items"]} == {"CREATE"}

    resp = await async_client.get("/audit-log", params={"action": "UPDATE"}, headers=PM_HEADERS)
    items = resp.json()["items"]
    assert [item["entity_id"] for item in items] == [sara]

    resp = await async_client.get("/audit-log", params={"entity_type": "REQUEST"}, headers=PM_HEADERS)
    assert resp.json()["total"] == 0


async def test_pagination_is_newest_first(async_client: AsyncClient) -> None:
    first = await _provision(async_client, "Sara Ahmed")
    second = await _provision(async_client, "Omar Faisal")

    resp = await async_client.get("/audit-log", params={"limit": 1}, headers=PM_HEADERS)
    data = resp.json()
    assert data["total"] == 2
    assert [item["entity_id"] for item in data["items"]] == [second]

    resp = await async_client.get("/audit-log", params={"limit": 1, "offset": 1}, headers=PM_HEADERS)
    assert [item["entity_id"] for item in resp.json()["items"]] == [first]


@pytest.mark.parametrize(
    "params",
    [{"entity_type": "INVOICE"}, {"action": "DELETE"}, {"entity_type": "user"}],
)
async def test_unknown_entity_type_or_action_rejected(async_client: AsyncClient, params: dict[str, str]) -> None:
    resp = await async_client.get("/audit-log", params=params, headers=PM_HEADERS)
    assert resp.status_code == 422
    assert resp.json()["error"] == "ValidationError"
