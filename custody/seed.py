"""Seed script for development data.

Run with:  python -m custody.seed

Safe to re-run: users conflict on their fixed ids, projects are matched by
name, memberships by employee, and requests are only seeded into an empty
database.
"""

from __future__ import annotations

import asyncio
import sys

import httpx

BASE_URL = "http://localhost:8000"

# Well-known user UUIDs
GM_ID = "00000000-0000-0000-0000-000000000001"
PM_ID = "00000000-0000-0000-0000-000000000002"
SARA_ID = "00000000-0000-0000-0000-000000000003"
OMAR_ID = "00000000-0000-0000-0000-000000000004"
LINA_ID = "00000000-0000-0000-0000-000000000005"

GM_HEADERS = {"X-User-Id": GM_ID, "X-Role": "general_manager"}
PM_HEADERS = {"X-User-Id": PM_ID, "X-Role": "project_manager"}

USERS = [
    {"id": GM_ID, "name": "Khalid Al-Harbi", "email": "gm@example.com", "role": "general_manager"},
    {"id": PM_ID, "name": "Noura Saleh", "email": "pm@example.com", "role": "project_manager"},
    {"id": SARA_ID, "name": "Sara Ahmed", "email": "sara@example.com", "role": "employee"},
    {"id": OMAR_ID, "name": "Omar Faisal", "email": "omar@example.com", "role": "employee"},
    {"id": LINA_ID, "name": "Lina Haddad", "email": "lina@example.com", "role": "employee"},
]

PROJECTS = [
    {"name": "Riyadh Warehouse Fit-out", "description": "Interior works for the new warehouse"},
    {"name": "Jeddah Site Survey", "description": "Topographic survey and soil testing"},
]

# (employee, project index)
MEMBERSHIPS = [
    (SARA_ID, 0),
    (SARA_ID, 1),
    (OMAR_ID, 0),
    (LINA_ID, 1),
]


def _employee_headers(employee_id: str) -> dict[str, str]:
    return {"X-User-Id": employee_id, "X-Role": "employee"}


async def _safe_post(
    client: httpx.AsyncClient,
    url: str,
    json: dict,
    label: str,
    headers: dict[str, str],
) -> dict | None:
    """POST with 409-conflict tolerance for idempotency."""
    resp = await client.post(url, json=json, headers=headers)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    if resp.status_code == 409:
        print(f"  [SKIP] {label} (already exists)")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def seed_users(client: httpx.AsyncClient) -> None:
    """Provision the well-known users."""
    print("\n--- Seeding users ---")
    for user in USERS:
        await _safe_post(client, f"{BASE_URL}/users", user, f"{user['name']} ({user['role']})", GM_HEADERS)


async def _existing_project_ids(client: httpx.AsyncClient) -> dict[str, str]:
    """Map project name to id for projects already in the database."""
    resp = await client.get(f"{BASE_URL}/projects", params={"limit": 100}, headers=PM_HEADERS)
    resp.raise_for_status()
    return {item["name"]: item["id"] for item in resp.json()["items"]}


async def seed_projects(client: httpx.AsyncClient) -> list[str]:
    """Create missing projects and return their IDs in PROJECTS order."""
    print("\n--- Seeding projects ---")
    existing = await _existing_project_ids(client)
    ids: list[str] = []
    for project in PROJECTS:
        if project["name"] in existing:
            print(f"  [SKIP] {project['name']} (already exists)")
            ids.append(existing[project["name"]])
            continue
        data = await _safe_post(client, f"{BASE_URL}/projects", project, project["name"], PM_HEADERS)
        if data is not None:
            ids.append(data["id"])
    return ids


async def seed_memberships(client: httpx.AsyncClient, project_ids: list[str]) -> None:
    """Link employees to their projects."""
    print("\n--- Seeding memberships ---")
    linked: dict[str, set[str]] = {}
    for employee_id, project_index in MEMBERSHIPS:
        if project_index >= len(project_ids):
            continue
        if employee_id not in linked:
            resp = await client.get(
                f"{BASE_URL}/employees/{employee_id}/projects",
                params={"active_only": False},
                headers=PM_HEADERS,
            )
            resp.raise_for_status()
            linked[employee_id] = set(resp.json()["project_ids"])
        if project_ids[project_index] in linked[employee_id]:
            print(f"  [SKIP] {employee_id} -> project {project_index} (already linked)")
            continue
        await _safe_post(
            client,
            f"{BASE_URL}/memberships",
            {"employee_id": employee_id, "project_id": project_ids[project_index]},
            f"{employee_id} -> project {project_index}",
            PM_HEADERS,
        )


async def seed_requests(client: httpx.AsyncClient, project_ids: list[str]) -> None:
    """Walk a few requests through the approval chain so every status is represented."""
    print("\n--- Seeding requests ---")
    if not project_ids:
        print("  [SKIP] no projects")
        return
    existing = await client.get(f"{BASE_URL}/requests", params={"limit": 1}, headers=GM_HEADERS)
    existing.raise_for_status()
    if existing.json()["total"] > 0:
        print("  [SKIP] requests already seeded")
        return
    project = project_ids[0]

    # Fully transferred custody advance for Sara.
    cash = await _safe_post(
        client,
        f"{BASE_URL}/cash-requests",
        {"project_id": project, "amount": "5000.00", "reason": "Site materials advance"},
        "Sara cash request 5000",
        _employee_headers(SARA_ID),
    )
    if cash is not None:
        cash_url = f"{BASE_URL}/cash-requests/{cash['id']}"
        await _safe_post(client, f"{cash_url}/pm-decision", {"approve": True}, "  PM approve", PM_HEADERS)
        await _safe_post(client, f"{cash_url}/gm-decision", {"approve": True}, "  GM approve", GM_HEADERS)
        upload = await client.post(
            f"{BASE_URL}/uploads/transfer_proofs",
            params={"filename": "transfer.txt"},
            content=b"bank transfer reference 0001",
            headers=GM_HEADERS,
        )
        if upload.status_code == 201:
            await _safe_post(
                client,
                f"{cash_url}/complete-transfer",
                {"proof_reference": upload.json()["url"]},
                "  GM complete transfer",
                GM_HEADERS,
            )

    # Approved expense for Sara.
    receipt = await client.post(
        f"{BASE_URL}/uploads/receipts",
        params={"filename": "receipt.txt"},
        content=b"hardware store receipt",
        headers=_employee_headers(SARA_ID),
    )
    if receipt.status_code == 201:
        expense = await _safe_post(
            client,
            f"{BASE_URL}/expenses",
            {
                "project_id": project,
                "amount": "1250.50",
                "reason": "Paint and fixtures",
                "receipt_url": receipt.json()["url"],
            },
            "Sara expense 1250.50",
            _employee_headers(SARA_ID),
        )
        if expense is not None:
            expense_url = f"{BASE_URL}/expenses/{expense['id']}"
            await _safe_post(client, f"{expense_url}/pm-decision", {"approve": True}, "  PM approve", PM_HEADERS)
            await _safe_post(client, f"{expense_url}/gm-decision", {"approve": True}, "  GM approve", GM_HEADERS)

    # Rejected advance for Omar and one left pending.
    rejected = await _safe_post(
        client,
        f"{BASE_URL}/cash-requests",
        {"project_id": project, "amount": "900.00", "reason": "Fuel"},
        "Omar cash request 900",
        _employee_headers(OMAR_ID),
    )
    if rejected is not None:
        await _safe_post(
            client,
            f"{BASE_URL}/cash-requests/{rejected['id']}/pm-decision",
            {"approve": False},
            "  PM reject",
            PM_HEADERS,
        )
    await _safe_post(
        client,
        f"{BASE_URL}/cash-requests",
        {"project_id": project, "amount": "300.00", "reason": "Tools"},
        "Omar cash request 300 (pending)",
        _employee_headers(OMAR_ID),
    )


async def main() -> None:
    print("=" * 60)
    print("  Custody Desk - Development Seed Script")
    print("=" * 60)

    async with httpx.AsyncClient(timeout=30.0) as client:
        # Health check
        try:
            resp = await client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            print("Make sure the API is running (uvicorn custody.main:app)")
            sys.exit(1)

        await seed_users(client)
        project_ids = await seed_projects(client)
        await seed_memberships(client, project_ids)
        await seed_requests(client, project_ids)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
