import asyncio

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from ptcoach.core import exceptions
from ptcoach.models.enums import RequestStatus
from ptcoach.models.trainee_request import TraineeRequest
from ptcoach.models.user import Supervision
from ptcoach.services.relationship_service import RelationshipService
from tests.conftest import API, seed_pending_request


async def _submit(client: AsyncClient, pt: dict, trainee: dict, service_name: str = "Leg Day"):
    return await client.post(
        f"{API}/trainers/{pt['id']}/requests",
        json={"service_name": service_name},
        headers=trainee["headers"],
    )


@pytest.mark.asyncio
async def test_request_and_approve_flow(client: AsyncClient, pt, trainee):
    resp = await _submit(client, pt, trainee)
    assert resp.status_code == 201
    request = resp.json()["data"]
    assert request["status"] == "pending"
    assert request["service_name"] == "Leg Day"
    assert request["response_date"] is None

    resp = await client.get(
        f"{API}/trainers/{pt['id']}/requests", params={"status": "pending"}, headers=pt["headers"]
    )
    assert resp.status_code == 200
    pending = resp.json()["data"]
    assert [r["id"] for r in pending] == [request["id"]]
    assert pending[0]["trainee"]["email"] == "trainee@gym.com"

    resp = await client.post(f"{API}/trainers/{pt['id']}/requests/{trainee['id']}/approve", headers=pt["headers"])
    assert resp.status_code == 200
    approved = resp.json()["data"]
    assert approved["id"] == request["id"]
    assert approved["status"] == "approved"
    assert approved["response_date"] is not None

    resp = await client.get(f"{API}/trainers/{pt['id']}/trainees", headers=pt["headers"])
    assert [t["id"] for t in resp.json()["data"]] == [trainee["id"]]

    resp = await client.get(f"{API}/users/me", headers=trainee["headers"])
    assert resp.json()["data"]["personal_trainer_id"] == pt["id"]


@pytest.mark.asyncio
async def test_second_approve_is_not_found(client: AsyncClient, pt, trainee):
    await _submit(client, pt, trainee)
    url = f"{API}/trainers/{pt['id']}/requests/{trainee['id']}/approve"
    assert (await client.post(url, headers=pt["headers"])).status_code == 200

    resp = await client.post(url, headers=pt["headers"])
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_reject_request(client: AsyncClient, pt, trainee):
    await _submit(client, pt, trainee)

    resp = await client.post(f"{API}/trainers/{pt['id']}/requests/{trainee['id']}/reject", headers=pt["headers"])
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "rejected"

    resp = await client.post(f"{API}/trainers/{pt['id']}/requests/{trainee['id']}/approve", headers=pt["headers"])
    assert resp.status_code == 404

    resp = await client.get(f"{API}/trainers/{pt['id']}/trainees", headers=pt["headers"])
    assert resp.json()["count"] == 0

    resp = await client.get(
        f"{API}/trainers/{pt['id']}/requests", params={"status": "rejected"}, headers=pt["headers"]
    )
    assert resp.json()["count"] == 1


@pytest.mark.asyncio
async def test_resubmitted_requests_keep_supervision_unique(client: AsyncClient, pt, trainee):
    first = (await _submit(client, pt, trainee, "Strength")).json()["data"]
    second = (await _submit(client, pt, trainee, "Mobility")).json()["data"]
    assert first["id"] != second["id"]

    url = f"{API}/trainers/{pt['id']}/requests/{trainee['id']}/approve"
    resp = await client.post(url, headers=pt["headers"])
    assert resp.json()["data"]["id"] == second["id"]

    resp = await client.get(
        f"{API}/trainers/{pt['id']}/requests", params={"status": "pending"}, headers=pt["headers"]
    )
    assert [r["id"] for r in resp.json()["data"]] == [first["id"]]

    assert (await client.post(url, headers=pt["headers"])).status_code == 200

    resp = await client.get(f"{API}/trainers/{pt['id']}/trainees", headers=pt["headers"])
    assert resp.json()["count"] == 1

    resp = await client.get(f"{API}/trainers/{pt['id']}/requests", headers=pt["headers"])
    assert {r["status"] for r in resp.json()["data"]} == {"approved"}


@pytest.mark.asyncio
async def test_request_role_checks(client: AsyncClient, register_user, pt, trainee):
    other_trainee = await register_user("trainee")

    resp = await _submit(client, other_trainee, trainee)
    assert resp.status_code == 403
    assert resp.json()["code"] == "ROLE_ERROR"

    resp = await client.post(
        f"{API}/trainers/{pt['id']}/requests", json={"service_name": "Leg Day"}, headers=pt["headers"]
    )
    assert resp.status_code == 403
    assert resp.json()["code"] == "ROLE_ERROR"

    resp = await client.post(
        f"{API}/trainers/00000000-0000-0000-0000-000000000000/requests",
        json={"service_name": "Leg Day"},
        headers=trainee["headers"],
    )
    assert resp.status_code == 404

    resp = await _submit(client, pt, trainee, service_name="   ")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_pt_cannot_manage_another_pts_requests(client: AsyncClient, register_user, pt, trainee):
    rival = await register_user("pt")
    await _submit(client, pt, trainee)

    resp = await client.get(f"{API}/trainers/{pt['id']}/requests", headers=rival["headers"])
    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"

    resp = await client.post(f"{API}/trainers/{pt['id']}/requests/{trainee['id']}/approve", headers=rival["headers"])
    assert resp.status_code == 403

    resp = await client.post(f"{API}/trainers/{rival['id']}/requests/{trainee['id']}/approve", headers=rival["headers"])
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_remove_trainee(client: AsyncClient, pt, trainee, supervise):
    await supervise(pt, trainee)

    url = f"{API}/trainers/{pt['id']}/trainees/{trainee['id']}"
    resp = await client.delete(url, headers=pt["headers"])
    assert resp.status_code == 200

    resp = await client.get(f"{API}/users/me", headers=trainee["headers"])
    assert resp.json()["data"]["personal_trainer_id"] is None

    resp = await client.delete(url, headers=pt["headers"])
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_trainers_with_counts(client: AsyncClient, register_user, pt, trainee, supervise):
    await register_user("pt", email="solo@gym.com", last_name="Abbott")
    second_trainee = await register_user("trainee")
    await supervise(pt, trainee)
    await supervise(pt, second_trainee)

    resp = await client.get(f"{API}/trainers", headers=trainee["headers"])
    assert resp.status_code == 200
    counts = {t["email"]: t["trainee_count"] for t in resp.json()["data"]}
    assert counts == {"coach@gym.com": 2, "solo@gym.com": 0}


@pytest.mark.asyncio
async def test_racing_approvals_approve_once(file_database):
    pt, trainee = await seed_pending_request(file_database)

    async def _approve():
        async with file_database.session() as db:
            return await RelationshipService.approve_request(db, pt.id, trainee.id)

    results = await asyncio.gather(_approve(), _approve(), return_exceptions=True)
    approved = [r for r in results if isinstance(r, TraineeRequest)]
    missing = [r for r in results if isinstance(r, exceptions.NotFoundError)]
    assert len(approved) == 1
    assert len(missing) == 1

    async with file_database.session() as db:
        statuses = (await db.execute(select(TraineeRequest.status))).scalars().all()
        supervised = await db.scalar(select(func.count()).select_from(Supervision))
    assert statuses == [RequestStatus.APPROVED]
    assert supervised == 1
