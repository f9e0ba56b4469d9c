import pytest
from httpx import AsyncClient

from tests.conftest import API


@pytest.mark.asyncio
async def test_create_template(client: AsyncClient, pt, create_template):
    template = await create_template(
        pt,
        title="Leg Day",
        exercises=[
            {"name": "Squat", "sets": 5, "reps": "5"},
            {"name": "Lunge", "sets": 3, "reps": "12 each leg", "notes": "Dumbbells"},
        ],
    )
    assert template["title"] == "Leg Day"
    assert template["created_by"] == pt["id"]
    assert [e["position"] for e in template["exercises"]] == [0, 1]
    assert template["exercises"][1]["notes"] == "Dumbbells"
    assert template["difficulty"] == "beginner"


@pytest.mark.asyncio
async def test_trainee_cannot_create_template(client: AsyncClient, trainee):
    resp = await client.post(
        f"{API}/workouts/templates",
        json={"title": "Sneaky", "exercises": [{"name": "Squat", "sets": 3, "reps": "10"}]},
        headers=trainee["headers"],
    )
    assert resp.status_code == 403
    assert resp.json()["code"] == "ROLE_ERROR"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"title": "Empty", "exercises": []}, "At least one exercise is required"),
        ({"title": "   ", "exercises": [{"name": "Squat", "sets": 3, "reps": "10"}]}, "Title is required"),
        (
            {"title": "No name", "exercises": [{"name": "Squat", "sets": 3, "reps": "10"}, {"sets": 3, "reps": "10"}]},
            "Exercise 2: name is required",
        ),
        ({"title": "Zero sets", "exercises": [{"name": "Squat", "sets": 0, "reps": "10"}]}, "Exercise 1: sets must be a positive number"),
        ({"title": "No reps", "exercises": [{"name": "Squat", "sets": 3, "reps": " "}]}, "Exercise 1: reps are required"),
    ],
)
async def test_create_template_validation(client: AsyncClient, pt, payload, message):
    resp = await client.post(f"{API}/workouts/templates", json=payload, headers=pt["headers"])
    assert resp.status_code == 400
    assert resp.json()["detail"] == message
    assert resp.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_list_templates_returns_own_templates(client: AsyncClient, register_user, pt, create_template):
    rival = await register_user("pt")
    await create_template(pt, title="Push")
    await create_template(pt, title="Pull")
    await create_template(rival, title="Rival Legs")

    resp = await client.get(f"{API}/workouts/templates", headers=pt["headers"])
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 2
    assert [t["title"] for t in body["data"]] == ["Pull", "Push"]


@pytest.mark.asyncio
async def test_template_ownership(client: AsyncClient, register_user, pt, create_template):
    rival = await register_user("pt")
    template = await create_template(pt)
    url = f"{API}/workouts/templates/{template['id']}"

    assert (await client.get(url, headers=pt["headers"])).status_code == 200
    resp = await client.get(url, headers=rival["headers"])
    assert resp.status_code == 403
    assert (await client.patch(url, json={"title": "Mine now"}, headers=rival["headers"])).status_code == 403
    assert (await client.delete(url, headers=rival["headers"])).status_code == 403

    resp = await client.get(f"{API}/workouts/templates/00000000-0000-0000-0000-000000000000", headers=pt["headers"])
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_template_keeps_assignment_snapshot(
    client: AsyncClient, pt, trainee, supervise, create_template, assign
):
    await supervise(pt, trainee)
    template = await create_template(pt)
    assignment = await assign(pt, template["id"], trainee)

    resp = await client.patch(
        f"{API}/workouts/templates/{template['id']}",
        json={"title": "Full Body B", "exercises": [{"name": "Deadlift", "sets": 3, "reps": "5"}]},
        headers=pt["headers"],
    )
    assert resp.status_code == 200
    updated = resp.json()["data"]
    assert updated["title"] == "Full Body B"
    assert [e["name"] for e in updated["exercises"]] == ["Deadlift"]
    assert updated["difficulty"] == "beginner"

    resp = await client.get(f"{API}/workouts/assignments/{assignment['id']}", headers=trainee["headers"])
    progress = resp.json()["data"]["progress"]
    assert [p["exercise_name"] for p in progress] == ["Squat", "Bench Press", "Plank"]


@pytest.mark.asyncio
async def test_update_template_rejects_bad_exercises(client: AsyncClient, pt, create_template):
    template = await create_template(pt)
    resp = await client.patch(
        f"{API}/workouts/templates/{template['id']}", json={"exercises": []}, headers=pt["headers"]
    )
    assert resp.status_code == 400

    resp = await client.get(f"{API}/workouts/templates/{template['id']}", headers=pt["headers"])
    assert len(resp.json()["data"]["exercises"]) == 3


@pytest.mark.asyncio
async def test_delete_template_removes_assignments(
    client: AsyncClient, pt, trainee, supervise, create_template, assign
):
    await supervise(pt, trainee)
    template = await create_template(pt, title="Leg Day")
    assignment = await assign(pt, template["id"], trainee)
    await assign(pt, template["id"], trainee)

    resp = await client.delete(f"{API}/workouts/templates/{template['id']}", headers=pt["headers"])
    assert resp.status_code == 200
    assert resp.json()["data"]["deleted_assignments"] == 2

    resp = await client.get(f"{API}/workouts/assignments/{assignment['id']}", headers=trainee["headers"])
    assert resp.status_code == 404
    resp = await client.get(f"{API}/workouts/templates/{template['id']}", headers=pt["headers"])
    assert resp.status_code == 404
    resp = await client.get(f"{API}/workouts/trainees/{trainee['id']}/assignments", headers=trainee["headers"])
    assert resp.json()["count"] == 0
