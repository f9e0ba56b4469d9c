import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production-use")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import uuid
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from ptcoach.config import settings
from ptcoach.database import Database
from ptcoach.main import app
from ptcoach.models.enums import Role
from ptcoach.schemas.users import UserCreate
from ptcoach.services.relationship_service import RelationshipService
from ptcoach.services.user_service import UserService

API = settings.API_V1_STR

TRAINEE_FITNESS = {
    "age": 28,
    "weight_kg": 72.5,
    "height_cm": 178,
    "fitness_level": "beginner",
    "fitness_goal": "build_muscle",
    "workout_frequency": 3,
}

DEFAULT_EXERCISES = [
    {"name": "Squat", "sets": 4, "reps": "8-10"},
    {"name": "Bench Press", "sets": 3, "reps": "10"},
    {"name": "Plank", "sets": 3, "reps": "60s", "notes": "Keep hips level"},
]


def auth_headers(user_id) -> dict:
    token = jwt.encode({"sub": str(user_id), "type": "access"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
async def database() -> AsyncGenerator[Database, None]:
    # One shared in-memory connection so every session sees the same tables
    db = Database(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.connect()
    await db.create_all()
    yield db
    await db.disconnect()


@pytest.fixture(scope="function")
async def file_database(tmp_path) -> AsyncGenerator[Database, None]:
    # One connection per session and BEGIN IMMEDIATE, so concurrent writers really contend
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'ptcoach.db'}")
    await db.connect()

    @event.listens_for(db.engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(db.engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    await db.create_all()
    yield db
    await db.disconnect()


async def seed_pending_request(database: Database, *, approve: bool = False):
    async with database.session() as db:
        pt = await UserService.create_user(
            db,
            UserCreate(email="race-coach@gym.com", password="password123", first_name="Riley", last_name="Coach", role=Role.PT),
        )
        trainee = await UserService.create_user(
            db,
            UserCreate(
                email="race-trainee@gym.com",
                password="password123",
                first_name="Robin",
                last_name="Trainee",
                role=Role.TRAINEE,
                **TRAINEE_FITNESS,
            ),
        )
        await RelationshipService.submit_request(db, trainee.id, pt.id, "Leg Day")
        if approve:
            await RelationshipService.approve_request(db, pt.id, trainee.id)
    return pt, trainee


@pytest.fixture(scope="function")
async def db_session(database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


@pytest.fixture(scope="function")
async def client(database) -> AsyncGenerator[AsyncClient, None]:
    previous = app.state.database
    app.state.database = database
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.state.database = previous


@pytest.fixture
def register_user(client):
    async def _register(role: str, email: str | None = None, **overrides) -> dict:
        payload = {
            "email": email or f"{role}-{uuid.uuid4().hex[:8]}@gym.com",
            "password": "password123",
            "first_name": "Alex",
            "last_name": role.capitalize(),
            "role": role,
        }
        if role == "trainee":
            payload.update(TRAINEE_FITNESS)
        payload.update(overrides)
        resp = await client.post(f"{API}/users", json=payload)
        assert resp.status_code == 201, resp.text
        user = resp.json()["data"]
        user["headers"] = auth_headers(user["id"])
        return user

    return _register


@pytest.fixture
async def pt(register_user) -> dict:
    return await register_user("pt", email="coach@gym.com", first_name="Casey", last_name="Coach")


@pytest.fixture
async def trainee(register_user) -> dict:
    return await register_user("trainee", email="trainee@gym.com", first_name="Taylor", last_name="Trainee")


@pytest.fixture
def supervise(client):
    async def _supervise(pt_user: dict, trainee_user: dict, service_name: str = "Strength coaching") -> None:
        resp = await client.post(
            f"{API}/trainers/{pt_user['id']}/requests",
            json={"service_name": service_name},
            headers=trainee_user["headers"],
        )
        assert resp.status_code == 201, resp.text
        resp = await client.post(
            f"{API}/trainers/{pt_user['id']}/requests/{trainee_user['id']}/approve",
            headers=pt_user["headers"],
        )
        assert resp.status_code == 200, resp.text

    return _supervise


@pytest.fixture
def create_template(client):
    async def _create(pt_user: dict, title: str = "Full Body A", exercises: list | None = None) -> dict:
        resp = await client.post(
            f"{API}/workouts/templates",
            json={"title": title, "difficulty": "beginner", "exercises": exercises or DEFAULT_EXERCISES},
            headers=pt_user["headers"],
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _create


@pytest.fixture
def assign(client):
    async def _assign(pt_user: dict, template_id: str, trainee_user: dict) -> dict:
        resp = await client.post(
            f"{API}/workouts/templates/{template_id}/assignments",
            json={"trainee_id": trainee_user["id"]},
            headers=pt_user["headers"],
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _assign
