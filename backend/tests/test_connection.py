from __future__ import annotations

import pytest

from studyplanner.database import connection
from studyplanner.services.course_task_service import CourseTaskService, get_course_task_service


class _FakeIndexedCollection:
    def __init__(self):
        self.indexes: list[str] = []

    async def create_index(self, keys, **kwargs):
        self.indexes.append(kwargs["name"])
        return kwargs["name"]


class _FakeDb(dict):
    def __getitem__(self, name):
        return self.setdefault(name, _FakeIndexedCollection())

    def __getattr__(self, name):
        if name.startswith("__"):
            raise AttributeError(name)
        return self[name]


class _FakeClient:
    def __init__(self, *args, **kwargs):
        self.args = args
        self.kwargs = kwargs
        self.closed = False
        self.db = _FakeDb()
        self.requested: list[str] = []

    def __getitem__(self, name):
        self.requested.append(name)
        return self.db

    def close(self):
        self.closed = True


def test_get_client_requires_connection(monkeypatch):
    monkeypatch.setattr(connection, "_client", None)

    with pytest.raises(RuntimeError):
        connection.get_client()


@pytest.mark.asyncio
async def test_connect_and_close(monkeypatch):
    monkeypatch.setattr(connection, "_client", None)
    monkeypatch.setattr(connection, "AsyncIOMotorClient", _FakeClient)

    client = await connection.connect_to_mongo()
    assert connection.get_client() is client
    assert client.kwargs["tz_aware"] is True

    assert await connection.connect_to_mongo() is client

    await connection.close_mongo_connection()
    assert client.closed
    assert connection._client is None


@pytest.mark.asyncio
async def test_ensure_mongo_indexes_creates_course_and_task_indexes(monkeypatch):
    client = _FakeClient()
    monkeypatch.setattr(connection, "_client", client)

    await connection.ensure_mongo_indexes()

    assert client.db["courses"].indexes == ["idx_courses_user_created_at"]
    assert client.db["tasks"].indexes == ["idx_tasks_course_user", "idx_tasks_user_deadline"]


def test_service_factory_uses_connected_database(monkeypatch):
    client = _FakeClient()
    monkeypatch.setattr(connection, "_client", client)

    service = get_course_task_service()

    assert isinstance(service, CourseTaskService)
    assert service.db is client.db


def test_get_db_defaults_to_configured_database(monkeypatch):
    client = _FakeClient()
    monkeypatch.setattr(connection, "_client", client)
    monkeypatch.setattr(connection.settings, "mongodb_db_name", "planner_dev")

    connection.get_db()
    connection.get_db("planner_test")

    assert client.requested == ["planner_dev", "planner_test"]
