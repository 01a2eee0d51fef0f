# tests/conftest.py

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from main import app, get_task_service
from service import TaskService

from .fakes import InMemoryTaskStore


@pytest.fixture()
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture()
def service(store: InMemoryTaskStore) -> TaskService:
    return TaskService(store)


@pytest.fixture()
def client(service: TaskService):
    """
    TestClient with the Mongo-backed service swapped for the in-memory one.
    """
    app.dependency_overrides[get_task_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
