"""
HTTP surface tests using FastAPI's TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from semantic_memory.api.main import create_app
from semantic_memory.core.db import Database
from semantic_memory.core.service import MemoryService
from semantic_memory.vector.embeddings import DeterministicHashEmbedding


@pytest.fixture
def service(tmp_path):
    svc = MemoryService(Database(str(tmp_path / "api.db")), DeterministicHashEmbedding())
    yield svc
    svc.close()


@pytest.fixture
def client(service):
    with TestClient(create_app(service)) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["db_health"] is True
    assert body["memory_count"] == 0
    assert body["bio_present"] is False


def test_list_tools(client):
    response = client.get("/tools")
    assert response.status_code == 200
    assert len(response.json()) == 8


def test_save_search_and_delete(client):
    response = client.post("/tools/save_memory", json={"id": "x", "text": "python programming language tips"})
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = client.post("/tools/search_memory", json={"query": "python programming language"})
    assert [r["id"] for r in response.json()["results"]] == ["x"]

    assert client.get("/health").json()["memory_count"] == 1

    response = client.post("/tools/delete_memory", json={"id": "x"})
    assert response.json()["success"] is True


def test_tool_without_body(client):
    response = client.post("/tools/list_all_memories")
    assert response.status_code == 200
    assert response.json() == {"success": True, "count": 0, "memories": []}


def test_not_found_is_a_normal_response(client):
    response = client.post("/tools/get_memory", json={"id": "ghost"})
    assert response.status_code == 200
    assert response.json()["success"] is False


def test_validation_failure_is_a_normal_response(client):
    response = client.post("/tools/save_memory", json={"id": "x"})
    assert response.status_code == 200
    assert response.json()["success"] is False
    assert "text" in response.json()["error"]


def test_unknown_tool_is_404(client):
    response = client.post("/tools/nope", json={})
    assert response.status_code == 404


def test_lifespan_opens_and_closes_service(service):
    app = create_app(service)
    with TestClient(app):
        assert service.db.is_open
    assert not service.db.is_open


def test_unmanaged_service_left_open(service):
    service.start(load_model=False)
    with TestClient(create_app(service, manage_lifecycle=False)) as test_client:
        assert test_client.get("/health").json()["db_health"] is True
    assert service.db.is_open
