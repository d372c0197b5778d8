"""Tests for the HTTP surface, wired to a scripted catalog and in-memory storage."""
import pytest
from fastapi.testclient import TestClient

from generation_engine.app.dependencies import get_generation_service, get_model_catalog
from generation_engine.app.main import app
from generation_engine.exceptions import ProviderError
from generation_engine.execution.engine import ExecutionCoordinator
from generation_engine.repositories import InMemoryWorkflowResultRepository
from generation_engine.services.generation import GenerationService

from .conftest import ScriptedAdapter, scripted_catalog


@pytest.fixture
def adapter():
    return ScriptedAdapter({
        "flux-pro-1.1": ProviderError("FAL.AI API error: 500 boom", status_code=500),
        "flux-schnell": 0.03,
        "gpt-4o-mini": 0.0004,
    })


@pytest.fixture
def client(adapter):
    catalog = scripted_catalog(adapter)
    service = GenerationService(
        coordinator=ExecutionCoordinator(catalog),
        result_repository=InMemoryWorkflowResultRepository(),
    )
    app.dependency_overrides[get_generation_service] = lambda: service
    app.dependency_overrides[get_model_catalog] = lambda: catalog
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_execute_plan_and_fetch_result(client, adapter):
    plan = {
        "plan_id": "campaign-7",
        "steps": [
            {
                "step_id": "hero",
                "primary_model": {"name": "Flux Pro", "model_id": "flux-pro-1.1", "estimated_cost": 0.05},
                "fallback_models": ["flux-schnell"],
                "prompt": "mountain bike at dawn",
            },
            {"step_id": "tagline", "primary_model": "gpt-4o-mini", "prompt": "tagline"},
        ],
    }

    response = client.post("/execute", json=plan)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert [s["step_id"] for s in body["steps"]] == ["hero", "tagline"]
    assert body["steps"][0]["model_used"] == "flux-schnell"
    assert body["total_cost"] == pytest.approx(0.0304)

    stored = client.get(f"/workflows/{body['workflow_id']}")
    assert stored.status_code == 200
    assert stored.json()["plan_id"] == "campaign-7"


def test_single_step_shorthand_is_accepted(client):
    response = client.post("/execute", json={
        "plan_id": "quick",
        "primary_model": "flux-schnell",
        "prompt": "a lighthouse",
    })

    assert response.status_code == 200
    assert response.json()["steps"][0]["step_id"] == "step-001"


def test_invalid_plan_is_rejected_with_problems(client, adapter):
    response = client.post("/execute", json={
        "plan_id": "loop",
        "steps": [
            {"step_id": "a", "primary_model": "flux-schnell", "depends_on": ["b"]},
            {"step_id": "b", "primary_model": "flux-schnell", "depends_on": ["a"]},
        ],
    })

    assert response.status_code == 422
    assert any("cycle" in p for p in response.json()["problems"])
    assert adapter.calls == []


def test_unknown_workflow_is_404(client):
    response = client.get("/workflows/does-not-exist")

    assert response.status_code == 404
    assert response.json()["detail"] == "Workflow result not found"


def test_execute_step(client):
    response = client.post("/execute/step", json={
        "step_id": "copy",
        "primary_model": "gpt-4o-mini",
        "prompt": "tagline",
    })

    assert response.status_code == 200
    assert response.json()["status"] == "success"
    assert response.json()["model_used"] == "gpt-4o-mini"


def test_execute_step_without_model_is_422(client):
    response = client.post("/execute/step", json={"step_id": "copy"})

    assert response.status_code == 422
    assert response.json()["problems"]


def test_models_and_health(client):
    models = client.get("/models").json()

    ids = {m["id"] for m in models}
    assert {"flux-pro-1.1", "midjourney-v6", "gpt-4o"} <= ids

    health = client.get("/health").json()
    assert health == {"status": "ok", "models": len(models)}
