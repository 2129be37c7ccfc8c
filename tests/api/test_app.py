"""Tests for the FastAPI application."""

import pytest
from fastapi.testclient import TestClient

from perimeter.api.app import app
from perimeter.infrastructure.dependencies import get_service_container


@pytest.fixture
def client():
    """Provide a test client with a fresh service container."""
    get_service_container.cache_clear()
    with TestClient(app) as test_client:
        yield test_client
    get_service_container.cache_clear()


def create_claim(client, **overrides):
    payload = {
        "text": "Economy grows",
        "domain": "economy",
        "claim_type": "numeric",
        "predicted_value": 10.0,
        "forecaster_name": "Alice",
        "forecaster_handle": "alice",
        "forecaster_platform": "x",
    }
    payload.update(overrides)
    response = client.post("/v1/claims", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    """Test the health endpoint."""
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["storage_backends"] == {"memory": True}
    assert "economy" in data["domains"]


def test_create_and_get_claim(client):
    """Test claim creation and lookup."""
    claim = create_claim(client)
    assert claim["status"] == "pending"
    assert claim["forecaster_id"]

    response = client.get(f"/v1/claims/{claim['id']}")
    assert response.status_code == 200
    assert response.json()["claim"]["id"] == claim["id"]
    assert response.json()["outcome"] is None


def test_create_claim_validation(client):
    """Test mismatched predictions are rejected before storage."""
    response = client.post("/v1/claims", json={
        "text": "bad",
        "domain": "economy",
        "claim_type": "numeric",
        "predicted_category": "up",
    })
    assert response.status_code == 422

    response = client.post("/v1/claims", json={
        "text": "bad",
        "domain": "politics",
        "claim_type": "probabilistic",
        "predicted_probability": 1.2,
    })
    assert response.status_code == 422


def test_create_claim_unknown_forecaster(client):
    """Test unknown forecaster ids give 404."""
    response = client.post("/v1/claims", json={
        "text": "x",
        "domain": "economy",
        "claim_type": "numeric",
        "predicted_value": 1.0,
        "forecaster_id": "ghost",
    })
    assert response.status_code == 404


def test_resolve_claim(client):
    """Test resolution returns the scored outcome."""
    claim = create_claim(client)

    response = client.post(f"/v1/claims/{claim['id']}/resolve", json={"actual_value": 15.0})

    assert response.status_code == 201
    assert response.json()["perimeter_score"] == pytest.approx(96.6667, abs=1e-3)
    detail = client.get(f"/v1/claims/{claim['id']}").json()
    assert detail["claim"]["status"] == "resolved"
    assert detail["outcome"]["id"] == response.json()["id"]


def test_resolve_twice_conflicts(client):
    """Test a second resolution gives 409 and keeps the first outcome."""
    claim = create_claim(client)
    first = client.post(f"/v1/claims/{claim['id']}/resolve", json={"actual_value": 15.0}).json()

    response = client.post(f"/v1/claims/{claim['id']}/resolve", json={"actual_value": 80.0})

    assert response.status_code == 409
    assert response.json()["claim_id"] == claim["id"]
    assert client.get(f"/v1/claims/{claim['id']}").json()["outcome"]["id"] == first["id"]


def test_resolve_errors(client):
    """Test unknown claims and unscorable outcomes."""
    assert client.post("/v1/claims/missing/resolve", json={"actual_value": 1.0}).status_code == 404
    assert client.get("/v1/claims/missing").status_code == 404

    claim = create_claim(client)
    response = client.post(f"/v1/claims/{claim['id']}/resolve", json={"actual_category": "up"})
    assert response.status_code == 400
    assert response.json()["error"] == "TypeMismatchError"

    response = client.post(f"/v1/claims/{claim['id']}/resolve", json={})
    assert response.status_code == 400
    assert response.json()["error"] == "MissingActualError"

    response = client.post(f"/v1/claims/{claim['id']}/resolve", json={"actual_probability": 2.0})
    assert response.status_code == 422


def test_list_claims(client):
    """Test listing with filters."""
    create_claim(client)
    create_claim(client, domain="politics", claim_type="categorical", predicted_value=None, predicted_category="Biden")

    assert len(client.get("/v1/claims").json()["claims"]) == 2
    assert len(client.get("/v1/claims", params={"domain": "politics"}).json()["claims"]) == 1
    assert len(client.get("/v1/claims", params={"status": "resolved"}).json()["claims"]) == 0
    assert client.get("/v1/claims", params={"status": "bogus"}).status_code == 422


def test_leaderboard_and_analytics(client):
    """Test aggregates reflect resolutions made through the API."""
    alice = create_claim(client)
    bob = create_claim(client, forecaster_name="Bob", forecaster_handle="bob",
                       claim_type="probabilistic", predicted_value=None, predicted_probability=0.7)
    client.post(f"/v1/claims/{alice['id']}/resolve", json={"actual_value": 10.0})

    board = client.get("/v1/leaderboard").json()
    assert [e["forecaster_name"] for e in board["entries"]] == ["Alice"]

    client.post(f"/v1/claims/{bob['id']}/resolve", json={"actual_probability": 1.0})

    board = client.get("/v1/leaderboard", params={"period": "1m"}).json()
    assert [e["forecaster_name"] for e in board["entries"]] == ["Alice", "Bob"]
    assert board["entries"][1]["weighted_perimeter"] == pytest.approx(91.0)
    assert client.get("/v1/leaderboard", params={"min_claims": 2}).json()["entries"] == []

    analytics = client.get("/v1/analytics").json()
    assert analytics["total_claims"] == 2
    assert analytics["resolved_claims"] == 2
    assert analytics["score_distribution"]["excellent"] == 2
    assert len(analytics["top_forecasters"]) == 2

    trends = client.get("/v1/analytics/trends", params={"days": 5}).json()
    assert len(trends) == 5
    assert trends[-1]["claims"] == 2
    assert trends[-1]["resolutions"] == 2


def test_trends_validation(client):
    """Test the day window must be positive."""
    assert client.get("/v1/analytics/trends", params={"days": 0}).status_code == 422


def test_analytics_counts_claims_created_after_first_read(client):
    """Test cached analytics pick up claims created through the API."""
    create_claim(client)
    assert client.get("/v1/analytics").json()["total_claims"] == 1

    create_claim(client, text="Inflation cools")
    assert client.get("/v1/analytics").json()["total_claims"] == 2


def test_leaderboard_shows_renamed_forecaster(client):
    """Test a new display name for a known handle reaches cached leaderboards."""
    claim = create_claim(client)
    client.post(f"/v1/claims/{claim['id']}/resolve", json={"actual_value": 10.0})
    board = client.get("/v1/leaderboard").json()
    assert [e["forecaster_name"] for e in board["entries"]] == ["Alice"]

    create_claim(client, forecaster_name="Alice Smith")

    board = client.get("/v1/leaderboard").json()
    assert [e["forecaster_name"] for e in board["entries"]] == ["Alice Smith"]
