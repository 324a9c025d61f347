"""API endpoint tests using FastAPI TestClient."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api.server import app
from virtual_tryon.errors import Blocked, TransportError

from conftest import make_data_url


@pytest.fixture
def client(studio):
    with patch("api.server.get_studio", return_value=studio):
        yield TestClient(app)


@pytest.fixture
def model_client(client):
    """Client whose studio already has a model."""
    response = client.post("/api/model", json={"photo": make_data_url()})
    assert response.json()["success"] is True
    return client


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, client):
        """Root endpoint returns OK status."""
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "service" in data
        assert "version" in data

    def test_health_endpoint(self, client):
        """Health endpoint reports store and model status."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["store"] == "connected"
        assert data["model"] == "missing"

    def test_poses(self, client):
        poses = client.get("/api/poses").json()["poses"]
        assert len(poses) == 6
        assert poses[0] == "Full frontal view, hands on hips"


class TestModelEndpoints:
    """Tests for model creation and start over."""

    def test_create_and_get_model(self, client):
        response = client.post("/api/model", json={"photo": make_data_url()})

        assert response.status_code == 200
        assert response.json() == {"success": True, "model_image": "studio-model", "error": None}
        assert client.get("/api/model").json()["model_image"] == "studio-model"

    def test_create_model_missing_photo(self, client):
        """Request without a photo fails validation."""
        response = client.post("/api/model", json={})
        assert response.status_code == 422

    def test_create_model_blocked(self, client, studio_gateway):
        studio_gateway.fail_with = Blocked("SAFETY")

        response = client.post("/api/model", json={"photo": make_data_url()})

        data = response.json()
        assert data["success"] is False
        assert "safety" in data["error"].lower()

    def test_delete_model(self, model_client):
        assert model_client.delete("/api/model").json() == {"success": True}
        assert model_client.get("/api/model").json()["success"] is False


class TestWardrobeEndpoints:
    """Tests for wardrobe listing and edits."""

    def test_list_seeds_defaults(self, client):
        items = client.get("/api/wardrobe").json()
        assert [item["id"] for item in items][:2] == ["white-tshirt", "lightblue-shirt"]

    def test_upload_with_crop(self, client):
        response = client.post("/api/wardrobe", json={
            "name": "Belt",
            "category": "accessory",
            "image": make_data_url(10, 10),
            "crop": {"x": 0, "y": 0, "width": 4, "height": 2},
        })

        assert response.status_code == 200
        item = response.json()
        assert item["id"].startswith("custom-")
        assert item["category"] == "accessory"

    def test_upload_invalid_category(self, client):
        response = client.post("/api/wardrobe", json={
            "name": "Hat",
            "category": "hat",
            "image": make_data_url(),
        })
        assert response.status_code == 422

    def test_update_and_delete(self, client):
        updated = client.patch("/api/wardrobe/polo-shirt", json={"name": "Navy polo"}).json()
        assert updated["name"] == "Navy polo"

        assert client.delete("/api/wardrobe/polo-shirt").json() == {"success": True}
        ids = [item["id"] for item in client.get("/api/wardrobe").json()]
        assert "polo-shirt" not in ids

    def test_update_unknown_item(self, client):
        response = client.patch("/api/wardrobe/missing", json={"name": "x"})

        assert response.status_code == 400
        assert response.json()["success"] is False


class TestSessionEndpoints:
    """Tests for the try-on session flow."""

    def test_session_without_model(self, client):
        response = client.get("/api/session")

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_fit_then_pose(self, model_client, studio_gateway):
        model_client.post("/api/session/garments/white-tshirt/toggle")
        model_client.post("/api/session/garments/jeans-main/toggle")

        fitted = model_client.post("/api/session/fit").json()
        assert fitted["success"] is True
        assert fitted["state"]["active_garment_ids"] == ["white-tshirt", "jeans-main"]
        assert fitted["state"]["display_image"] == "fit-image-1"

        posed = model_client.post("/api/session/pose", json={"index": 2}).json()
        assert posed["success"] is True
        assert posed["state"]["pose_index"] == 2
        assert len(posed["state"]["available_pose_keys"]) == 2
        assert len(studio_gateway.pose_calls) == 1

    def test_fit_without_selection(self, model_client):
        response = model_client.post("/api/session/fit")

        assert response.status_code == 400
        assert "garment" in response.json()["error"].lower()

    def test_pose_failure_rolls_back(self, model_client, studio_gateway):
        studio_gateway.fail_with = TransportError("offline")

        data = model_client.post("/api/session/pose", json={"index": 3}).json()

        assert data["success"] is False
        assert data["accepted"] is False
        assert data["state"]["pose_index"] == 0
        assert "network" in data["error"].lower()

    def test_pose_out_of_range(self, model_client):
        response = model_client.post("/api/session/pose", json={"index": 42})
        assert response.status_code == 400

    def test_undo_and_start_over(self, model_client):
        model_client.post("/api/session/garments/white-tshirt/toggle")
        model_client.post("/api/session/fit")

        undone = model_client.post("/api/session/undo").json()
        assert undone["accepted"] is True
        assert undone["state"]["layers"] == []

        assert model_client.post("/api/session/undo").json()["accepted"] is False

        model_client.post("/api/session/garments/jeans-main/toggle")
        reset = model_client.post("/api/session/start-over").json()
        assert reset["state"]["pending_selection"] == []
