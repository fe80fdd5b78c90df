"""
Tests for the partition HTTP endpoint.

These tests use FastAPI's TestClient to send requests to the
application without running a real server.  They check the response
shape, the status codes for invalid input and that the health probe
answers.
"""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add the backend directory to sys.path so we can import the app
sys.path.append(str(Path(__file__).resolve().parents[1]))

from splitsurface.main import app  # type: ignore
from splitsurface.services.partition_cache import clear_partition_cache


@pytest.fixture
def client() -> TestClient:
    clear_partition_cache()
    return TestClient(app)


def _cut(x1: float, y1: float, x2: float, y2: float, color=None) -> dict:
    return {"points": [{"x": x1, "y": y1}, {"x": x2, "y": y2}], "color": color}


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_partition_single_cut(client: TestClient) -> None:
    """A cut across the middle should return two pieces with areas."""
    response = client.post(
        "/api/partition",
        json={"width": 100, "height": 100, "cuts": [_cut(0, 50, 100, 50, "#ff0000")]},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["pieceCount"] == 2
    assert data["failed"] is False
    assert data["skippedCuts"] == 0
    assert [p["index"] for p in data["polygons"]] == [0, 1]
    assert data["polygons"][0]["area"] == pytest.approx(4950.0)
    assert data["polygons"][0]["points"][0] == {"x": 0.0, "y": 0.0}
    meta = data["meta"]
    assert meta["canvasArea"] == pytest.approx(10000.0)
    assert meta["totalArea"] == pytest.approx(9900.0)
    assert meta["bladeCount"] == 1
    assert meta["settings"]["fillRule"] == "nonzero"


def test_partition_without_cuts_returns_canvas(client: TestClient) -> None:
    response = client.post("/api/partition", json={"width": 30, "height": 20})
    assert response.status_code == 200
    data = response.json()
    assert data["pieceCount"] == 1
    points = [(p["x"], p["y"]) for p in data["polygons"][0]["points"]]
    assert points == [(0.0, 0.0), (30.0, 0.0), (30.0, 20.0), (0.0, 20.0)]


def test_degenerate_cut_is_reported(client: TestClient) -> None:
    response = client.post(
        "/api/partition",
        json={"width": 100, "height": 100, "cuts": [_cut(5, 5, 5, 5)]},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["pieceCount"] == 1
    assert data["skippedCuts"] == 1


def test_invalid_canvas_returns_400(client: TestClient) -> None:
    response = client.post("/api/partition", json={"width": 0, "height": 100, "cuts": []})
    assert response.status_code == 400


def test_malformed_cut_returns_422(client: TestClient) -> None:
    bad = {"points": [{"x": 0, "y": 0}, {"x": 1, "y": 1}, {"x": 2, "y": 2}]}
    response = client.post("/api/partition", json={"width": 10, "height": 10, "cuts": [bad]})
    assert response.status_code == 422
