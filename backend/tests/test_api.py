"""
Tests for the loop orientation and region endpoints.

The endpoints wrap the partitioning services: orienting a bag of loops,
combining two polygonal regions and locating points in a region.
"""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.append(str(Path(__file__).resolve().parents[1]))
from bspgeom.main import app  # type: ignore


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


UNIT_SQUARE_CW = [[0.0, 0.0], [0.0, 1.0], [1.0, 1.0], [1.0, 0.0]]
HOLE_CCW = [[0.25, 0.25], [0.75, 0.25], [0.75, 0.75], [0.25, 0.75]]


def test_health(client: TestClient) -> None:
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_orient_square_with_hole(client: TestClient) -> None:
    resp = client.post("/api/loops/orient", json={"loops": [UNIT_SQUARE_CW, HOLE_CCW]})
    assert resp.status_code == 200
    loops = resp.json()["loops"]
    assert [(loop["index"], loop["depth"]) for loop in loops] == [(0, 0), (1, 1)]
    assert loops[0]["signedArea"] == pytest.approx(1.0)
    assert loops[1]["signedArea"] == pytest.approx(-0.25)
    assert loops[0]["reversed"] is True
    assert loops[1]["reversed"] is True
    assert loops[0]["points"][0] == [1.0, 0.0]


def test_orient_rejects_crossing_loops(client: TestClient) -> None:
    body = {
        "loops": [
            [[0.0, 0.0], [2.0, 0.0], [2.0, 2.0], [0.0, 2.0]],
            [[1.0, 1.0], [3.0, 1.0], [3.0, 3.0], [1.0, 3.0]],
        ]
    }
    resp = client.post("/api/loops/orient", json=body)
    assert resp.status_code == 400
    assert "cross each other" in resp.json()["detail"]


def test_orient_rejects_empty_loop(client: TestClient) -> None:
    resp = client.post("/api/loops/orient", json={"loops": [[]]})
    assert resp.status_code == 400
    assert "open" in resp.json()["detail"]


def test_orient_validates_tolerance(client: TestClient) -> None:
    resp = client.post("/api/loops/orient", json={"loops": [HOLE_CCW], "tolerance": -1.0})
    assert resp.status_code == 422


def test_combine_union(client: TestClient) -> None:
    body = {
        "operation": "union",
        "first": [[0.0, 0.0], [2.0, 0.0], [2.0, 2.0], [0.0, 2.0]],
        "second": [[1.0, 1.0], [3.0, 1.0], [3.0, 3.0], [1.0, 3.0]],
    }
    resp = client.post("/api/regions/combine", json=body)
    assert resp.status_code == 200
    data = resp.json()
    assert data["bounded"] is True
    assert data["empty"] is False
    assert data["size"] == pytest.approx(7.0)
    assert data["boundarySize"] == pytest.approx(12.0)
    assert len(data["loops"]) == 1
    assert data["loops"][0]["closed"] is True


def test_combine_difference_of_disjoint_regions(client: TestClient) -> None:
    body = {
        "operation": "intersection",
        "first": [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]],
        "second": [[5.0, 5.0], [6.0, 5.0], [6.0, 6.0], [5.0, 6.0]],
    }
    data = client.post("/api/regions/combine", json=body).json()
    assert data["empty"] is True
    assert data["size"] == pytest.approx(0.0)
    assert data["barycenter"] is None
    assert data["loops"] == []


def test_combine_unbounded_result(client: TestClient) -> None:
    body = {
        "operation": "union",
        "first": UNIT_SQUARE_CW,
        "second": HOLE_CCW,
    }
    data = client.post("/api/regions/combine", json=body).json()
    assert data["bounded"] is False
    assert data["size"] is None
    assert data["barycenter"] is None


def test_combine_rejects_unknown_operation(client: TestClient) -> None:
    body = {"operation": "merge", "first": HOLE_CCW, "second": HOLE_CCW}
    assert client.post("/api/regions/combine", json=body).status_code == 422


def test_combine_rejects_degenerate_loop(client: TestClient) -> None:
    body = {"operation": "union", "first": [[0.0, 0.0], [1.0, 0.0]], "second": HOLE_CCW}
    assert client.post("/api/regions/combine", json=body).status_code == 400


def test_contains(client: TestClient) -> None:
    body = {
        "loop": [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]],
        "points": [[0.5, 0.5], [2.0, 2.0], [1.0, 0.5]],
    }
    resp = client.post("/api/regions/contains", json=body)
    assert resp.status_code == 200
    data = resp.json()
    assert data["locations"] == ["inside", "outside", "boundary"]
    assert data["contained"] == [True, False, True]


def test_orient_rejects_flat_loop(client: TestClient) -> None:
    resp = client.post("/api/loops/orient", json={"loops": [[[0.0, 0.0], [1.0, 1.0]]]})
    assert resp.status_code == 400
    assert "no area" in resp.json()["detail"]
