"""Tests for the HTTP interface."""

import pytest
from fastapi.testclient import TestClient

from shot_solver.main import app


@pytest.fixture(scope="module")
def client():
    return TestClient(app)


class TestSolveEndpoint:

    def test_default_request(self, client):
        response = client.post("/api/solve", json={})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        solution = body["solution"]
        assert solution["is_valid"] is True
        assert 45.0 <= solution["hood_angle_deg"] <= 90.0
        assert len(solution["impact_point"]) == 2

    def test_unreachable_still_returns_solution(self, client):
        response = client.post("/api/solve", json={"max_flywheel_speed": 2.0})

        assert response.status_code == 200
        assert response.json()["solution"]["is_valid"] is False

    @pytest.mark.parametrize(
        "payload",
        [
            {"min_hood_angle": 120.0},
            {"max_flywheel_speed": 0.0},
            {"dispersion_base": -0.1},
            {"robot_x": "north"},
        ],
    )
    def test_rejects_bad_input(self, client, payload):
        assert client.post("/api/solve", json=payload).status_code == 422


class TestTrajectoryEndpoint:

    def test_points_and_seeded_dispersion(self, client):
        payload = {"shoot_on_move": False, "dispersion_base": 0.05, "seed": 3}
        first = client.post("/api/trajectory", json=payload).json()
        second = client.post("/api/trajectory", json=payload).json()

        assert first["success"] is True
        assert len(first["points"]) > 10
        assert set(first["points"][0]) == {"x", "y", "z"}
        assert first["sigma_angle"] > 0
        assert first["launch_velocity"] == second["launch_velocity"]
