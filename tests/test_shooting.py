"""Tests for the shoot-on-the-move solver."""

import dataclasses
import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from shot_solver import shooting
from shot_solver import (
    DEFAULT_CONFIG,
    LauncherState,
    ShootingSolution,
    compute_shooting_solution,
    get_launcher_world_offset,
    get_target_height,
)

LAUNCHER_Z = 0.53


def make_state(target_x=5.0, target_y=0.0, delta_h=1.0, **overrides):
    """Robot at the origin facing +x with the launcher on its centre."""
    state = LauncherState(
        robot_x=0.0,
        robot_y=0.0,
        chassis_heading=0.0,
        launcher_offset_x=0.0,
        launcher_offset_y=0.0,
        launcher_offset_z=LAUNCHER_Z,
        target_x=target_x,
        target_y=target_y,
        target_z=LAUNCHER_Z + delta_h - DEFAULT_CONFIG.ball_radius,
        shoot_on_move=False,
    )
    return dataclasses.replace(state, **overrides)


def assert_fully_populated(solution: ShootingSolution):
    for field in dataclasses.fields(solution):
        value = getattr(solution, field.name)
        if isinstance(value, bool):
            continue
        values = value if isinstance(value, tuple) else (value,)
        for item in values:
            assert isinstance(item, float), field.name
            assert math.isfinite(item), field.name


@pytest.fixture(scope="module")
def stationary():
    return compute_shooting_solution(make_state())


# =============================================================================
# Helpers
# =============================================================================


class TestHelpers:

    def test_target_height_adds_ball_radius(self):
        state = LauncherState(target_z=1.23)
        assert_allclose(get_target_height(state), 1.23 + DEFAULT_CONFIG.ball_radius)

    def test_launcher_offset_rotates_with_heading(self):
        state = LauncherState(
            chassis_heading=math.pi / 2,
            launcher_offset_x=1.0,
            launcher_offset_y=0.0,
            launcher_offset_z=0.5,
        )
        assert_allclose(get_launcher_world_offset(state), (0.0, 1.0, 0.5), atol=1e-12)

    def test_launcher_offset_identity_at_zero_heading(self):
        state = LauncherState(launcher_offset_x=-0.53, launcher_offset_y=0.05)
        assert_allclose(get_launcher_world_offset(state), (-0.53, 0.05, 0.53))


# =============================================================================
# Stationary Shooter
# =============================================================================


class TestStationaryShot:
    """Robot parked 5 m from the hub with the opening 1 m above the launcher."""

    def test_valid_solution(self, stationary):
        assert stationary.is_valid
        assert 45.0 <= stationary.hood_angle_deg <= 90.0
        assert 0 < stationary.flywheel_speed <= 25.0
        assert math.isfinite(stationary.flywheel_speed)

    def test_lands_in_hub(self, stationary):
        assert stationary.in_target
        assert stationary.is_on_target
        assert_allclose(stationary.impact_point, (5.0, 0.0), atol=0.1)

    def test_geometry(self, stationary):
        assert_allclose(stationary.range, 5.0)
        assert_allclose(stationary.effective_range, 5.0)
        assert stationary.goal_angle == 0.0
        assert stationary.chassis_heading == 0.0
        assert stationary.yaw_compensation == 0.0
        assert stationary.virtual_target == (5.0, 0.0)
        assert stationary.launcher_position == (0.0, 0.0, LAUNCHER_Z)

    def test_resultant_velocity_is_exit_velocity(self, stationary):
        speed = math.hypot(math.hypot(stationary.ball_vx, stationary.ball_vy), stationary.vz)
        assert_allclose(speed, stationary.flywheel_speed)
        assert_allclose(stationary.ball_vy, 0.0, atol=1e-12)

    def test_entry_angle_meets_minimum(self, stationary):
        assert stationary.is_descending
        assert stationary.is_steep_enough
        assert stationary.entry_angle_deg >= 45.0

    def test_time_of_flight_consistent(self, stationary):
        """Impact time lines up with the ball crossing the target range."""
        v_h = math.hypot(stationary.ball_vx, stationary.ball_vy)
        assert 0 < stationary.time_of_flight < DEFAULT_CONFIG.max_sim_time
        assert stationary.time_of_flight > 5.0 / v_h

    def test_fully_populated(self, stationary):
        assert_fully_populated(stationary)

    def test_pure_function(self, stationary):
        assert compute_shooting_solution(make_state()) == stationary


# =============================================================================
# Degenerate Inputs
# =============================================================================


class TestDegenerate:

    def test_zero_range_is_invalid(self):
        """Target directly above the launcher cannot be solved."""
        solution = compute_shooting_solution(make_state(target_x=0.0, target_y=0.0))

        assert not solution.is_valid
        assert not solution.is_on_target
        assert solution.flywheel_speed >= 0
        assert_fully_populated(solution)

    def test_out_of_reach_is_invalid(self):
        solution = compute_shooting_solution(make_state(max_flywheel_speed=3.0))

        assert not solution.is_valid
        assert not solution.is_on_target
        assert_fully_populated(solution)


# =============================================================================
# Shooting on the Move
# =============================================================================


class TestShootOnMove:

    def test_effective_speed_floors_at_minimum(self):
        """Closing on the hub faster than any shot leaves the floored speed."""
        state = make_state(robot_vx=40.0, shoot_on_move=True)
        solution = compute_shooting_solution(state)

        assert solution.effective_shot_speed == DEFAULT_CONFIG.min_effective_speed
        assert solution.effective_range > 0
        assert solution.yaw_compensation == 0.0
        assert not solution.is_on_target
        assert_fully_populated(solution)

    def test_retreating_lengthens_effective_range(self):
        solution = compute_shooting_solution(make_state(robot_vx=-1.0, shoot_on_move=True))

        assert solution.effective_range > solution.range
        assert solution.effective_shot_speed > 0
        assert_fully_populated(solution)

    def test_strafing_leads_the_shot(self):
        """Drifting left aims the chassis right of the hub."""
        solution = compute_shooting_solution(make_state(robot_vy=1.0, shoot_on_move=True))

        assert solution.yaw_compensation < 0
        assert_allclose(solution.chassis_heading, solution.goal_angle + solution.yaw_compensation)
        assert_allclose(solution.yaw_compensation_deg, math.degrees(solution.yaw_compensation))
        assert solution.virtual_target[1] < 0
        assert_allclose(solution.ball_vy, solution.flywheel_speed * math.cos(solution.hood_angle)
                        * math.sin(solution.chassis_heading) + 1.0)

    def test_strafing_shot_still_scores(self):
        solution = compute_shooting_solution(make_state(robot_vy=1.0, shoot_on_move=True))

        assert solution.is_valid
        assert solution.is_on_target

    def test_motion_ignored_when_disabled(self):
        solution = compute_shooting_solution(make_state(robot_vy=1.0, shoot_on_move=False))

        assert solution.yaw_compensation == 0.0
        assert solution.virtual_target == (5.0, 0.0)
        assert_allclose(solution.effective_range, solution.range)

    def test_default_state(self):
        solution = compute_shooting_solution(LauncherState.default())

        assert solution.is_valid
        assert 45.0 <= solution.hood_angle_deg <= 90.0
        assert_fully_populated(solution)

    @pytest.mark.parametrize("vx, vy", [(1.5, 0.0), (0.0, -1.5), (-1.0, 1.0)])
    def test_always_fully_populated(self, vx, vy):
        solution = compute_shooting_solution(make_state(robot_vx=vx, robot_vy=vy, shoot_on_move=True))
        assert_fully_populated(solution)
        assert np.isfinite(solution.time_of_flight)


# =============================================================================
# Solve Cost
# =============================================================================


class TestSolveCost:
    """Bound the integration steps one solve takes, so it fits a control tick."""

    @pytest.fixture
    def models(self, monkeypatch):
        created = []

        class RecordingModel(shooting.ProjectileModel):
            def __init__(self, config):
                super().__init__(config)
                created.append(self)

        monkeypatch.setattr(shooting, "ProjectileModel", RecordingModel)
        return created

    @staticmethod
    def sweep_budget(config):
        probes = 1 + config.bracket_halvings + config.bisection_iterations
        return probes * (math.ceil(config.max_sim_time / config.dt) + 1)

    def test_stationary_shot_sweeps_once(self, models):
        """Every fixed-point pass sees the same range, so one sweep serves them all."""
        solution = compute_shooting_solution(make_state())
        one_flight = math.ceil(DEFAULT_CONFIG.max_sim_time / DEFAULT_CONFIG.dt) + 1

        assert solution.is_valid
        assert len(models) == 1
        assert models[0].steps_taken <= self.sweep_budget(DEFAULT_CONFIG) + one_flight

    def test_moving_shot_within_budget(self, models):
        cfg = DEFAULT_CONFIG
        solution = compute_shooting_solution(make_state(robot_vx=1.0, robot_vy=1.0, shoot_on_move=True))
        one_flight = math.ceil(cfg.max_sim_time / cfg.dt) + 1

        assert_fully_populated(solution)
        assert models[0].steps_taken <= cfg.fixed_point_iterations * self.sweep_budget(cfg) + one_flight
