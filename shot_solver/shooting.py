#!/usr/bin/env python3
"""
Shoot-on-the-Move Solver
========================
Turns a launcher/target snapshot into chassis heading, hood angle and
flywheel speed, compensating for the robot's own velocity.

The robot velocity is split into a radial part (along the line of sight to
the hub) and a tangential part. A short fixed-point loop alternates between
estimating the effective shot range from the current time of flight and
re-optimizing the hood for that range. The final shot is then re-flown with
the true resultant velocity (exit velocity + robot velocity) to find where
it actually lands.

Author: FRC Trajectory Tools
License: MIT
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Optional, Tuple

from .config import SolverConfig, DEFAULT_CONFIG
from .hub import hub_hex_points, point_in_polygon
from .optimizer import find_optimal_hood_angle
from .state import LauncherState
from .trajectory_simulator import ProjectileModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShootingSolution:
    """Complete aiming solution for one tick. Every field is always set."""
    chassis_heading: float  # rad
    flywheel_speed: float  # m/s
    hood_angle: float  # rad
    hood_angle_deg: float
    range: float  # m, launcher to target
    effective_range: float  # m, after motion compensation
    effective_shot_speed: float  # m/s along the line of sight
    time_of_flight: float  # s
    yaw_compensation: float  # rad
    yaw_compensation_deg: float
    virtual_target: Tuple[float, float]
    impact_point: Tuple[float, float]
    is_valid: bool
    clears_hub: bool
    height_at_edge: float  # m
    is_descending: bool
    is_steep_enough: bool
    entry_angle_deg: float
    in_target: bool
    is_on_target: bool
    goal_angle: float  # rad, bearing from launcher to target
    launcher_x: float
    launcher_y: float
    launcher_z: float
    ball_vx: float  # m/s, field frame
    ball_vy: float
    vz: float

    @property
    def launcher_position(self) -> Tuple[float, float, float]:
        return (self.launcher_x, self.launcher_y, self.launcher_z)

    def to_dict(self) -> dict:
        return asdict(self)


def get_target_height(state: LauncherState, config: SolverConfig = DEFAULT_CONFIG) -> float:
    """Height the ball centre must pass through to score."""
    return state.target_z + config.ball_radius


def get_launcher_world_offset(state: LauncherState) -> Tuple[float, float, float]:
    """Rotate the launcher mount offset from the robot frame into the field frame."""
    cos_h = math.cos(state.chassis_heading)
    sin_h = math.sin(state.chassis_heading)
    local_x = state.launcher_offset_x
    local_y = state.launcher_offset_y
    return (
        cos_h * local_x - sin_h * local_y,
        sin_h * local_x + cos_h * local_y,
        state.launcher_offset_z,
    )


def compute_shooting_solution(
        state: LauncherState,
        config: Optional[SolverConfig] = None
) -> ShootingSolution:
    """
    Solve heading, hood angle and flywheel speed for the current tick.

    Never raises for unreachable or degenerate shots; check is_valid and
    is_on_target before firing.
    """
    cfg = config or DEFAULT_CONFIG
    model = ProjectileModel(cfg)
    shoot_on_move = state.shoot_on_move
    robot_vx, robot_vy = state.robot_vx, state.robot_vy

    target_x, target_y = state.target_x, state.target_y
    target_height = get_target_height(state, cfg)
    offset_x, offset_y, launcher_z = get_launcher_world_offset(state)
    launcher_x = state.robot_x + offset_x
    launcher_y = state.robot_y + offset_y

    dx = target_x - launcher_x
    dy = target_y - launcher_y
    shot_range = math.hypot(dx, dy)
    goal_angle = math.atan2(dy, dx)
    delta_height = target_height - launcher_z

    cos_g = math.cos(goal_angle)
    sin_g = math.sin(goal_angle)
    radial_v = robot_vx * cos_g + robot_vy * sin_g
    tangential_v = -robot_vx * sin_g + robot_vy * cos_g

    time_of_flight = cfg.initial_time_of_flight
    effective_range = shot_range
    effective_shot_speed = shot_range / time_of_flight
    hood = None
    swept_range = None
    hood_angle = math.radians(cfg.initial_hood_angle_deg)
    flywheel_speed = cfg.initial_flywheel_speed
    is_valid = False

    for iteration in range(cfg.fixed_point_iterations):
        if shoot_on_move and time_of_flight > 0:
            effective_shot_speed = max(shot_range / time_of_flight - radial_v, cfg.min_effective_speed)
            effective_range = time_of_flight * math.hypot(tangential_v, effective_shot_speed)
        else:
            effective_shot_speed = shot_range / time_of_flight
            effective_range = shot_range

        # The sweep depends only on the range, so a repeated range reuses it.
        if effective_range != swept_range:
            hood = find_optimal_hood_angle(
                model,
                effective_range,
                delta_height,
                target_height,
                launcher_z,
                state.min_hood_angle,
                state.max_hood_angle,
                state.min_entry_angle,
                state.max_flywheel_speed,
            )
            swept_range = effective_range
        hood_angle = hood.angle
        flywheel_speed = hood.speed
        time_of_flight = hood.time_of_flight
        is_valid = hood.is_valid and math.isfinite(flywheel_speed) and flywheel_speed > 0

        logger.debug(
            "iteration %d: effective range %.3f m, hood %.1f deg, speed %.2f m/s, tof %.3f s",
            iteration, effective_range, math.degrees(hood_angle), flywheel_speed, time_of_flight,
        )
        if not is_valid or not math.isfinite(time_of_flight):
            is_valid = False
            break

    yaw_compensation = 0.0
    if shoot_on_move and effective_shot_speed > cfg.min_effective_speed:
        yaw_compensation = math.atan2(-tangential_v, effective_shot_speed)
    chassis_heading = goal_angle + yaw_compensation

    lead = time_of_flight if shoot_on_move else 0.0
    virtual_target = (target_x - robot_vx * lead, target_y - robot_vy * lead)

    vz = flywheel_speed * math.sin(hood_angle)
    v_horizontal = flywheel_speed * math.cos(hood_angle)
    ball_vx = v_horizontal * math.cos(chassis_heading) + robot_vx
    ball_vy = v_horizontal * math.sin(chassis_heading) + robot_vy
    ball_speed_horizontal = math.hypot(ball_vx, ball_vy)

    impact_point = (target_x, target_y)
    actual_tof = time_of_flight

    if is_valid and ball_speed_horizontal > cfg.min_horizontal_speed:
        flight = model.simulate_to_height(ball_speed_horizontal, vz, delta_height)
        if flight.reached:
            actual_tof = flight.time
            dir_x = ball_vx / ball_speed_horizontal
            dir_y = ball_vy / ball_speed_horizontal
            impact_point = (
                launcher_x + dir_x * flight.horizontal_distance,
                launcher_y + dir_y * flight.horizontal_distance,
            )
        else:
            logger.debug("resultant shot never falls through %.3f m", delta_height)
            is_valid = False
    else:
        is_valid = False

    hexagon = hub_hex_points(cfg.scoring_opening_size, target_x, target_y)
    in_target = point_in_polygon(impact_point, hexagon)
    is_on_target = (
        is_valid and hood.clears_hub and hood.is_descending and hood.is_steep_enough and in_target
    )

    return ShootingSolution(
        chassis_heading=chassis_heading,
        flywheel_speed=flywheel_speed,
        hood_angle=hood_angle,
        hood_angle_deg=math.degrees(hood_angle),
        range=shot_range,
        effective_range=effective_range,
        effective_shot_speed=effective_shot_speed,
        time_of_flight=actual_tof,
        yaw_compensation=yaw_compensation,
        yaw_compensation_deg=math.degrees(yaw_compensation),
        virtual_target=virtual_target,
        impact_point=impact_point,
        is_valid=is_valid,
        clears_hub=hood.clears_hub,
        height_at_edge=hood.height_at_edge,
        is_descending=hood.is_descending,
        is_steep_enough=hood.is_steep_enough,
        entry_angle_deg=hood.entry_angle_deg,
        in_target=in_target,
        is_on_target=is_on_target,
        goal_angle=goal_angle,
        launcher_x=launcher_x,
        launcher_y=launcher_y,
        launcher_z=launcher_z,
        ball_vx=ball_vx,
        ball_vy=ball_vy,
        vz=vz,
    )


if __name__ == "__main__":
    print("Shoot-on-the-Move Solver")
    print("=" * 60)

    for label, vx, vy in [("Stationary", 0.0, 0.0), ("Strafing 1.5 m/s", 0.0, 1.5), ("Driving in 1 m/s", 1.0, 0.0)]:
        snapshot = LauncherState.default()
        snapshot.robot_vx = vx
        snapshot.robot_vy = vy
        solution = compute_shooting_solution(snapshot)

        print(f"\n--- {label} ---")
        print(f"  Range: {solution.range:.2f} m (effective {solution.effective_range:.2f} m)")
        print(f"  Hood: {solution.hood_angle_deg:.1f}°  Flywheel: {solution.flywheel_speed:.2f} m/s")
        print(f"  Heading: {math.degrees(solution.chassis_heading):.1f}° "
              f"(yaw comp {solution.yaw_compensation_deg:+.1f}°)")
        print(f"  Time of flight: {solution.time_of_flight:.3f} s  Entry: {solution.entry_angle_deg:.1f}°")
        print(f"  Impact: ({solution.impact_point[0]:.3f}, {solution.impact_point[1]:.3f})")
        print(f"  Valid: {solution.is_valid}  On target: {solution.is_on_target}")
