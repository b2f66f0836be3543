"""
Trajectory preview for drawing the predicted ball path.

Author: FRC Trajectory Tools
License: MIT
"""

import numpy as np

from .config import SolverConfig, DEFAULT_CONFIG
from .shooting import ShootingSolution


def sample_trajectory(
        solution: ShootingSolution,
        target_height: float,
        config: SolverConfig = DEFAULT_CONFIG
) -> np.ndarray:
    """
    Sample the 3D flight of a solution's resultant shot.

    Starts at the launcher with (ball_vx, ball_vy, vz) and steps at
    preview_dt. The path ends at the interpolated point where it falls
    through target_height, or once the ball drops below its own radius.

    Returns:
        (N, 3) array of field-frame x, y, z points; empty for invalid
        solutions
    """
    if not solution.is_valid:
        return np.empty((0, 3))

    dt = config.preview_dt
    position = np.array(solution.launcher_position, dtype=float)
    velocity = np.array([solution.ball_vx, solution.ball_vy, solution.vz], dtype=float)
    gravity = np.array([0.0, 0.0, -config.gravity])
    points = []

    for _ in range(int(np.ceil(config.preview_max_time / dt))):
        points.append(position.copy())
        prev = position.copy()

        speed = np.linalg.norm(velocity)
        velocity = velocity + (gravity - config.drag_k * speed * velocity) * dt
        position = position + velocity * dt

        if velocity[2] < 0 and position[2] <= target_height:
            dz = position[2] - prev[2]
            ratio = (target_height - prev[2]) / dz if dz != 0 else 0.0
            points.append(prev + (position - prev) * ratio)
            break

        if position[2] < config.ball_radius:
            break

    if len(points) < 2:
        return np.empty((0, 3))
    return np.array(points)
