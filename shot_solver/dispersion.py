"""
Shot Dispersion
===============
Random spread applied to a launch velocity, for visualizing how
repeatable a shot is at a given range.

The spread is specified as a miss distance at the target,
sigma ≈ base + per_meter * range, and converted to an angular sigma.

Author: FRC Trajectory Tools
License: MIT
"""

from typing import Optional

import numpy as np

UP = np.array([0.0, 0.0, 1.0])


def dispersion_sigma_angle(shot_range: float, base: float, per_meter: float) -> float:
    """Angular standard deviation (rad) for a shot at the given range, capped at 45°."""
    base = max(0.0, base)
    per_meter = max(0.0, per_meter)
    if base == 0 and per_meter == 0:
        return 0.0
    sigma_distance = base + per_meter * shot_range
    if sigma_distance <= 0:
        return 0.0
    sigma_angle = np.arctan2(sigma_distance, max(shot_range, 0.05))
    return float(min(sigma_angle, np.pi / 4))


def _rotate(vector: np.ndarray, axis: np.ndarray, angle: float) -> np.ndarray:
    """Rodrigues rotation of vector about a unit axis."""
    cos_a = np.cos(angle)
    sin_a = np.sin(angle)
    return (vector * cos_a
            + np.cross(axis, vector) * sin_a
            + axis * np.dot(axis, vector) * (1 - cos_a))


def apply_dispersion(
        velocity,
        sigma_angle: float,
        rng: Optional[np.random.Generator] = None
) -> np.ndarray:
    """
    Perturb a launch velocity by Gaussian yaw and pitch errors.

    Yaw is applied about the vertical, then pitch about the horizontal axis
    perpendicular to the yawed direction. Speed is preserved.

    Args:
        velocity: Field-frame (vx, vy, vz) in m/s
        sigma_angle: Angular standard deviation in radians
        rng: Random generator; a fresh default_rng() when omitted

    Returns:
        The perturbed velocity as a numpy array
    """
    velocity = np.asarray(velocity, dtype=float)
    speed = np.linalg.norm(velocity)
    if not sigma_angle or speed <= 1e-5:
        return velocity.copy()

    if rng is None:
        rng = np.random.default_rng()
    yaw, pitch = rng.standard_normal(2) * sigma_angle

    forward = _rotate(velocity / speed, UP, yaw)
    right = np.cross(forward, UP)
    norm = np.linalg.norm(right)
    right = np.array([1.0, 0.0, 0.0]) if norm < 1e-3 else right / norm
    forward = _rotate(forward, right, pitch)

    return forward / np.linalg.norm(forward) * speed
