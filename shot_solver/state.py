"""
Launcher and target state snapshot consumed by the solver.

Author: FRC Trajectory Tools
License: MIT
"""

from dataclasses import dataclass
from typing import Tuple

DEFAULT_TARGET = (5.58, 3.35, 1.23)  # x, y, opening height in meters


@dataclass
class LauncherState:
    """
    Robot, launcher and target state for one control tick.

    Owned and updated by the caller; the solver only reads it. Positions
    are field coordinates in meters, the launcher offset is in the robot
    frame, and hood and entry limits are in degrees.
    """
    robot_x: float = 2.0
    robot_y: float = 4.035
    robot_vx: float = 0.0  # m/s
    robot_vy: float = 0.0  # m/s
    chassis_heading: float = 0.0  # rad

    launcher_offset_x: float = -0.53
    launcher_offset_y: float = 0.05
    launcher_offset_z: float = 0.53

    min_hood_angle: float = 45.0  # deg
    max_hood_angle: float = 90.0  # deg
    min_entry_angle: float = 45.0  # deg
    max_flywheel_speed: float = 25.0  # m/s

    target_x: float = DEFAULT_TARGET[0]
    target_y: float = DEFAULT_TARGET[1]
    target_z: float = DEFAULT_TARGET[2]

    shoot_on_move: bool = True

    # Shot spread: sigma ≈ base + per_meter * range
    dispersion_base: float = 0.0  # m
    dispersion_per_meter: float = 0.0  # m/m

    @classmethod
    def default(cls) -> 'LauncherState':
        """Robot parked on its starting line facing the hub."""
        return cls()

    @property
    def robot_velocity(self) -> Tuple[float, float]:
        return (self.robot_vx, self.robot_vy)

    @property
    def target_position(self) -> Tuple[float, float]:
        return (self.target_x, self.target_y)
