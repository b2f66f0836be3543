"""
Shot Solver
===========
Ballistic targeting for a hooded-flywheel shooter that fires on the move.

Author: FRC Trajectory Tools
License: MIT
"""

from .config import (
    ConfigurationError,
    DEFAULT_CONFIG,
    EnvironmentConditions,
    GamePiece,
    GamePieceProperties,
    SolverConfig,
)
from .dispersion import apply_dispersion, dispersion_sigma_angle
from .hub import hub_hex_points, point_in_polygon
from .optimizer import (
    FeasibilityTier,
    HoodSolution,
    SpeedSweep,
    find_optimal_hood_angle,
    solve_speed_for_angle,
    solve_speeds,
)
from .preview import sample_trajectory
from .shooting import (
    ShootingSolution,
    compute_shooting_solution,
    get_launcher_world_offset,
    get_target_height,
)
from .state import LauncherState
from .trajectory_simulator import (
    FlightHeightResult,
    FlightRangeBatch,
    FlightRangeResult,
    ProjectileModel,
    ProjectileSample,
    sample_at_height,
    sample_at_range,
)

__all__ = [
    "ConfigurationError",
    "DEFAULT_CONFIG",
    "EnvironmentConditions",
    "FeasibilityTier",
    "FlightHeightResult",
    "FlightRangeBatch",
    "FlightRangeResult",
    "GamePiece",
    "GamePieceProperties",
    "HoodSolution",
    "LauncherState",
    "ProjectileModel",
    "ProjectileSample",
    "ShootingSolution",
    "SolverConfig",
    "SpeedSweep",
    "apply_dispersion",
    "compute_shooting_solution",
    "dispersion_sigma_angle",
    "find_optimal_hood_angle",
    "get_launcher_world_offset",
    "get_target_height",
    "hub_hex_points",
    "point_in_polygon",
    "sample_at_height",
    "sample_at_range",
    "sample_trajectory",
    "solve_speed_for_angle",
    "solve_speeds",
]
