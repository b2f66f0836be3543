"""
Solver Configuration
====================
Physical constants and numerical tuning for the shooting solver.

Everything the solver needs beyond the launcher state lives here and is
passed in explicitly, so every call stays a pure function of its inputs.

Author: FRC Trajectory Tools
License: MIT
"""

import numpy as np
from dataclasses import dataclass, replace
from enum import Enum


class ConfigurationError(ValueError):
    """Raised when a solver configuration cannot produce a bounded search."""


class GamePiece(Enum):
    """Game pieces with known physical properties."""
    FUEL = "fuel"  # 2026 REBUILT
    CUSTOM = "custom"


@dataclass
class GamePieceProperties:
    """Physical properties of a game piece."""
    name: str
    mass: float  # kg
    radius: float  # meters
    drag_coefficient: float  # dimensionless

    @property
    def cross_section(self) -> float:
        return np.pi * self.radius ** 2

    @classmethod
    def from_game_piece(cls, piece: GamePiece) -> 'GamePieceProperties':
        """Get properties for standard game pieces."""
        properties = {
            GamePiece.FUEL: cls(
                name="Fuel (2026)",
                mass=0.2,
                radius=0.075,  # 0.15 m diameter
                drag_coefficient=0.47  # sphere
            ),
        }
        return properties.get(piece, properties[GamePiece.FUEL])


@dataclass
class EnvironmentConditions:
    """Environmental conditions affecting trajectory."""
    air_density: float = 1.225  # kg/m³ at sea level, 15°C
    gravity: float = 9.81  # m/s²


@dataclass(frozen=True)
class SolverConfig:
    """
    Physics and search parameters for one solver invocation.

    drag_k is the mass-normalized quadratic drag factor (1/m):
    a_drag = -drag_k * |v| * v
    """
    gravity: float = 9.81  # m/s²
    drag_k: float = 0.5 * 1.225 * 0.47 * np.pi * 0.075 ** 2 / 0.2  # 1/m

    # Integration
    dt: float = 1 / 240  # s
    max_sim_time: float = 4.0  # s
    floor_height: float = -2.0  # m relative to the launcher
    range_margin: float = 1.0  # m past the farthest range of interest

    # Speed search
    min_speed: float = 0.5  # m/s
    min_bracket_speed: float = 0.1  # m/s
    bracket_halvings: int = 6
    bisection_iterations: int = 10

    # Hood sweep
    angle_step_deg: float = 0.5
    min_edge_range: float = 0.05  # m
    min_entry_vx: float = 0.01  # m/s

    # Moving-shooter fixed point
    fixed_point_iterations: int = 3
    initial_time_of_flight: float = 0.6  # s
    initial_hood_angle_deg: float = 60.0
    initial_flywheel_speed: float = 10.0  # m/s
    min_effective_speed: float = 0.1  # m/s
    min_horizontal_speed: float = 0.01  # m/s

    # Game piece and hub
    ball_radius: float = 0.075  # m
    hub_opening_size: float = 1.06  # m, flat-to-flat
    hub_half_width: float = 0.6  # m

    # Trajectory preview
    preview_dt: float = 1 / 120  # s
    preview_max_time: float = 3.5  # s

    def __post_init__(self):
        positive = {
            "dt": self.dt,
            "max_sim_time": self.max_sim_time,
            "angle_step_deg": self.angle_step_deg,
            "min_speed": self.min_speed,
            "min_effective_speed": self.min_effective_speed,
            "preview_dt": self.preview_dt,
            "bisection_iterations": self.bisection_iterations,
            "fixed_point_iterations": self.fixed_point_iterations,
            "initial_time_of_flight": self.initial_time_of_flight,
        }
        for name, value in positive.items():
            if not np.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value!r}")
        if self.drag_k < 0 or self.gravity <= 0:
            raise ConfigurationError("gravity must be positive and drag_k non-negative")
        if self.bracket_halvings < 0:
            raise ConfigurationError("bracket_halvings must be non-negative")

    @property
    def scoring_opening_size(self) -> float:
        """Opening size left for the ball centre once its radius is accounted for."""
        return max(self.hub_opening_size - 2 * self.ball_radius, 0.1)

    @classmethod
    def from_physics(
            cls,
            piece: GamePieceProperties,
            environment: EnvironmentConditions,
            **overrides
    ) -> 'SolverConfig':
        """Build a config whose drag and gravity come from a game piece and environment."""
        drag_k = 0.5 * environment.air_density * piece.drag_coefficient * piece.cross_section / piece.mass
        base = cls(gravity=environment.gravity, drag_k=drag_k, ball_radius=piece.radius)
        return replace(base, **overrides) if overrides else base


DEFAULT_CONFIG = SolverConfig()
