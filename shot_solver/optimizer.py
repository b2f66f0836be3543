"""
Hood Angle and Flywheel Speed Optimizer
=======================================
Finds the least-energy (angle, speed) pair that drops the ball into the hub.

For each hood angle on a fixed grid, a bisection over launch speed finds the
slowest shot that still arrives at the target range above the required
height. The bisection runs for the whole angle grid at once: every speed
probe is a single batched flight over all angles still being searched.
Candidates are then ranked by how many feasibility checks they pass.

Author: FRC Trajectory Tools
License: MIT
"""

import logging
import math
from dataclasses import dataclass
from enum import IntEnum
from functools import reduce
from typing import Iterable, Optional

import numpy as np

from .trajectory_simulator import FlightRangeBatch, FlightRangeResult, ProjectileModel

logger = logging.getLogger(__name__)


class FeasibilityTier(IntEnum):
    """How far a candidate shot gets through the feasibility checks."""
    NONE = 0  # no speed reaches the target at any angle
    BELOW_RIM = 1  # passes under the near rim of the hub
    RISING = 2  # clears the rim but is still climbing at the target
    SHALLOW = 3  # descending, but entry angle below the minimum
    VALID = 4


@dataclass(frozen=True)
class SpeedSolution:
    """Slowest launch speed found for one angle, with its flight."""
    speed: float
    flight: FlightRangeResult


@dataclass(frozen=True)
class SpeedSweep:
    """Slowest launch speeds for the solvable angles of a grid."""
    indices: np.ndarray  # positions in the angle grid
    speeds: np.ndarray  # m/s
    flights: FlightRangeBatch

    def __len__(self) -> int:
        return self.indices.size

    def solution(self, lane: int) -> SpeedSolution:
        return SpeedSolution(speed=float(self.speeds[lane]), flight=self.flights.flight(lane))


@dataclass(frozen=True)
class HoodSolution:
    """A candidate aiming solution for the hood and flywheel."""
    angle: float  # rad
    speed: float  # m/s
    height_at_edge: float  # m, absolute
    clears_hub: bool
    is_descending: bool
    is_steep_enough: bool
    entry_angle_deg: float
    time_of_flight: float  # s
    is_valid: bool
    tier: FeasibilityTier = FeasibilityTier.NONE


def _probe_flights(model, angles, speeds, target_range, required_height, edge_range) -> FlightRangeBatch:
    # Every decision below only asks whether a probe arrives at or above
    # required_height, so shots falling beneath it can be abandoned early.
    return model.simulate_to_range_batch(
        angles, speeds, target_range, edge_range, give_up_height=required_height
    )


def solve_speeds(
        model: ProjectileModel,
        angles: np.ndarray,
        target_range: float,
        required_height: float,
        edge_range: float,
        max_speed: float
) -> SpeedSweep:
    """
    Find the minimum launch speed for every angle of a grid at once.

    Each angle keeps its own low/high speed bracket; every probe of the
    bracket expansion and the bisection is one batched flight across all
    angles still being searched. Bisects on speed, assuming the height at
    the target range never drops as speed increases.

    Args:
        model: Projectile model to fly the probes with
        angles: Launch elevations in radians
        target_range: Horizontal distance to the target (m)
        required_height: Height above the launcher the shot must reach (m)
        edge_range: Distance to the hub rim, forwarded to every probe
        max_speed: Upper speed bound (m/s)

    Returns:
        SpeedSweep over the angles that max_speed can solve, in grid order
    """
    cfg = model.config
    angles = np.atleast_1d(np.asarray(angles, dtype=float))
    count = angles.size

    ends = _probe_flights(
        model,
        np.concatenate([angles, angles]),
        np.concatenate([np.full(count, float(max_speed)), np.full(count, cfg.min_speed)]),
        target_range, required_height, edge_range,
    )
    high_ends = ends.take(np.arange(count))
    solvable = np.flatnonzero(high_ends.arrives_at(required_height))
    best = high_ends.take(solvable)
    if not solvable.size:
        return SpeedSweep(indices=solvable, speeds=np.empty(0), flights=best)

    angles = angles[solvable]
    high = np.full(solvable.size, float(max_speed))
    low = np.full(solvable.size, cfg.min_speed)
    low_above = ends.take(count + solvable).arrives_at(required_height, strict=True)

    for _ in range(cfg.bracket_halvings):
        expanding = low_above & (low > cfg.min_bracket_speed)
        if not expanding.any():
            break
        low[expanding] *= 0.5
        low_above[expanding] = _probe_flights(
            model, angles[expanding], low[expanding], target_range, required_height, edge_range
        ).arrives_at(required_height, strict=True)
    if low_above.any():
        logger.debug(
            "speed bracket not closed at %d angle(s) from %.1f deg: low=%.3f m/s still clears %.3f m",
            int(low_above.sum()), math.degrees(angles[low_above][0]), low[low_above][0], required_height,
        )

    for _ in range(cfg.bisection_iterations):
        mid = (low + high) / 2
        flights = _probe_flights(model, angles, mid, target_range, required_height, edge_range)
        arrives = flights.arrives_at(required_height)
        high = np.where(arrives, mid, high)
        low = np.where(arrives, low, mid)
        best = best.where(arrives, flights)

    return SpeedSweep(indices=solvable, speeds=high, flights=best)


def solve_speed_for_angle(
        model: ProjectileModel,
        angle: float,
        target_range: float,
        required_height: float,
        edge_range: float,
        max_speed: float
) -> Optional[SpeedSolution]:
    """
    Find the minimum launch speed that arrives at the range above a height.

    Single-angle form of solve_speeds.

    Returns:
        SpeedSolution, or None if even max_speed cannot make it
    """
    sweep = solve_speeds(model, [angle], target_range, required_height, edge_range, max_speed)
    if not len(sweep):
        return None
    return sweep.solution(0)


def hood_angle_grid(min_angle_deg: float, max_angle_deg: float, step_deg: float) -> np.ndarray:
    """Hood angles in radians from min to max inclusive at a fixed step."""
    if max_angle_deg < min_angle_deg:
        return np.empty(0)
    count = int(np.floor((max_angle_deg - min_angle_deg) / step_deg + 1e-9)) + 1
    return np.radians(min_angle_deg + step_deg * np.arange(count))


def classify_candidate(
        angle: float,
        solved: SpeedSolution,
        launcher_z: float,
        target_height: float,
        min_entry_angle: float,
        min_entry_vx: float = 0.01
) -> HoodSolution:
    """Run a solved shot through the rim, descent and entry angle checks."""
    flight = solved.flight
    height_at_edge = flight.height_at_edge + launcher_z if flight.edge_reached else 0.0
    clears_hub = flight.edge_reached and height_at_edge > target_height
    is_descending = clears_hub and flight.vz_at_range < 0

    entry_angle_deg = 0.0
    is_steep_enough = False
    if is_descending:
        entry_angle = math.atan2(-flight.vz_at_range, max(flight.vx_at_range, min_entry_vx))
        entry_angle_deg = math.degrees(entry_angle)
        is_steep_enough = entry_angle >= min_entry_angle

    if not clears_hub:
        tier = FeasibilityTier.BELOW_RIM
    elif not is_descending:
        tier = FeasibilityTier.RISING
    elif not is_steep_enough:
        tier = FeasibilityTier.SHALLOW
    else:
        tier = FeasibilityTier.VALID

    return HoodSolution(
        angle=angle,
        speed=solved.speed,
        height_at_edge=height_at_edge,
        clears_hub=clears_hub,
        is_descending=is_descending,
        is_steep_enough=is_steep_enough,
        entry_angle_deg=entry_angle_deg,
        time_of_flight=flight.time_at_range,
        is_valid=tier is FeasibilityTier.VALID,
        tier=tier,
    )


def _better(best: HoodSolution, candidate: HoodSolution) -> HoodSolution:
    # Higher tier wins, then lower speed; the earlier candidate keeps ties.
    if (candidate.tier, -candidate.speed) > (best.tier, -best.speed):
        return candidate
    return best


def select_best(candidates: Iterable[HoodSolution], fallback: HoodSolution) -> HoodSolution:
    """Reduce candidates to the highest tier, slowest shot."""
    return reduce(_better, candidates, fallback)


def find_optimal_hood_angle(
        model: ProjectileModel,
        target_range: float,
        delta_height: float,
        target_height: float,
        launcher_z: float,
        min_hood_angle_deg: float,
        max_hood_angle_deg: float,
        min_entry_angle_deg: float,
        max_flywheel_speed: float
) -> HoodSolution:
    """
    Sweep the hood angle and pick the slowest shot that scores.

    Args:
        model: Projectile model
        target_range: Horizontal distance from launcher to target (m)
        delta_height: Target height above the launcher (m)
        target_height: Absolute target height (m)
        launcher_z: Absolute launcher height (m)
        min_hood_angle_deg, max_hood_angle_deg: Hood travel limits
        min_entry_angle_deg: Shallowest acceptable descent angle
        max_flywheel_speed: Fastest achievable exit speed (m/s)

    Returns:
        The valid solution with the lowest speed, otherwise the best
        partial candidate with is_valid False
    """
    cfg = model.config
    edge_range = max(target_range - cfg.hub_half_width - cfg.ball_radius, cfg.min_edge_range)
    min_entry_angle = math.radians(min_entry_angle_deg)

    angles = hood_angle_grid(min_hood_angle_deg, max_hood_angle_deg, cfg.angle_step_deg)
    solved = solve_speeds(model, angles, target_range, delta_height, edge_range, max_flywheel_speed)
    candidates = (
        classify_candidate(
            float(angles[index]), solved.solution(lane),
            launcher_z, target_height, min_entry_angle, cfg.min_entry_vx,
        )
        for lane, index in enumerate(solved.indices)
    )

    nothing = HoodSolution(
        angle=math.radians(min_hood_angle_deg),
        speed=0.0,
        height_at_edge=0.0,
        clears_hub=False,
        is_descending=False,
        is_steep_enough=False,
        entry_angle_deg=0.0,
        time_of_flight=0.0,
        is_valid=False,
        tier=FeasibilityTier.NONE,
    )
    best = select_best(candidates, nothing)
    if not best.is_valid:
        logger.debug(
            "no valid hood angle at range %.2f m, falling back to %s",
            target_range, best.tier.name,
        )
    return best
