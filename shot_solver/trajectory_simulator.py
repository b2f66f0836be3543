"""
Projectile Flight Simulation
============================
Quadratic-drag point-mass integrator used by every stage of the solver.

Flights are simulated in the vertical plane of the shot: x is horizontal
distance along the ground track, z is height above the launch point.
Range flights can also be run for a whole batch of shots at once, with
every shot stepped together as numpy arrays.

Author: FRC Trajectory Tools
License: MIT
"""

import math
from dataclasses import dataclass, fields
from typing import NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from .config import SolverConfig, DEFAULT_CONFIG


class ProjectileSample(NamedTuple):
    """A single kinematic sample along the flight."""
    t: float
    x: float
    z: float
    vx: float
    vz: float


@dataclass(frozen=True)
class FlightRangeResult:
    """Outcome of integrating a shot out to a horizontal range."""
    reached: bool
    time_at_range: Optional[float] = None
    height_at_range: Optional[float] = None
    vx_at_range: float = 0.0
    vz_at_range: float = 0.0
    height_at_edge: Optional[float] = None
    time_at_edge: Optional[float] = None

    @property
    def edge_reached(self) -> bool:
        return self.height_at_edge is not None


@dataclass(frozen=True)
class FlightRangeBatch:
    """
    Range flights for a batch of shots, one array element per shot.

    Crossings that were never found hold NaN; velocities at an unreached
    range hold 0.0, matching FlightRangeResult.
    """
    reached: np.ndarray
    time_at_range: np.ndarray
    height_at_range: np.ndarray
    vx_at_range: np.ndarray
    vz_at_range: np.ndarray
    height_at_edge: np.ndarray
    time_at_edge: np.ndarray

    def __len__(self) -> int:
        return self.reached.size

    def arrives_at(self, height: float, strict: bool = False) -> np.ndarray:
        """Mask of shots that reach the range at (or strictly above) a height."""
        heights = np.where(self.reached, self.height_at_range, -np.inf)
        return heights > height if strict else heights >= height

    def take(self, indices: Union[np.ndarray, Sequence[int]]) -> 'FlightRangeBatch':
        """Sub-batch of the given shots."""
        return FlightRangeBatch(*(getattr(self, f.name)[indices] for f in fields(self)))

    def where(self, mask: np.ndarray, other: 'FlightRangeBatch') -> 'FlightRangeBatch':
        """Shots from other where mask is set, from self elsewhere."""
        return FlightRangeBatch(*(
            np.where(mask, getattr(other, f.name), getattr(self, f.name)) for f in fields(self)
        ))

    def flight(self, index: int) -> FlightRangeResult:
        """Unpack one shot into a FlightRangeResult."""
        def optional(values: np.ndarray) -> Optional[float]:
            value = float(values[index])
            return None if math.isnan(value) else value

        return FlightRangeResult(
            reached=bool(self.reached[index]),
            time_at_range=optional(self.time_at_range),
            height_at_range=optional(self.height_at_range),
            vx_at_range=float(self.vx_at_range[index]),
            vz_at_range=float(self.vz_at_range[index]),
            height_at_edge=optional(self.height_at_edge),
            time_at_edge=optional(self.time_at_edge),
        )


@dataclass(frozen=True)
class FlightHeightResult:
    """Outcome of integrating a shot until it falls through a height."""
    reached: bool
    time: Optional[float] = None
    horizontal_distance: Optional[float] = None
    vx: Optional[float] = None
    vz: Optional[float] = None


def sample_at_range(prev: ProjectileSample, curr: ProjectileSample, target_x: float) -> ProjectileSample:
    """Interpolate the flight state where it crosses a horizontal distance."""
    dx = curr.x - prev.x
    ratio = (target_x - prev.x) / dx if dx != 0 else 0.0
    return ProjectileSample(
        t=prev.t + (curr.t - prev.t) * ratio,
        x=target_x,
        z=prev.z + (curr.z - prev.z) * ratio,
        vx=prev.vx + (curr.vx - prev.vx) * ratio,
        vz=prev.vz + (curr.vz - prev.vz) * ratio,
    )


def sample_at_height(prev: ProjectileSample, curr: ProjectileSample, target_z: float) -> Optional[ProjectileSample]:
    """
    Interpolate the flight state where it crosses a height.

    Returns None when the two samples are level, since no unique
    crossing exists between them.
    """
    dz = curr.z - prev.z
    if abs(dz) < 1e-6:
        return None
    ratio = (target_z - prev.z) / dz
    return ProjectileSample(
        t=prev.t + (curr.t - prev.t) * ratio,
        x=prev.x + (curr.x - prev.x) * ratio,
        z=target_z,
        vx=prev.vx + (curr.vx - prev.vx) * ratio,
        vz=prev.vz + (curr.vz - prev.vz) * ratio,
    )


def _range_ratio(prev_x: np.ndarray, x: np.ndarray, target_x: float) -> np.ndarray:
    # Same interpolation weight as sample_at_range, 0 where the step is level.
    dx = x - prev_x
    return np.divide(target_x - prev_x, dx, out=np.zeros_like(dx), where=dx != 0)


class ProjectileModel:
    """
    Point-mass projectile under gravity and quadratic air drag.

    Stateless apart from its configuration and the steps_taken counter,
    which totals the integration steps run so far (a batch step counts
    once however many shots it advances).
    """

    def __init__(self, config: SolverConfig = DEFAULT_CONFIG):
        self.config = config
        self.gravity = config.gravity
        self.drag_k = config.drag_k
        self.dt = config.dt
        self.steps_taken = 0

    def step(self, x: float, z: float, vx: float, vz: float) -> Tuple[float, float, float, float]:
        """
        Advance one explicit Euler step.

        a = -g ẑ - k |v| v, applied to velocity first and then to position.
        """
        self.steps_taken += 1
        speed = math.sqrt(vx * vx + vz * vz)
        ax = -self.drag_k * speed * vx
        az = -self.gravity - self.drag_k * speed * vz

        vx += ax * self.dt
        vz += az * self.dt
        x += vx * self.dt
        z += vz * self.dt
        return x, z, vx, vz

    def simulate_to_range(
            self,
            angle: float,
            speed: float,
            target_range: float,
            edge_range: float = 0.0
    ) -> FlightRangeResult:
        """
        Fly a shot until it reaches a horizontal range.

        Args:
            angle: Launch elevation in radians
            speed: Launch speed in m/s
            target_range: Horizontal distance at which the flight stops
            edge_range: Distance of the hub rim; its first crossing is
                recorded when positive

        Returns:
            FlightRangeResult; reached is False when the shot falls, stalls
            or times out first
        """
        cfg = self.config
        vx = speed * math.cos(angle)
        vz = speed * math.sin(angle)
        x = z = t = 0.0
        prev = ProjectileSample(t, x, z, vx, vz)
        edge = None
        target = None

        max_x = max(target_range, edge_range, 0.0) + cfg.range_margin

        while t < cfg.max_sim_time and z > cfg.floor_height and x <= max_x:
            x, z, vx, vz = self.step(x, z, vx, vz)
            t += self.dt
            curr = ProjectileSample(t, x, z, vx, vz)

            if edge is None and edge_range > 0 and x >= edge_range:
                edge = sample_at_range(prev, curr, edge_range)

            if x >= target_range:
                target = sample_at_range(prev, curr, target_range)
                break

            if vx <= 0:
                break

            prev = curr

        if target is None:
            return FlightRangeResult(
                reached=False,
                height_at_edge=edge.z if edge else None,
                time_at_edge=edge.t if edge else None,
            )
        return FlightRangeResult(
            reached=True,
            time_at_range=target.t,
            height_at_range=target.z,
            vx_at_range=target.vx,
            vz_at_range=target.vz,
            height_at_edge=edge.z if edge else None,
            time_at_edge=edge.t if edge else None,
        )

    def simulate_to_range_batch(
            self,
            angles: Union[np.ndarray, Sequence[float]],
            speeds: Union[np.ndarray, Sequence[float], float],
            target_range: float,
            edge_range: float = 0.0,
            give_up_height: Optional[float] = None
    ) -> FlightRangeBatch:
        """
        Fly many shots to the same range, stepping them all together.

        Every shot follows the step, crossing and interpolation rules of
        simulate_to_range and reaches the range with the same numbers.
        A shot is also dropped as soon as it can no longer reach the range
        before max_sim_time, or once it is falling below give_up_height
        when one is given; dropped shots report reached=False and their
        rim crossing may be missing.

        Args:
            angles: Launch elevations in radians
            speeds: Launch speeds in m/s, one per angle or a single value
            target_range: Horizontal distance at which each flight stops
            edge_range: Distance of the hub rim, recorded when positive
            give_up_height: Height below which a falling shot is abandoned

        Returns:
            FlightRangeBatch with one element per angle
        """
        cfg = self.config
        angles = np.atleast_1d(np.asarray(angles, dtype=float))
        speeds = np.broadcast_to(np.asarray(speeds, dtype=float), angles.shape)
        count = angles.size

        # Launch components use math so each shot starts exactly like simulate_to_range.
        vel = np.array([
            [s * math.cos(a) for a, s in zip(angles.tolist(), speeds.tolist())],
            [s * math.sin(a) for a, s in zip(angles.tolist(), speeds.tolist())],
        ]).reshape(2, count)
        pos = np.zeros_like(vel)

        reached = np.zeros(count, dtype=bool)
        time_at_range = np.full(count, np.nan)
        height_at_range = np.full(count, np.nan)
        vx_at_range = np.zeros(count)
        vz_at_range = np.zeros(count)
        height_at_edge = np.full(count, np.nan)
        time_at_edge = np.full(count, np.nan)
        edge_open = np.full(count, edge_range > 0)
        active = np.ones(count, dtype=bool)

        neg_drag_k = -self.drag_k
        t = 0.0
        while t < cfg.max_sim_time and active.any():
            prev_pos, prev_vel, prev_t = pos, vel, t
            acc = neg_drag_k * np.sqrt((vel * vel).sum(axis=0)) * vel
            acc[1] -= self.gravity
            vel = vel + acc * self.dt
            pos = pos + vel * self.dt
            t += self.dt
            self.steps_taken += 1
            x, z = pos

            if edge_range > 0:
                hit = edge_open & active & (x >= edge_range)
                if hit.any():
                    ratio = _range_ratio(prev_pos[0, hit], x[hit], edge_range)
                    time_at_edge[hit] = prev_t + (t - prev_t) * ratio
                    height_at_edge[hit] = prev_pos[1, hit] + (z[hit] - prev_pos[1, hit]) * ratio
                    edge_open &= ~hit

            hit = active & (x >= target_range)
            if hit.any():
                ratio = _range_ratio(prev_pos[0, hit], x[hit], target_range)
                time_at_range[hit] = prev_t + (t - prev_t) * ratio
                height_at_range[hit] = prev_pos[1, hit] + (z[hit] - prev_pos[1, hit]) * ratio
                vx_at_range[hit] = prev_vel[0, hit] + (vel[0, hit] - prev_vel[0, hit]) * ratio
                vz_at_range[hit] = prev_vel[1, hit] + (vel[1, hit] - prev_vel[1, hit]) * ratio
                reached |= hit
                active &= ~hit

            # vx only decays, so x + vx * (remaining time) bounds the distance
            # still reachable; this also stops shots that stalled (vx <= 0).
            stop = x + vel[0] * (cfg.max_sim_time - t + 2 * self.dt) < target_range
            stop |= z <= cfg.floor_height
            if give_up_height is not None:
                stop |= (vel[1] < 0) & (z < give_up_height)
            active &= ~stop

        return FlightRangeBatch(
            reached=reached,
            time_at_range=time_at_range,
            height_at_range=height_at_range,
            vx_at_range=vx_at_range,
            vz_at_range=vz_at_range,
            height_at_edge=height_at_edge,
            time_at_edge=time_at_edge,
        )

    def simulate_to_height(self, v_horizontal: float, vz0: float, target_height: float) -> FlightHeightResult:
        """
        Fly a shot until it comes back down through a height.

        The projectile must first rise to the height; the descending
        crossing is then interpolated between the bracketing samples.
        """
        cfg = self.config
        vx = v_horizontal
        vz = vz0
        x = z = t = 0.0
        prev = ProjectileSample(t, x, z, vx, vz)
        reached_up = False

        while t < cfg.max_sim_time and z > cfg.floor_height:
            x, z, vx, vz = self.step(x, z, vx, vz)
            t += self.dt
            curr = ProjectileSample(t, x, z, vx, vz)

            if not reached_up and z >= target_height:
                reached_up = True

            if reached_up and z <= target_height:
                sample = sample_at_height(prev, curr, target_height)
                if sample is None:
                    break
                return FlightHeightResult(
                    reached=True,
                    time=sample.t,
                    horizontal_distance=sample.x,
                    vx=sample.vx,
                    vz=sample.vz,
                )

            if vx <= 0 and not reached_up:
                break

            prev = curr

        return FlightHeightResult(reached=False)
