from typing import Optional

import numpy as np
from fastapi import FastAPI
from pydantic import BaseModel, Field

from .config import DEFAULT_CONFIG
from .dispersion import apply_dispersion, dispersion_sigma_angle
from .preview import sample_trajectory
from .shooting import compute_shooting_solution, get_target_height
from .state import DEFAULT_TARGET, LauncherState

app = FastAPI(title="Shot Solver")


class SolveRequest(BaseModel):
    robot_x: float = 2.0
    robot_y: float = 4.035
    robot_vx: float = 0.0
    robot_vy: float = 0.0
    chassis_heading: float = 0.0
    launcher_offset_x: float = -0.53
    launcher_offset_y: float = 0.05
    launcher_offset_z: float = Field(0.53, ge=0)
    min_hood_angle: float = Field(45.0, ge=0, le=90)
    max_hood_angle: float = Field(90.0, ge=0, le=90)
    min_entry_angle: float = Field(45.0, ge=0, le=90)
    max_flywheel_speed: float = Field(25.0, gt=0)
    target_x: float = DEFAULT_TARGET[0]
    target_y: float = DEFAULT_TARGET[1]
    target_z: float = DEFAULT_TARGET[2]
    shoot_on_move: bool = True
    dispersion_base: float = Field(0.0, ge=0)
    dispersion_per_meter: float = Field(0.0, ge=0)

    def to_state(self) -> LauncherState:
        return LauncherState(**self.model_dump(include=set(SolveRequest.model_fields)))


class TrajectoryRequest(SolveRequest):
    seed: Optional[int] = None


@app.post("/api/solve")
def solve(data: SolveRequest):
    solution = compute_shooting_solution(data.to_state(), DEFAULT_CONFIG)
    return {"success": True, "solution": solution.to_dict()}


@app.post("/api/trajectory")
def trajectory(data: TrajectoryRequest):
    state = data.to_state()
    solution = compute_shooting_solution(state, DEFAULT_CONFIG)
    points = sample_trajectory(solution, get_target_height(state, DEFAULT_CONFIG), DEFAULT_CONFIG)

    # Launch velocity the next ball would actually leave with
    sigma = dispersion_sigma_angle(solution.range, state.dispersion_base, state.dispersion_per_meter)
    launch_velocity = apply_dispersion(
        (solution.ball_vx, solution.ball_vy, solution.vz), sigma, np.random.default_rng(data.seed)
    )

    return {
        "success": solution.is_valid,
        "solution": solution.to_dict(),
        "points": [{"x": x, "y": y, "z": z} for x, y, z in points.tolist()],
        "sigma_angle": sigma,
        "launch_velocity": launch_velocity.tolist(),
    }
