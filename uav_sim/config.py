"""
UAV Flight Simulation - Configuration

This module provides a SimulationConfig dataclass for dependency injection,
allowing different simulation parameters to be passed without modifying
global constants.

The configuration is read-only for the lifetime of a run. When trim results
re-seed the initial conditions, the driver derives a new config with
dataclasses.replace() rather than mutating the original.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

from . import constants as C


class SolverType(IntEnum):
    """Time-advance strategy selector."""
    FORWARD_EULER = 0  # Fixed-step explicit Euler
    RK45 = 1  # Adaptive explicit Runge-Kutta 5(4)
    BDF = 2  # Adaptive implicit multi-step, for stiff problems


class ControllerType(IntEnum):
    """Controller selector."""
    STATIC = 0  # Constant output taken from static_output
    TRIMMED = 1  # Constant output taken from the trim solution
    FEEDBACK = 2  # Feedback law around the trim solution


Vector3 = Tuple[float, float, float]


@dataclass(frozen=True)
class SimulationConfig:
    """
    Immutable configuration for simulation parameters.

    Using frozen=True ensures configs cannot be accidentally modified.
    Create new configs via dataclass replace() if needed.

    Section grouping:
      1. Solver
      2. Recording
      3. Initial conditions
      4. Controller
      5. Trim
      6. Environment
      7. Validation
      8. Misc
    """

    # ── 1. Solver ────────────────────────────────────────────────────────
    # 0 = forward Euler, 1 = RK45, 2 = BDF (see SolverType)
    solver_type: int = SolverType.FORWARD_EULER
    t_0: float = C.T_0
    t_f: float = C.T_F
    dt: float = C.DT
    t_eps: float = C.T_EPS
    # Adaptive solvers only
    rtol: float = C.RTOL
    atol: float = C.ATOL
    max_step: float = float('inf')

    # ── 2. Recording ─────────────────────────────────────────────────────
    record_states: bool = True
    record_inputs: bool = True

    # ── 3. Initial conditions ────────────────────────────────────────────
    init_position: Vector3 = tuple(C.INITIAL_POSITION)  # NED (m)
    init_euler: Vector3 = tuple(C.INITIAL_EULER)  # phi, theta, psi (rad)
    init_vel_linear_body: Vector3 = tuple(C.INITIAL_VELOCITY)  # u, v, w (m/s)
    init_vel_angular_body: Vector3 = tuple(C.INITIAL_OMEGA)  # p, q, r (rad/s)
    init_aux: Tuple[float, ...] = ()

    # ── 4. Controller ────────────────────────────────────────────────────
    # 0 = static, 1 = trimmed static, 2 = feedback (see ControllerType)
    controller_type: int = ControllerType.TRIMMED
    # [aileron, elevator, throttle, rudder]
    static_output: Tuple[float, float, float, float] = C.DEFAULT_STATIC_OUTPUT
    kp_roll: float = C.KP_ROLL
    kd_roll: float = C.KD_ROLL
    kp_pitch: float = C.KP_PITCH
    kd_pitch: float = C.KD_PITCH
    kd_yaw: float = C.KD_YAW
    kp_airspeed: float = C.KP_AIRSPEED

    # ── 5. Trim ──────────────────────────────────────────────────────────
    trim_airspeed: float = C.TRIM_AIRSPEED
    trim_gamma: float = C.TRIM_GAMMA
    trim_phi: float = C.TRIM_PHI
    trim_tolerance: float = C.TRIM_TOLERANCE
    trim_max_iterations: int = C.TRIM_MAX_ITERATIONS

    # ── 6. Environment ───────────────────────────────────────────────────
    wind_ned: Vector3 = (0.0, 0.0, 0.0)  # m/s
    enable_density_altitude: bool = True

    # ── 7. Validation ────────────────────────────────────────────────────
    max_euler_pitch: float = C.MAX_EULER_PITCH

    # ── 8. Misc ──────────────────────────────────────────────────────────
    verbose: bool = True

    @property
    def requires_trim(self) -> bool:
        """Whether the run must be preceded by a trim search."""
        return self.controller_type in (ControllerType.TRIMMED, ControllerType.FEEDBACK)

    @property
    def num_frames(self) -> int:
        """Number of fixed steps spanning [t_0, t_f]."""
        return max(0, int(round((self.t_f - self.t_0) / self.dt)))


def create_default_config() -> SimulationConfig:
    """Create a SimulationConfig with default values from constants."""
    return SimulationConfig()


def create_test_config(dt: float = 0.01, t_f: float = 1.0,
                       **overrides) -> SimulationConfig:
    """Create a fast config suitable for testing.

    Any keyword arg accepted by SimulationConfig can be passed as an override.
    """
    defaults = dict(dt=dt, t_f=t_f, verbose=False)
    defaults.update(overrides)
    return SimulationConfig(**defaults)
