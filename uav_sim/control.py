"""
UAV Flight Simulation - Control System

This module implements the controller interface consumed by the supervisor
and its concrete variants:
- Static output (constant control vector, e.g. the trim controls)
- Feedback law (PD attitude hold, yaw damper, airspeed hold around trim)
- Control saturation
"""

from abc import ABC, abstractmethod

import numpy as np

from . import constants as C
from .config import ControllerType, SimulationConfig
from .errors import ShapeMismatch, UnsupportedControllerType
from .forces import compute_air_data
from .state import VehicleState


def saturate_controls(controls: np.ndarray) -> np.ndarray:
    """
    Apply control surface and throttle limits.

    Args:
        controls: Commanded control vector [aileron, elevator, throttle, rudder]

    Returns:
        Saturated control vector
    """
    return np.clip(controls, C.CONTROL_LOWER, C.CONTROL_UPPER)


def _as_control_vector(values) -> np.ndarray:
    vec = np.array(values, dtype=np.float64).reshape(-1)
    if vec.shape != (C.CONTROL_DIM,):
        raise ShapeMismatch(C.CONTROL_DIM, vec.shape)
    return vec


class Controller(ABC):
    """Interface for a vehicle controller."""

    @abstractmethod
    def compute(self, state: VehicleState, t: float) -> np.ndarray:
        """Return the control vector [aileron, elevator, throttle, rudder]."""


class StaticController(Controller):
    """Controller that holds a constant output for the whole run."""

    def __init__(self, output):
        self.output = _as_control_vector(output)

    def compute(self, state: VehicleState, t: float) -> np.ndarray:
        return self.output.copy()


class FeedbackController(Controller):
    """
    Linear feedback around a reference (trim) point.

    δa = δa* + kp_roll (φ* − φ) − kd_roll p
    δe = δe* + kp_pitch (θ* − θ) − kd_pitch q
    δt = δt* + kp_airspeed (Va* − Va)
    δr = δr* + kd_yaw r

    Output is saturated to the actuator limits.

    Args:
        reference_controls: Feed-forward control vector (trim controls)
        reference_euler: Reference attitude [phi, theta, psi] (rad)
        reference_airspeed: Reference airspeed (m/s)
        gains: Dict with kp_roll, kd_roll, kp_pitch, kd_pitch, kd_yaw, kp_airspeed
        wind_ned: Wind used to compute airspeed (m/s)
    """

    def __init__(self, reference_controls, reference_euler, reference_airspeed: float,
                 gains: dict, wind_ned=None):
        self.reference_controls = _as_control_vector(reference_controls)
        self.reference_euler = np.array(reference_euler, dtype=np.float64)
        self.reference_airspeed = float(reference_airspeed)
        self.gains = dict(gains)
        self.wind_ned = None if wind_ned is None else np.array(wind_ned, dtype=np.float64)

    def compute(self, state: VehicleState, t: float) -> np.ndarray:
        g = self.gains
        p, q, r = state.omega
        phi_err = self.reference_euler[0] - state.euler[0]
        theta_err = self.reference_euler[1] - state.euler[1]
        airspeed = compute_air_data(state, self.wind_ned)['airspeed']

        delta = np.array([
            g['kp_roll'] * phi_err - g['kd_roll'] * p,
            g['kp_pitch'] * theta_err - g['kd_pitch'] * q,
            g['kp_airspeed'] * (self.reference_airspeed - airspeed),
            g['kd_yaw'] * r,
        ])
        return saturate_controls(self.reference_controls + delta)


def create_controller(config: SimulationConfig) -> Controller:
    """
    Build the controller selected by config.controller_type.

    For TRIMMED and FEEDBACK the driver is expected to have replaced
    static_output (and the initial attitude) with the trim solution.

    Raises:
        UnsupportedControllerType: For an unknown controller_type
    """
    try:
        controller_type = ControllerType(config.controller_type)
    except ValueError:
        raise UnsupportedControllerType(config.controller_type) from None

    if controller_type in (ControllerType.STATIC, ControllerType.TRIMMED):
        return StaticController(config.static_output)

    gains = {
        'kp_roll': config.kp_roll,
        'kd_roll': config.kd_roll,
        'kp_pitch': config.kp_pitch,
        'kd_pitch': config.kd_pitch,
        'kd_yaw': config.kd_yaw,
        'kp_airspeed': config.kp_airspeed,
    }
    return FeedbackController(
        reference_controls=config.static_output,
        reference_euler=config.init_euler,
        reference_airspeed=config.trim_airspeed,
        gains=gains,
        wind_ned=config.wind_ned,
    )
