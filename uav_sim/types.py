"""
UAV Flight Simulation - Type Definitions

This module provides TypedDict definitions for structured return types,
improving type safety and IDE support.
"""

from typing import TypedDict

import numpy as np
from numpy.typing import NDArray


class AirData(TypedDict):
    """Return type for wind-relative air data."""
    airspeed: float  # Airspeed magnitude (m/s)
    alpha: float  # Angle of attack (rad)
    beta: float  # Sideslip angle (rad)
    density: float  # Air density (kg/m³)
    dynamic_pressure: float  # 0.5 * rho * Va² (Pa)
    velocity_air_body: NDArray[np.float64]  # Air-relative velocity in body frame (m/s)


class ForceBreakdown(TypedDict):
    """Return type for force/torque computation details (body frame).

    Forces in N, torques in N·m, all about the centre of gravity.
    """
    gravity: NDArray[np.float64]  # Gravity force vector
    aerodynamic: NDArray[np.float64]  # Aerodynamic force vector
    propulsion: NDArray[np.float64]  # Propeller thrust vector
    total_force: NDArray[np.float64]  # Net force vector
    aerodynamic_torque: NDArray[np.float64]  # Aerodynamic moment vector
    propulsion_torque: NDArray[np.float64]  # Propeller reaction torque vector
    total_torque: NDArray[np.float64]  # Net torque vector
