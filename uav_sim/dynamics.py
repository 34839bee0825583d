"""
UAV Flight Simulation - Dynamics Equations

This module defines the dynamics-model interface consumed by the
supervisor and the trimmer, and the fixed-wing rigid-body implementation:
- Rotational dynamics: ω̇ = J⁻¹ (τ − ω × (Jω))
- Translational dynamics (body frame): v̇ = F / m − ω × v
- Euler kinematics: Θ̇ = H(φ, θ) ω
- Navigation: ṗ_ned = R(Θ) v
"""

from abc import ABC, abstractmethod
from typing import NamedTuple, Optional

import numpy as np

from . import constants as C
from .frames import euler_rate_matrix, euler_to_rotation_matrix
from .forces import compute_forces_and_torques
from .state import VehicleState


class DynamicsOutput(NamedTuple):
    """Result of one dynamics evaluation."""
    forces: np.ndarray  # Net body force (N)
    torques: np.ndarray  # Net body torque (N*m)
    state_derivative: np.ndarray  # Flat derivative, same layout as VehicleState.flatten()


class DynamicsModel(ABC):
    """Interface for a vehicle dynamics model."""

    @abstractmethod
    def evaluate(self, state: VehicleState, control: np.ndarray, t: float) -> DynamicsOutput:
        """
        Evaluate forces, torques and the state derivative.

        Must not mutate the state.
        """


def compute_angular_acceleration(omega: np.ndarray, torque: np.ndarray,
                                 I_tensor: np.ndarray, I_inv: np.ndarray) -> np.ndarray:
    """
    Compute angular acceleration from Euler's equation.

    ω̇ = J⁻¹ (τ − ω × (J ω))

    Args:
        omega: Angular velocity in body frame (rad/s)
        torque: Total torque in body frame (N*m)
        I_tensor: Inertia tensor (kg*m^2)
        I_inv: Inverse inertia tensor

    Returns:
        Angular acceleration in body frame (rad/s²)
    """
    I_omega = I_tensor @ omega
    gyroscopic = np.cross(omega, I_omega)
    return I_inv @ (torque - gyroscopic)


def compute_linear_acceleration(velocity: np.ndarray, omega: np.ndarray,
                                force: np.ndarray, mass: float) -> np.ndarray:
    """
    Compute body-frame linear acceleration.

    v̇ = F / m − ω × v
    """
    if mass < C.ZERO_TOLERANCE:
        return np.zeros(3)
    return force / mass - np.cross(omega, velocity)


class FixedWingDynamics(DynamicsModel):
    """
    Composite gravity + aerodynamics + propulsion model of a fixed-wing UAV.

    Args:
        wind_ned: Constant wind in NED frame (m/s)
        enable_density_altitude: Use the exponential atmosphere instead of sea-level density
        mass: Vehicle mass (kg)
        inertia: Inertia tensor (kg*m^2)
    """

    def __init__(self, wind_ned: Optional[np.ndarray] = None,
                 enable_density_altitude: bool = True,
                 mass: float = C.MASS,
                 inertia: Optional[np.ndarray] = None):
        self.wind_ned = np.zeros(3) if wind_ned is None else np.asarray(wind_ned, dtype=np.float64)
        self.enable_density_altitude = enable_density_altitude
        self.mass = mass
        self.inertia = C.INERTIA_TENSOR if inertia is None else np.asarray(inertia, dtype=np.float64)
        self.inertia_inv = np.linalg.inv(self.inertia)

    @classmethod
    def from_config(cls, config) -> 'FixedWingDynamics':
        """Build the model from a SimulationConfig."""
        return cls(wind_ned=np.array(config.wind_ned, dtype=np.float64),
                   enable_density_altitude=config.enable_density_altitude)

    def evaluate(self, state: VehicleState, control: np.ndarray, t: float) -> DynamicsOutput:
        """
        Compute all state derivatives for the full dynamics.

        The auxiliary states carried by the vehicle state are not driven by
        this model; their derivative is zero.
        """
        breakdown, _ = compute_forces_and_torques(
            state, control, self.wind_ned, self.enable_density_altitude, self.mass
        )
        forces = breakdown['total_force']
        torques = breakdown['total_torque']

        euler_dot = euler_rate_matrix(state.euler) @ state.omega
        omega_dot = compute_angular_acceleration(state.omega, torques, self.inertia, self.inertia_inv)
        position_dot = euler_to_rotation_matrix(state.euler) @ state.velocity
        velocity_dot = compute_linear_acceleration(state.velocity, state.omega, forces, self.mass)

        state_derivative = np.concatenate([
            euler_dot,
            omega_dot,
            position_dot,
            velocity_dot,
            np.zeros(state.n_aux)
        ])
        return DynamicsOutput(forces, torques, state_derivative)
