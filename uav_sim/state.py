"""
UAV Flight Simulation - Vehicle State Vector

This module defines the single vehicle state dataclass and its flat-vector
serialization. The flat layout is the only contract between the opaque
dynamics model and generic numeric solvers, so its ordering is fixed:

    [euler(3), omega(3), position(3), velocity(3), aux(n)]
"""

from dataclasses import dataclass, field
import numpy as np

from . import constants as C
from .errors import ShapeMismatch
from .frames import euler_to_quaternion

# Flat layout indices
EULER = slice(0, 3)
OMEGA = slice(3, 6)
POSITION = slice(6, 9)
VELOCITY = slice(9, 12)
STATE_DIM = 12


@dataclass(eq=False)
class VehicleState:
    """
    Dynamical state of the rigid-body vehicle.

    Attributes:
        euler: Attitude as Euler angles [phi, theta, psi] (rad) [3]
        omega: Angular velocity in body frame [p, q, r] (rad/s) [3]
        position: Position in NED frame (m) [3]
        velocity: Linear velocity in body frame [u, v, w] (m/s) [3]
        aux: Auxiliary integrator states [n], empty by default
    """

    # Euler angles [phi, theta, psi]
    euler: np.ndarray = field(default_factory=lambda: np.zeros(3))

    # Body angular rates [p, q, r]
    omega: np.ndarray = field(default_factory=lambda: np.zeros(3))

    # NED position [north, east, down]
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))

    # Body linear velocity [u, v, w]
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))

    # Auxiliary integrator states
    aux: np.ndarray = field(default_factory=lambda: np.zeros(0))

    def __post_init__(self):
        """Ensure arrays are numpy arrays with correct dtype and shape."""
        for attr in ['euler', 'omega', 'position', 'velocity']:
            value = np.array(getattr(self, attr), dtype=np.float64).reshape(-1)
            if value.shape != (3,):
                raise ShapeMismatch(3, value.shape)
            setattr(self, attr, value)
        self.aux = np.array(self.aux, dtype=np.float64).reshape(-1)

    @property
    def n_aux(self) -> int:
        """Number of auxiliary states."""
        return self.aux.shape[0]

    @property
    def dimension(self) -> int:
        """Length of the flattened state."""
        return STATE_DIM + self.n_aux

    def copy(self) -> 'VehicleState':
        """Create a deep copy of the state."""
        return VehicleState(
            euler=self.euler.copy(),
            omega=self.omega.copy(),
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            aux=self.aux.copy()
        )

    def flatten(self) -> np.ndarray:
        """Convert state to a flat numpy array [euler, omega, position, velocity, aux]."""
        return np.concatenate([
            self.euler, self.omega, self.position, self.velocity, self.aux
        ])

    to_vector = flatten

    @classmethod
    def unflatten(cls, vec, n_aux: int = 0) -> 'VehicleState':
        """
        Create a VehicleState from a flat numeric sequence.

        Args:
            vec: State vector [euler(3), omega(3), position(3), velocity(3), aux(n_aux)]
            n_aux: Number of auxiliary states expected at the end of the vector

        Raises:
            ShapeMismatch: If the vector is not 1-D of length 12 + n_aux
        """
        vec = np.asarray(vec, dtype=np.float64)
        expected = STATE_DIM + n_aux
        if vec.ndim != 1 or vec.shape[0] != expected:
            raise ShapeMismatch(expected, vec.shape)
        return cls(
            euler=vec[EULER].copy(),
            omega=vec[OMEGA].copy(),
            position=vec[POSITION].copy(),
            velocity=vec[VELOCITY].copy(),
            aux=vec[STATE_DIM:].copy()
        )

    from_vector = unflatten

    @property
    def quaternion(self) -> np.ndarray:
        """Attitude as a unit quaternion [w, x, y, z]."""
        return euler_to_quaternion(self.euler)

    @property
    def airspeed(self) -> float:
        """Magnitude of body velocity (m/s), ignoring wind."""
        return float(np.linalg.norm(self.velocity))

    @property
    def altitude(self) -> float:
        """Altitude above the NED origin (m)."""
        return float(-self.position[2])

    def __eq__(self, other) -> bool:
        if not isinstance(other, VehicleState):
            return NotImplemented
        return (
            np.array_equal(self.euler, other.euler)
            and np.array_equal(self.omega, other.omega)
            and np.array_equal(self.position, other.position)
            and np.array_equal(self.velocity, other.velocity)
            and np.array_equal(self.aux, other.aux)
        )

    def __str__(self) -> str:
        """Human-readable state summary."""
        phi, theta, psi = np.degrees(self.euler)
        return (
            f"VehicleState(alt={self.altitude:.1f}m, "
            f"V={self.airspeed:.2f}m/s, "
            f"phi={phi:.2f}deg, theta={theta:.2f}deg, psi={psi:.2f}deg)"
        )


def create_initial_state() -> VehicleState:
    """
    Create the default initial state for the simulation.

    Returns:
        VehicleState initialized with the nominal cruise conditions.
    """
    return VehicleState(
        euler=C.INITIAL_EULER.copy(),
        omega=C.INITIAL_OMEGA.copy(),
        position=C.INITIAL_POSITION.copy(),
        velocity=C.INITIAL_VELOCITY.copy()
    )
