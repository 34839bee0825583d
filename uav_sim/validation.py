"""
UAV Flight Simulation - Validation Checks

This module implements per-step state sanity checks:
- Finite values in every state component
- Euler-angle pitch singularity (gimbal lock)
- Angular rate bound

Abort on violation.
"""

import numpy as np
from typing import Optional, Tuple

from . import constants as C
from .errors import SimulationError
from .state import VehicleState


class ValidationError(SimulationError):
    """Raised when a state validation check fails."""
    pass


def check_finite(state: VehicleState) -> bool:
    """
    Verify every state component is finite.

    Returns:
        True if valid, raises ValidationError otherwise
    """
    vec = state.flatten()
    if not np.all(np.isfinite(vec)):
        bad = np.flatnonzero(~np.isfinite(vec))
        raise ValidationError(
            f"Non-finite state values at flat indices {bad.tolist()}"
        )
    return True


def check_euler_singularity(euler: np.ndarray, max_pitch: float = None) -> bool:
    """
    Check that pitch stays clear of +/-90 deg, where the Euler-rate
    kinematics are singular.

    Args:
        euler: Euler angles [phi, theta, psi] (rad)
        max_pitch: Largest allowed |theta| (rad)

    Returns:
        True if valid, raises ValidationError otherwise
    """
    if max_pitch is None:
        max_pitch = C.MAX_EULER_PITCH

    theta = euler[1]
    if abs(theta) > max_pitch:
        raise ValidationError(
            f"Euler singularity: theta = {np.degrees(theta):.3f} deg, "
            f"limit = {np.degrees(max_pitch):.3f} deg"
        )
    return True


def check_angular_velocity_reasonable(omega: np.ndarray) -> bool:
    """
    Check that angular velocity is within reasonable bounds.

    Args:
        omega: Angular velocity (rad/s)

    Returns:
        True if valid, raises ValidationError otherwise
    """
    omega_mag = np.linalg.norm(omega)

    if omega_mag > C.MAX_ANGULAR_RATE:
        raise ValidationError(
            f"Angular velocity exceeds reasonable bounds: |ω| = {omega_mag:.4f} rad/s "
            f"({np.degrees(omega_mag):.2f} deg/s), max = {C.MAX_ANGULAR_RATE:.2f} rad/s"
        )
    return True


def validate_state(state: VehicleState, max_pitch: float = None,
                   abort_on_error: bool = True) -> Tuple[bool, Optional[str]]:
    """
    Perform all validation checks on a state.

    Args:
        state: State to validate
        max_pitch: Largest allowed |theta| (rad)
        abort_on_error: If True, raise exception on first error
    """
    try:
        check_finite(state)
        check_euler_singularity(state.euler, max_pitch)
        check_angular_velocity_reasonable(state.omega)
        return True, None
    except ValidationError as e:
        if abort_on_error:
            raise
        return False, str(e)
