"""
UAV Flight Simulation - Reference Frame Transformations

This module implements Euler-angle attitude kinematics and the frame
transformations used by the dynamics model and the trimmer.

Conventions:
- Inertial frame: North-East-Down (NED)
- Body frame: x forward, y right wing, z down
- Euler angles: [phi, theta, psi] with 3-2-1 (yaw-pitch-roll) rotation order
- Quaternion view: [w, x, y, z] (scalar-first)
"""

import numpy as np


def euler_to_rotation_matrix(euler: np.ndarray) -> np.ndarray:
    """
    Rotation matrix from body frame to NED frame.

    v_ned = R(euler) @ v_body

    Args:
        euler: Euler angles [phi, theta, psi] (rad)

    Returns:
        3x3 rotation matrix
    """
    phi, theta, psi = euler
    c_phi, s_phi = np.cos(phi), np.sin(phi)
    c_the, s_the = np.cos(theta), np.sin(theta)
    c_psi, s_psi = np.cos(psi), np.sin(psi)

    return np.array([
        [c_the * c_psi, s_phi * s_the * c_psi - c_phi * s_psi, c_phi * s_the * c_psi + s_phi * s_psi],
        [c_the * s_psi, s_phi * s_the * s_psi + c_phi * c_psi, c_phi * s_the * s_psi - s_phi * c_psi],
        [-s_the,        s_phi * c_the,                          c_phi * c_the],
    ])


def euler_rate_matrix(euler: np.ndarray) -> np.ndarray:
    """
    Matrix mapping body angular rates to Euler angle rates.

    [phi_dot, theta_dot, psi_dot] = H(phi, theta) @ [p, q, r]

    Singular at theta = +/-90 deg; callers are expected to keep the state
    away from the singularity (see validation.check_euler_singularity).
    """
    phi, theta = euler[0], euler[1]
    c_phi, s_phi = np.cos(phi), np.sin(phi)
    c_the = np.cos(theta)
    t_the = np.tan(theta)

    return np.array([
        [1.0, s_phi * t_the, c_phi * t_the],
        [0.0, c_phi, -s_phi],
        [0.0, s_phi / c_the, c_phi / c_the],
    ])


def gravity_direction_body(euler: np.ndarray) -> np.ndarray:
    """Unit gravity vector (NED down axis) expressed in body frame."""
    phi, theta = euler[0], euler[1]
    return np.array([
        -np.sin(theta),
        np.cos(theta) * np.sin(phi),
        np.cos(theta) * np.cos(phi),
    ])


def wind_to_body(airspeed: float, alpha: float, beta: float) -> np.ndarray:
    """
    Body-frame velocity for a given airspeed, angle of attack and sideslip.

    Args:
        airspeed: Airspeed magnitude (m/s)
        alpha: Angle of attack (rad)
        beta: Sideslip angle (rad)

    Returns:
        Body velocity [u, v, w] (m/s)
    """
    return airspeed * np.array([
        np.cos(alpha) * np.cos(beta),
        np.sin(beta),
        np.sin(alpha) * np.cos(beta),
    ])


def euler_to_quaternion(euler: np.ndarray) -> np.ndarray:
    """
    Convert 3-2-1 Euler angles to a unit quaternion [w, x, y, z].
    """
    phi, theta, psi = 0.5 * np.asarray(euler, dtype=np.float64)
    c_phi, s_phi = np.cos(phi), np.sin(phi)
    c_the, s_the = np.cos(theta), np.sin(theta)
    c_psi, s_psi = np.cos(psi), np.sin(psi)

    return np.array([
        c_psi * c_the * c_phi + s_psi * s_the * s_phi,
        c_psi * c_the * s_phi - s_psi * s_the * c_phi,
        c_psi * s_the * c_phi + s_psi * c_the * s_phi,
        s_psi * c_the * c_phi - c_psi * s_the * s_phi,
    ])


def flight_path_angle(velocity_ned: np.ndarray) -> float:
    """
    Flight path angle from the NED velocity (positive climbing).

    Args:
        velocity_ned: Inertial velocity [v_n, v_e, v_d] (m/s)

    Returns:
        Flight path angle gamma (rad)
    """
    horizontal = np.hypot(velocity_ned[0], velocity_ned[1])
    return float(np.arctan2(-velocity_ned[2], horizontal))
