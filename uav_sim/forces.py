"""
UAV Flight Simulation - Force Computations

This module implements all force and torque calculations, in body frame
about the centre of gravity:
- Gravity
- Aerodynamics (lift/drag with stall blending, side force, moments)
- Propulsion (propeller thrust and reaction torque)
"""

import numpy as np

from . import constants as C
from .frames import euler_to_rotation_matrix, gravity_direction_body
from .state import VehicleState
from .types import AirData, ForceBreakdown


# =============================================================================
# ATMOSPHERE MODEL (exponential)
# =============================================================================

def compute_air_density(altitude: float, enable_density_altitude: bool = True) -> float:
    """
    Compute air density.

    rho = rho_0 * exp(-h / H)

    Args:
        altitude: Altitude above the NED origin (m)
        enable_density_altitude: If False, the sea-level density is returned

    Returns:
        Density (kg/m^3)
    """
    if not enable_density_altitude:
        return C.RHO_0
    h = max(0.0, float(altitude))
    return float(max(C.RHO_0 * np.exp(-h / C.H_SCALE), C.DENSITY_FLOOR))


def compute_air_data(state: VehicleState, wind_ned: np.ndarray = None,
                     enable_density_altitude: bool = True) -> AirData:
    """
    Compute wind-relative air data.

    v_air = v_body - R^T(euler) @ wind_ned
    alpha = atan2(w_r, u_r), beta = asin(v_r / Va)
    """
    v_air = state.velocity.copy()
    if wind_ned is not None:
        R = euler_to_rotation_matrix(state.euler)
        v_air = v_air - R.T @ np.asarray(wind_ned, dtype=np.float64)

    airspeed = float(np.linalg.norm(v_air))
    if airspeed < C.MIN_AIRSPEED:
        alpha = 0.0
        beta = 0.0
    else:
        alpha = float(np.arctan2(v_air[2], v_air[0]))
        beta = float(np.arcsin(np.clip(v_air[1] / airspeed, -1.0, 1.0)))

    rho = compute_air_density(state.altitude, enable_density_altitude)

    return {
        'airspeed': airspeed,
        'alpha': alpha,
        'beta': beta,
        'density': rho,
        'dynamic_pressure': 0.5 * rho * airspeed ** 2,
        'velocity_air_body': v_air,
    }


# =============================================================================
# FORCE MODELS
# =============================================================================

def compute_gravity_force(euler: np.ndarray, mass: float = C.MASS) -> np.ndarray:
    """
    Compute gravitational force in body frame.

    F = m * g * [-sin(theta), cos(theta) sin(phi), cos(theta) cos(phi)]
    """
    return mass * C.G0 * gravity_direction_body(euler)


def compute_lift_drag_coefficients(alpha: float) -> tuple:
    """
    Lift and drag coefficients as functions of angle of attack.

    Lift blends the linear model with flat-plate lift past stall through
    a sigmoid centred on +/-STALL_ALPHA:
        CL = (1 - sigma) * (CL0 + CLa * alpha) + sigma * 2 sign(alpha) sin^2(alpha) cos(alpha)
    Drag uses the parabolic polar:
        CD = CDp + (CL0 + CLa * alpha)^2 / (pi * e * AR)

    Returns:
        (CL, CD)
    """
    M = C.STALL_TRANSITION_RATE
    a0 = C.STALL_ALPHA
    e_neg = np.exp(-M * (alpha - a0))
    e_pos = np.exp(M * (alpha + a0))
    sigma = (1.0 + e_neg + e_pos) / ((1.0 + e_neg) * (1.0 + e_pos))

    cl_linear = C.C_L_0 + C.C_L_ALPHA * alpha
    cl_plate = 2.0 * np.sign(alpha) * np.sin(alpha) ** 2 * np.cos(alpha)
    cl = (1.0 - sigma) * cl_linear + sigma * cl_plate

    cd = C.C_D_P + cl_linear ** 2 / (np.pi * C.OSWALD_EFFICIENCY * C.ASPECT_RATIO)
    return float(cl), float(cd)


def compute_aerodynamics(air: AirData, omega: np.ndarray, controls: np.ndarray) -> tuple:
    """
    Compute aerodynamic force and moment in body frame.

    Args:
        air: Air data (see compute_air_data)
        omega: Body angular rates [p, q, r] (rad/s)
        controls: Control vector [aileron, elevator, throttle, rudder]

    Returns:
        (force, torque) in N and N*m
    """
    Va = air['airspeed']
    if Va < C.MIN_AIRSPEED:
        return np.zeros(3), np.zeros(3)

    alpha = air['alpha']
    beta = air['beta']
    qbar_s = air['dynamic_pressure'] * C.WING_AREA
    p, q, r = omega
    d_a = controls[C.IDX_AILERON]
    d_e = controls[C.IDX_ELEVATOR]
    d_r = controls[C.IDX_RUDDER]

    # Non-dimensional rates
    c_2v = C.MEAN_CHORD / (2.0 * Va)
    b_2v = C.WING_SPAN / (2.0 * Va)

    cl, cd = compute_lift_drag_coefficients(alpha)
    lift = qbar_s * (cl + C.C_L_Q * c_2v * q + C.C_L_DELTA_E * d_e)
    drag = qbar_s * (cd + C.C_D_Q * c_2v * q + C.C_D_DELTA_E * d_e)

    # Stability axes to body axes
    c_a, s_a = np.cos(alpha), np.sin(alpha)
    fx = -c_a * drag + s_a * lift
    fz = -s_a * drag - c_a * lift
    fy = qbar_s * (C.C_Y_0 + C.C_Y_BETA * beta + C.C_Y_P * b_2v * p + C.C_Y_R * b_2v * r
                   + C.C_Y_DELTA_A * d_a + C.C_Y_DELTA_R * d_r)

    ell = qbar_s * C.WING_SPAN * (
        C.C_ELL_0 + C.C_ELL_BETA * beta + C.C_ELL_P * b_2v * p + C.C_ELL_R * b_2v * r
        + C.C_ELL_DELTA_A * d_a + C.C_ELL_DELTA_R * d_r
    )
    m = qbar_s * C.MEAN_CHORD * (
        C.C_M_0 + C.C_M_ALPHA * alpha + C.C_M_Q * c_2v * q + C.C_M_DELTA_E * d_e
    )
    n = qbar_s * C.WING_SPAN * (
        C.C_N_0 + C.C_N_BETA * beta + C.C_N_P * b_2v * p + C.C_N_R * b_2v * r
        + C.C_N_DELTA_A * d_a + C.C_N_DELTA_R * d_r
    )

    return np.array([fx, fy, fz]), np.array([ell, m, n])


def compute_propulsion(air: AirData, throttle: float) -> tuple:
    """
    Compute propeller thrust and reaction torque in body frame.

    F_prop = 0.5 * rho * S_prop * C_prop * ((k_motor * dt)^2 - Va^2)
    T_prop = -k_Tp * (k_Omega * dt)^2

    Returns:
        (force, torque) in N and N*m
    """
    rho = air['density']
    Va = air['airspeed']
    thrust = 0.5 * rho * C.PROP_AREA * C.PROP_COEFFICIENT * (
        (C.MOTOR_CONSTANT * throttle) ** 2 - Va ** 2
    )
    torque = -C.PROP_TORQUE_CONSTANT * (C.PROP_SPEED_CONSTANT * throttle) ** 2
    return np.array([thrust, 0.0, 0.0]), np.array([torque, 0.0, 0.0])


def compute_forces_and_torques(state: VehicleState, controls: np.ndarray,
                               wind_ned: np.ndarray = None,
                               enable_density_altitude: bool = True,
                               mass: float = C.MASS) -> tuple:
    """
    Compute the full force and torque breakdown for a state/control pair.

    Returns:
        (ForceBreakdown, AirData)
    """
    air = compute_air_data(state, wind_ned, enable_density_altitude)

    F_grav = compute_gravity_force(state.euler, mass)
    F_aero, M_aero = compute_aerodynamics(air, state.omega, controls)
    F_prop, M_prop = compute_propulsion(air, controls[C.IDX_THROTTLE])

    breakdown: ForceBreakdown = {
        'gravity': F_grav,
        'aerodynamic': F_aero,
        'propulsion': F_prop,
        'total_force': F_grav + F_aero + F_prop,
        'aerodynamic_torque': M_aero,
        'propulsion_torque': M_prop,
        'total_torque': M_aero + M_prop,
    }
    return breakdown, air
