"""
UAV Flight Simulation - Physical Constants and Vehicle Parameters

This module defines the physical constants, the fixed-wing vehicle
specification (Aerosonde-class small UAV), control surface limits and the
numerical defaults used throughout the simulation.

VALUES FROM: Beard & McLain, "Small Unmanned Aircraft", Appendix E
"""

import numpy as np

# =============================================================================
# ENVIRONMENT
# =============================================================================

# Standard gravitational acceleration (m/s^2)
G0 = 9.81

# Atmospheric parameters (exponential model)
RHO_0 = 1.2682  # Sea level density used by the reference aircraft data (kg/m^3)
H_SCALE = 8500.0  # Scale height (m)
DENSITY_FLOOR = 1e-6  # Minimum density (kg/m^3)

# =============================================================================
# MASS PROPERTIES
# =============================================================================

MASS = 13.5  # kg

# Inertia tensor components (kg*m^2)
JX = 0.8244
JY = 1.135
JZ = 1.759
JXZ = 0.1204

INERTIA_TENSOR = np.array([
    [JX, 0.0, -JXZ],
    [0.0, JY, 0.0],
    [-JXZ, 0.0, JZ],
])
INERTIA_TENSOR_INV = np.linalg.inv(INERTIA_TENSOR)

# =============================================================================
# GEOMETRY
# =============================================================================

WING_AREA = 0.55  # S (m^2)
WING_SPAN = 2.8956  # b (m)
MEAN_CHORD = 0.18994  # c (m)
ASPECT_RATIO = WING_SPAN ** 2 / WING_AREA
OSWALD_EFFICIENCY = 0.9

# =============================================================================
# PROPULSION
# =============================================================================

PROP_AREA = 0.2027  # S_prop (m^2)
PROP_COEFFICIENT = 1.0  # C_prop
MOTOR_CONSTANT = 80.0  # k_motor (m/s per unit throttle)
PROP_TORQUE_CONSTANT = 0.0  # k_T_p
PROP_SPEED_CONSTANT = 0.0  # k_Omega

# =============================================================================
# AERODYNAMIC COEFFICIENTS
# =============================================================================

# Longitudinal
C_L_0 = 0.28
C_L_ALPHA = 3.45
C_L_Q = 0.0
C_L_DELTA_E = -0.36
C_D_0 = 0.03
C_D_Q = 0.0
C_D_P = 0.0437  # Parasitic drag
C_D_DELTA_E = 0.0
C_M_0 = -0.02338
C_M_ALPHA = -0.38
C_M_Q = -3.6
C_M_DELTA_E = -0.5

# Stall model (sigmoid blending between linear and flat-plate lift)
STALL_TRANSITION_RATE = 50.0  # M
STALL_ALPHA = 0.4712  # alpha_0 (rad)

# Lateral
C_Y_0 = 0.0
C_Y_BETA = -0.98
C_Y_P = 0.0
C_Y_R = 0.0
C_Y_DELTA_A = 0.0
C_Y_DELTA_R = -0.17
C_ELL_0 = 0.0
C_ELL_BETA = -0.12
C_ELL_P = -0.26
C_ELL_R = 0.14
C_ELL_DELTA_A = 0.08
C_ELL_DELTA_R = 0.105
C_N_0 = 0.0
C_N_BETA = 0.25
C_N_P = 0.022
C_N_R = -0.35
C_N_DELTA_A = 0.06
C_N_DELTA_R = -0.032

# =============================================================================
# CONTROL INPUTS
# =============================================================================

# Control vector layout: [aileron, elevator, throttle, rudder]
CONTROL_DIM = 4
IDX_AILERON = 0
IDX_ELEVATOR = 1
IDX_THROTTLE = 2
IDX_RUDDER = 3

MAX_SURFACE_DEFLECTION = np.radians(30.0)  # rad, symmetric limit for all surfaces
CONTROL_LOWER = np.array([-MAX_SURFACE_DEFLECTION, -MAX_SURFACE_DEFLECTION, 0.0, -MAX_SURFACE_DEFLECTION])
CONTROL_UPPER = np.array([MAX_SURFACE_DEFLECTION, MAX_SURFACE_DEFLECTION, 1.0, MAX_SURFACE_DEFLECTION])

# Neutral output for a static controller that has not been trimmed
DEFAULT_STATIC_OUTPUT = (0.0, 0.0, 0.5, 0.0)

# Feedback controller gains
KP_ROLL = 1.2
KD_ROLL = 0.25
KP_PITCH = -1.5
KD_PITCH = -0.3
KD_YAW = 0.4
KP_AIRSPEED = 0.08

# =============================================================================
# SIMULATION PARAMETERS
# =============================================================================

T_0 = 0.0  # Start time (s)
T_F = 30.0  # End time (s)
DT = 0.01  # Fixed integration step (s)
T_EPS = 1e-6  # Loop termination guard against float accumulation (s)
RTOL = 1e-6  # Adaptive solver relative tolerance
ATOL = 1e-8  # Adaptive solver absolute tolerance

# Initial conditions
INITIAL_POSITION = np.array([0.0, 0.0, -100.0])  # NED (m), 100 m altitude
INITIAL_EULER = np.array([0.0, 0.0, 0.0])  # phi, theta, psi (rad)
INITIAL_VELOCITY = np.array([25.0, 0.0, 0.0])  # Body u, v, w (m/s)
INITIAL_OMEGA = np.array([0.0, 0.0, 0.0])  # Body p, q, r (rad/s)

# =============================================================================
# TRIM PARAMETERS
# =============================================================================

TRIM_AIRSPEED = 25.0  # m/s
TRIM_GAMMA = 0.0  # Flight path angle (rad)
TRIM_PHI = 0.0  # Bank angle (rad)
TRIM_TOLERANCE = 1e-6  # Net force (N) / torque (N*m) tolerance
TRIM_MAX_ITERATIONS = 500  # Residual evaluations
TRIM_ALPHA_LIMIT = np.radians(45.0)  # Search bound on angle of attack and sideslip (rad)
TRIM_INITIAL_ALPHA = 0.05  # rad
TRIM_INITIAL_ELEVATOR = -0.1  # rad
TRIM_INITIAL_THROTTLE = 0.5

# =============================================================================
# NUMERICAL TOLERANCES
# =============================================================================

ZERO_TOLERANCE = 1e-10  # Near-zero check for divisions/normalizations
MIN_AIRSPEED = 1e-3  # Airspeed below which aerodynamic forces are zeroed (m/s)
MAX_EULER_PITCH = np.radians(89.0)  # Euler kinematics singularity guard
MAX_ANGULAR_RATE = 20.0  # rad/s, sanity bound on |omega|
