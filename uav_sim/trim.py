"""
UAV Flight Simulation - Trim Solver

This module finds a steady-flight equilibrium: a vehicle state and a
control vector at which the dynamics produce zero net force and zero net
torque for a commanded airspeed, flight-path angle and bank angle.

The search runs over the reduced free set

    x = [alpha, beta, phi, theta, d_a, d_e, d_t, d_r]

with body rates held at zero and yaw/position taken from the configured
initial conditions. Residuals are the body net force (3), the body net
torque (3), the bank angle error and the flight-path angle error.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.optimize import least_squares

from . import constants as C
from .config import SimulationConfig
from .dynamics import DynamicsModel, FixedWingDynamics
from .errors import NotYetComputed, TrimDivergence
from .frames import euler_to_rotation_matrix, flight_path_angle, wind_to_body
from .state import VehicleState

logger = logging.getLogger(__name__)

# Free variable layout
_ALPHA, _BETA, _PHI, _THETA = 0, 1, 2, 3
_CONTROLS = slice(4, 8)


@dataclass
class TrimResult:
    """Equilibrium state/control pair and its quality."""
    state: VehicleState
    controls: np.ndarray  # [aileron, elevator, throttle, rudder]
    forces: np.ndarray  # Net body force at trim (N)
    torques: np.ndarray  # Net body torque at trim (N*m)
    residual_norm: float
    iterations: int  # Residual evaluations used

    @property
    def alpha(self) -> float:
        """Body angle of attack at trim (rad), ignoring wind."""
        u, _, w = self.state.velocity
        return float(np.arctan2(w, u))

    def copy(self) -> 'TrimResult':
        return TrimResult(
            state=self.state.copy(),
            controls=self.controls.copy(),
            forces=self.forces.copy(),
            torques=self.torques.copy(),
            residual_norm=self.residual_norm,
            iterations=self.iterations,
        )


class Trimmer:
    """
    Equilibrium search for the configured flight condition.

    Args:
        config: Simulation configuration (trim_* fields, initial yaw/position)
        dynamics: Dynamics model to trim; defaults to FixedWingDynamics
    """

    def __init__(self, config: SimulationConfig, dynamics: Optional[DynamicsModel] = None):
        self.config = config
        self.dynamics = dynamics if dynamics is not None else FixedWingDynamics.from_config(config)
        self.wind_ned = np.array(config.wind_ned, dtype=np.float64)
        self.n_aux = len(config.init_aux)
        self._result: Optional[TrimResult] = None

    @property
    def is_trimmed(self) -> bool:
        return self._result is not None

    def _state_from_free(self, x: np.ndarray) -> VehicleState:
        euler = np.array([x[_PHI], x[_THETA], self.config.init_euler[2]])
        v_air = wind_to_body(self.config.trim_airspeed, x[_ALPHA], x[_BETA])
        R = euler_to_rotation_matrix(euler)
        return VehicleState(
            euler=euler,
            omega=np.zeros(3),
            position=np.array(self.config.init_position, dtype=np.float64),
            velocity=v_air + R.T @ self.wind_ned,
            aux=np.array(self.config.init_aux, dtype=np.float64),
        )

    def _residual(self, x: np.ndarray) -> np.ndarray:
        state = self._state_from_free(x)
        out = self.dynamics.evaluate(state, x[_CONTROLS], self.config.t_0)
        gamma = flight_path_angle(euler_to_rotation_matrix(state.euler) @ state.velocity)
        return np.concatenate([
            out.forces,
            out.torques,
            [x[_PHI] - self.config.trim_phi,
             gamma - self.config.trim_gamma],
        ])

    def _initial_guess(self) -> np.ndarray:
        x0 = np.zeros(8)
        x0[_ALPHA] = C.TRIM_INITIAL_ALPHA
        x0[_PHI] = self.config.trim_phi
        x0[_THETA] = self.config.trim_gamma + C.TRIM_INITIAL_ALPHA
        x0[_CONTROLS] = [0.0, C.TRIM_INITIAL_ELEVATOR, C.TRIM_INITIAL_THROTTLE, 0.0]
        return x0

    def _bounds(self):
        a = C.TRIM_ALPHA_LIMIT
        pitch = self.config.max_euler_pitch
        lower = np.concatenate([[-a, -a, -np.pi, -pitch], C.CONTROL_LOWER])
        upper = np.concatenate([[a, a, np.pi, pitch], C.CONTROL_UPPER])
        return lower, upper

    def calc_trim(self):
        """
        Run the equilibrium search and store the result.

        Raises:
            TrimDivergence: If the residuals are not below trim_tolerance
                within trim_max_iterations evaluations
        """
        cfg = self.config
        tol = cfg.trim_tolerance
        logger.info(f"Trimming for Va={cfg.trim_airspeed:.2f} m/s, "
                    f"gamma={np.degrees(cfg.trim_gamma):.2f} deg, "
                    f"phi={np.degrees(cfg.trim_phi):.2f} deg")

        lower, upper = self._bounds()
        x0 = np.clip(self._initial_guess(), lower, upper)
        sol = least_squares(
            self._residual, x0,
            bounds=(lower, upper),
            method='trf',
            ftol=1e-12, xtol=1e-12, gtol=1e-12,
            max_nfev=cfg.trim_max_iterations,
        )

        residual = sol.fun
        force_norm = np.linalg.norm(residual[0:3])
        torque_norm = np.linalg.norm(residual[3:6])
        angle_err = np.max(np.abs(residual[6:8]))
        converged = force_norm < tol and torque_norm < tol and angle_err < tol

        if not converged:
            logger.error(f"Trim failed after {sol.nfev} evaluations: "
                         f"|F|={force_norm:.3e} N, |M|={torque_norm:.3e} N*m, "
                         f"angle error={angle_err:.3e} rad")
            raise TrimDivergence(residual, sol.nfev, reason=sol.message)

        if max(force_norm, torque_norm, angle_err) > 0.1 * tol:
            logger.warning(f"Trim residual close to tolerance: "
                           f"|F|={force_norm:.3e}, |M|={torque_norm:.3e}")

        state = self._state_from_free(sol.x)
        out = self.dynamics.evaluate(state, sol.x[_CONTROLS], cfg.t_0)
        self._result = TrimResult(
            state=state,
            controls=sol.x[_CONTROLS].copy(),
            forces=np.array(out.forces, dtype=np.float64),
            torques=np.array(out.torques, dtype=np.float64),
            residual_norm=float(np.linalg.norm(residual)),
            iterations=int(sol.nfev),
        )

        logger.info(f"Trim converged in {sol.nfev} evaluations: "
                    f"alpha={np.degrees(sol.x[_ALPHA]):.3f} deg, "
                    f"theta={np.degrees(sol.x[_THETA]):.3f} deg, "
                    f"elevator={np.degrees(sol.x[5]):.3f} deg, "
                    f"throttle={sol.x[6]:.4f}")
        logger.debug(f"Trim residual: {residual}")

    def _require_result(self) -> TrimResult:
        if self._result is None:
            raise NotYetComputed("calc_trim() has not converged yet")
        return self._result

    def get_trim_state(self) -> VehicleState:
        """Trimmed vehicle state (copy)."""
        return self._require_result().state.copy()

    def get_trim_controls(self) -> np.ndarray:
        """Trimmed control vector (copy)."""
        return self._require_result().controls.copy()

    def get_trim_result(self) -> TrimResult:
        """Full trim result (copy)."""
        return self._require_result().copy()
