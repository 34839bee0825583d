"""
UAV Flight Simulation - Integration Supervisor

The supervisor owns the authoritative vehicle state, the simulation clock,
the dynamics model, the controller and the two recorded series (states and
control inputs). It exposes two time-advance paths:

- Fixed step:  sim_step(t) evaluates and caches the derivative, then
  integrate_fe() consumes it with one forward Euler update.
- Adaptive:    ode_eval(t, y) is a side-effect-free derivative function for
  a generic solver, and ode_outputFcn(t, y, flag) records and commits each
  accepted step.
"""

import logging
from typing import Optional

import numpy as np

from . import constants as C
from .config import SimulationConfig
from .control import Controller, create_controller
from .dynamics import DynamicsModel, DynamicsOutput, FixedWingDynamics
from .errors import InitializationError, ShapeMismatch, StaleDerivative
from .integrators import euler_update
from .recording import TimeSeriesRecord
from .state import VehicleState
from .validation import validate_state

logger = logging.getLogger(__name__)


class IntegrationSupervisor:
    """
    Drives one simulation run.

    Lifecycle: initialize_sim_state() once, then initialize_controller()
    once, then either the fixed-step or the adaptive path. A supervisor is
    not reused across runs.

    Args:
        config: Run configuration
        dynamics: Dynamics model; defaults to FixedWingDynamics from config
    """

    def __init__(self, config: SimulationConfig, dynamics: Optional[DynamicsModel] = None):
        self.config = config
        self.dynamics = dynamics if dynamics is not None else FixedWingDynamics.from_config(config)

        self._state: Optional[VehicleState] = None
        self._time: Optional[float] = None
        self._controller: Optional[Controller] = None
        self._controls: Optional[np.ndarray] = None
        self._step_count = 0

        self._state_record: Optional[TimeSeriesRecord] = None
        self._input_record = TimeSeriesRecord(C.CONTROL_DIM)

        # (t, controls, DynamicsOutput) from the last sim_step(), None once consumed
        self._pending = None

        # 'fixed' or 'adaptive' once a run has started
        self._path: Optional[str] = None
        self._finished = False

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize_sim_state(self, config: SimulationConfig):
        """Build the initial state from config.init_* and set the clock to t_0."""
        if self._state is not None:
            raise InitializationError("Simulation state is already initialized")

        state = VehicleState(
            euler=config.init_euler,
            omega=config.init_vel_angular_body,
            position=config.init_position,
            velocity=config.init_vel_linear_body,
            aux=config.init_aux,
        )
        validate_state(state, config.max_euler_pitch)

        self._state = state
        self._time = float(config.t_0)
        self._state_record = TimeSeriesRecord(self._state.dimension)
        logger.debug(f"Initial state at t={self._time:.3f}s: {self._state}")

    def initialize_controller(self, config: SimulationConfig):
        """Bind the controller selected by config.controller_type."""
        if self._state is None:
            raise InitializationError("initialize_sim_state() must be called first")
        if self._controller is not None:
            raise InitializationError("Controller is already initialized")

        self._controller = create_controller(config)
        logger.debug(f"Controller: {type(self._controller).__name__}")

    def _require_ready(self):
        if self._state is None or self._controller is None:
            raise InitializationError(
                "Supervisor not initialized: call initialize_sim_state() "
                "and initialize_controller() first"
            )

    def _enter_path(self, path: str):
        if self._finished:
            raise InitializationError("Run already finished; a supervisor runs once")
        if self._path is not None and self._path != path:
            raise InitializationError(
                f"Run already started on the {self._path} path, cannot switch to {path}"
            )

    def finish(self):
        """Mark the run complete. Further stepping raises InitializationError."""
        self._require_ready()
        self._finished = True
        logger.debug(f"Run finished at t={self._time:.6f}s after {self._step_count} steps")

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> Optional[VehicleState]:
        return None if self._state is None else self._state.copy()

    @property
    def time(self) -> Optional[float]:
        return self._time

    @property
    def controls(self) -> Optional[np.ndarray]:
        """Most recent control vector."""
        return None if self._controls is None else self._controls.copy()

    @property
    def state_record(self) -> Optional[TimeSeriesRecord]:
        return self._state_record

    @property
    def input_record(self) -> TimeSeriesRecord:
        return self._input_record

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def finished(self) -> bool:
        return self._finished

    # ------------------------------------------------------------------
    # Fixed-step path
    # ------------------------------------------------------------------

    def _evaluate(self, state: VehicleState, t: float):
        controls = np.asarray(self._controller.compute(state, t), dtype=np.float64)
        out = self.dynamics.evaluate(state, controls, t)
        derivative = np.asarray(out.state_derivative, dtype=np.float64)
        if derivative.shape != (state.dimension,):
            raise ShapeMismatch(state.dimension, derivative.shape)
        return controls, DynamicsOutput(out.forces, out.torques, derivative)

    def sim_step(self, t: float) -> DynamicsOutput:
        """
        Evaluate controller and dynamics at the current state and cache the
        result for integrate_fe(). Does not change the state.
        """
        self._require_ready()
        self._enter_path('fixed')
        controls, out = self._evaluate(self._state, t)
        self._pending = (float(t), controls, out)
        self._controls = controls
        return out

    def integrate_fe(self):
        """
        Advance the state by one forward Euler step of config.dt using the
        derivative cached by sim_step().

        Records (t_n, state_n) and (t_n, control_n) before the update.

        Raises:
            StaleDerivative: If there is no fresh cached evaluation for the
                current time
            ValidationError: If the new state is not finite or singular
            InitializationError: If the run has finished or used the
                adaptive path
        """
        self._require_ready()
        self._enter_path('fixed')
        if self._pending is None:
            raise StaleDerivative("integrate_fe() requires a preceding sim_step()")

        t_eval, controls, out = self._pending
        if abs(t_eval - self._time) > self.config.t_eps:
            raise StaleDerivative(
                f"Cached derivative is for t={t_eval:.6f}s, supervisor clock is t={self._time:.6f}s"
            )
        self._pending = None

        y = self._state.flatten()
        if self.config.record_states:
            self._state_record.append(self._time, y)
        if self.config.record_inputs:
            self._input_record.append(self._time, controls)

        y_new = euler_update(y, out.state_derivative, self.config.dt)
        new_state = VehicleState.unflatten(y_new, self._state.n_aux)
        validate_state(new_state, self.config.max_euler_pitch)

        self._path = 'fixed'
        self._state = new_state
        self._step_count += 1
        self._time = self.config.t_0 + self._step_count * self.config.dt

    # ------------------------------------------------------------------
    # Adaptive path
    # ------------------------------------------------------------------

    def ode_eval(self, t: float, y: np.ndarray) -> np.ndarray:
        """Derivative function f(t, y) for a generic ODE solver."""
        self._require_ready()
        state = VehicleState.unflatten(y, self._state.n_aux)
        _, out = self._evaluate(state, t)
        return out.state_derivative

    def ode_outputFcn(self, t: float, y: np.ndarray, flag: str) -> bool:
        """
        Per-accepted-step callback g(t, y, flag) for a generic ODE solver.

        flag 'init' and '' record the accepted (t, y) and the control
        re-evaluated at that state, then commit it as the current state.
        flag 'done' finishes the run. Always returns False (continue).

        Raises:
            InitializationError: On 'init' once the run has started, on any
                flag after the run finished, or if t is before the
                supervisor clock
        """
        self._require_ready()
        if flag not in ('init', '', 'done'):
            raise ValueError(f"Unknown output flag {flag!r}")
        self._enter_path('adaptive')
        if flag == 'init' and self._path is not None:
            raise InitializationError("Adaptive solve already started on this supervisor")
        if t < self._time:
            raise InitializationError(
                f"Backward step: t={t:.6f}s is before the supervisor clock t={self._time:.6f}s"
            )
        if flag == 'done':
            self.finish()
            return False

        state = VehicleState.unflatten(y, self._state.n_aux)
        controls = np.asarray(self._controller.compute(state, t), dtype=np.float64)

        if self.config.record_states:
            self._state_record.append(t, state.flatten())
        if self.config.record_inputs:
            self._input_record.append(t, controls)

        if flag == '':
            validate_state(state, self.config.max_euler_pitch)
            self._step_count += 1

        self._path = 'adaptive'
        self._state = state
        self._time = float(t)
        self._controls = controls
        return False

    ode_output_fcn = ode_outputFcn
