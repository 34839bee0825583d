"""
UAV Flight Simulation - Main Entry Point

This module implements the simulation driver:
- Solver selection (fixed-step forward Euler, adaptive RK45 / BDF)
- Optional trim of the initial condition
- Supervisor initialization and the time-advance loop
- Run summary and CSV export of the recorded series

Coordinate Frames:
- Position: North-East-Down (NED) frame
- Velocity / angular rate: Body frame
- Attitude: 3-2-1 Euler angles [phi, theta, psi]
"""

import dataclasses
import logging
import os
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import SimulationConfig, SolverType, create_default_config
from .dynamics import DynamicsModel, FixedWingDynamics
from .errors import InitializationError, UnsupportedSolverType
from .integrators import solve_adaptive
from .recording import TimeSeriesRecord
from .state import VehicleState
from .supervisor import IntegrationSupervisor
from .trim import Trimmer, TrimResult

# Configure module logger
logger = logging.getLogger(__name__)

STATE_HEADER = [
    'phi', 'theta', 'psi',
    'p', 'q', 'r',
    'north', 'east', 'down',
    'u', 'v', 'w',
]
INPUT_HEADER = ['aileron', 'elevator', 'throttle', 'rudder']


@dataclass
class SimulationOutput:
    """Recorded series and summary of one run."""
    final_state: VehicleState
    solver_type: SolverType
    steps: int
    wall_time: float
    state_record: Optional[TimeSeriesRecord] = None
    input_record: Optional[TimeSeriesRecord] = None
    trim: Optional[TrimResult] = None
    final_time: float = 0.0

    @property
    def time_states(self) -> Optional[np.ndarray]:
        return None if self.state_record is None else self.state_record.times

    @property
    def states(self) -> Optional[np.ndarray]:
        return None if self.state_record is None else self.state_record.values

    @property
    def time_inputs(self) -> Optional[np.ndarray]:
        return None if self.input_record is None else self.input_record.times

    @property
    def inputs(self) -> Optional[np.ndarray]:
        return None if self.input_record is None else self.input_record.values

    def to_csv(self, directory: str):
        """Write states.csv and inputs.csv for the recorded series."""
        os.makedirs(directory, exist_ok=True)
        if self.state_record is not None:
            n_aux = self.state_record.width - len(STATE_HEADER)
            header = STATE_HEADER + [f'aux{i}' for i in range(n_aux)]
            self.state_record.to_csv(os.path.join(directory, 'states.csv'), header)
        if self.input_record is not None:
            self.input_record.to_csv(os.path.join(directory, 'inputs.csv'), INPUT_HEADER)


def _resolve_solver_type(value) -> SolverType:
    # bool is an int subclass
    if isinstance(value, bool):
        raise UnsupportedSolverType(value)
    try:
        return SolverType(value)
    except ValueError:
        raise UnsupportedSolverType(value) from None


def apply_trim(config: SimulationConfig, trim: TrimResult) -> SimulationConfig:
    """
    Derive a config whose initial conditions and static output come from a
    trim result. Yaw and position are kept from the original config.
    """
    state = trim.state
    return dataclasses.replace(
        config,
        init_euler=(float(state.euler[0]), float(state.euler[1]), float(config.init_euler[2])),
        init_vel_linear_body=tuple(float(v) for v in state.velocity),
        init_vel_angular_body=tuple(float(w) for w in state.omega),
        static_output=tuple(float(u) for u in trim.controls),
    )


def advance(supervisor: IntegrationSupervisor, config: SimulationConfig):
    """
    Advance the supervisor from t_0 to t_f with the configured solver.

    Returns:
        (state_record, input_record) of the supervisor

    Raises:
        UnsupportedSolverType: If config.solver_type is not a SolverType
        InitializationError: If the supervisor has already run
    """
    solver_type = _resolve_solver_type(config.solver_type)
    if supervisor.finished:
        raise InitializationError("Supervisor has already completed a run")

    if solver_type == SolverType.FORWARD_EULER:
        n_frames = config.num_frames
        supervisor.state_record.reserve(n_frames)
        supervisor.input_record.reserve(n_frames)

        t = supervisor.time
        while config.t_f - t > config.t_eps:
            supervisor.sim_step(t)
            supervisor.integrate_fe()
            t = supervisor.time
        supervisor.finish()

    else:
        solve_adaptive(
            supervisor.ode_eval,
            (config.t_0, config.t_f),
            supervisor.state.flatten(),
            method=solver_type.name,
            output_fcn=supervisor.ode_outputFcn,
            rtol=config.rtol,
            atol=config.atol,
            max_step=config.max_step,
        )

    return supervisor.state_record, supervisor.input_record


def run_simulation(config: SimulationConfig = None,
                   dynamics: Optional[DynamicsModel] = None,
                   verbose: Optional[bool] = None) -> SimulationOutput:
    """
    Run one complete simulation.

    Args:
        config: SimulationConfig instance. If None a default is created.
        dynamics: Dynamics model. If None, FixedWingDynamics built from config.
        verbose: Print banner and summary. Overrides config.verbose if given.

    Returns:
        SimulationOutput with the recorded series
    """
    if config is None:
        config = create_default_config()
    if verbose is None:
        verbose = config.verbose

    solver_type = _resolve_solver_type(config.solver_type)
    if config.dt <= 0:
        raise ValueError(f"Time step dt must be positive, got {config.dt}")
    if config.t_f < config.t_0:
        raise ValueError(f"t_f={config.t_f} is before t_0={config.t_0}")

    if dynamics is None:
        dynamics = FixedWingDynamics.from_config(config)

    logger.info(f"Starting simulation: solver={solver_type.name}, "
                f"t=[{config.t_0}, {config.t_f}]s, dt={config.dt}s, "
                f"controller={config.controller_type}")

    if verbose:
        print("\n" + "=" * 70)
        print(f"UAV FLIGHT SIMULATION | solver={solver_type.name} | "
              f"T={config.t_f - config.t_0:.2f}s | dt={config.dt}s")
        print("=" * 70)

    try:
        trim = None
        if config.requires_trim:
            trimmer = Trimmer(config, dynamics)
            trimmer.calc_trim()
            trim = trimmer.get_trim_result()
            config = apply_trim(config, trim)
            if verbose:
                print(f"Trim: alpha={np.degrees(trim.alpha):.3f} deg, "
                      f"controls={np.round(trim.controls, 4)}")

        supervisor = IntegrationSupervisor(config, dynamics)
        supervisor.initialize_sim_state(config)
        supervisor.initialize_controller(config)

        start_time = time.time()
        advance(supervisor, config)
        elapsed = time.time() - start_time
    except Exception as e:
        logger.error(f"Simulation failed: {e}")
        raise

    output = SimulationOutput(
        final_state=supervisor.state,
        solver_type=solver_type,
        steps=supervisor.step_count,
        wall_time=elapsed,
        trim=trim,
        final_time=supervisor.time,
    )
    if config.record_states:
        output.state_record = supervisor.state_record
    if config.record_inputs:
        output.input_record = supervisor.input_record

    _log_completion(output, config, verbose)
    return output


def _log_completion(output: SimulationOutput, config: SimulationConfig, verbose: bool):
    """Log and print run statistics."""
    duration = output.final_time - config.t_0
    ratio = duration / output.wall_time if output.wall_time > 0 else float('inf')
    state = output.final_state

    logger.info(f"Simulation complete: {output.steps} steps, {duration:.2f}s simulated "
                f"in {output.wall_time:.2f}s wall time ({ratio:.1f}x real time)")
    logger.info(f"Final state: {state}")

    if verbose:
        print("-" * 70)
        print("SIMULATION COMPLETED")
        print("-" * 70)
        print(f"Final Time:     {output.final_time:.2f} s")
        print(f"Final Altitude: {state.altitude:.2f} m")
        print(f"Final Airspeed: {state.airspeed:.2f} m/s")
        print("-" * 70)
        print(f"Steps:       {output.steps:,}")
        print(f"Wall Time:   {output.wall_time:.2f} s")
        print(f"Speed-up:    {ratio:.1f}x" if output.wall_time > 0 else "Speed-up:    N/A")
        print("=" * 70)
