"""
UAV Flight Simulation Package

A time-domain simulation of a fixed-wing rigid-body UAV with trimmed
initial conditions, fixed-step and adaptive time advance, and recorded
state/control time series.

Modules:
    - constants: Physical constants and vehicle parameters
    - errors: Simulation error types
    - frames: Euler-angle rotations and kinematics
    - state: Vehicle state dataclass and flat-vector serialization
    - forces: Force computations (gravity, aerodynamics, propulsion)
    - dynamics: Dynamics model interface and fixed-wing rigid-body model
    - control: Controller interface, static and feedback controllers
    - recording: Growable time series records
    - integrators: Forward Euler update and adaptive solver loop
    - validation: Per-step state checks
    - trim: Steady-flight trim solver
    - supervisor: Integration supervisor
    - main: Simulation entry point
"""

from .state import VehicleState, create_initial_state
from .config import (SimulationConfig, SolverType, ControllerType,
                     create_default_config, create_test_config)
from .dynamics import DynamicsModel, DynamicsOutput, FixedWingDynamics
from .control import Controller, StaticController, FeedbackController
from .recording import TimeSeriesRecord
from .trim import Trimmer, TrimResult
from .supervisor import IntegrationSupervisor
from .main import run_simulation, advance, SimulationOutput
from .errors import (SimulationError, ShapeMismatch, NotYetComputed, TrimDivergence,
                     StaleDerivative, UnsupportedSolverType, UnsupportedControllerType,
                     InitializationError, IntegrationFailure)

__version__ = "1.0.0"
__author__ = "UAV Simulation Team"

__all__ = [
    'VehicleState',
    'create_initial_state',
    'SimulationConfig',
    'SolverType',
    'ControllerType',
    'create_default_config',
    'create_test_config',
    'DynamicsModel',
    'DynamicsOutput',
    'FixedWingDynamics',
    'Controller',
    'StaticController',
    'FeedbackController',
    'TimeSeriesRecord',
    'Trimmer',
    'TrimResult',
    'IntegrationSupervisor',
    'run_simulation',
    'advance',
    'SimulationOutput',
    'SimulationError',
    'ShapeMismatch',
    'NotYetComputed',
    'TrimDivergence',
    'StaleDerivative',
    'UnsupportedSolverType',
    'UnsupportedControllerType',
    'InitializationError',
    'IntegrationFailure',
]
