"""
UAV Flight Simulation - Error Types

Every fatal condition in a run is reported through one of these exceptions.
None of them is retried: a run that raises is aborted and any partial time
series it leaves behind must be treated as invalid.
"""

import numpy as np


class SimulationError(Exception):
    """Base class for all simulation errors."""
    pass


class ShapeMismatch(SimulationError, ValueError):
    """Raised when a flat vector does not match the expected state dimension."""

    def __init__(self, expected: int, actual):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Expected a flat vector of length {expected}, got shape {actual}"
        )


class NotYetComputed(SimulationError):
    """Raised when trim accessors are used before calc_trim() has converged."""
    pass


class TrimDivergence(SimulationError):
    """Raised when the trim search fails to converge within its budget."""

    def __init__(self, residual: np.ndarray, iterations: int, reason: str = ""):
        self.residual = np.asarray(residual, dtype=np.float64)
        self.residual_norm = float(np.linalg.norm(self.residual))
        self.iterations = iterations
        message = (
            f"Trim did not converge after {iterations} evaluations: "
            f"|residual| = {self.residual_norm:.3e}"
        )
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class StaleDerivative(SimulationError):
    """Raised when integrate_fe() is called without a fresh sim_step()."""
    pass


class UnsupportedSolverType(SimulationError):
    """Raised for a solver_type outside the supported enumeration."""

    def __init__(self, solver_type):
        self.solver_type = solver_type
        super().__init__(f"Unsupported solver_type={solver_type!r} specified")


class UnsupportedControllerType(SimulationError):
    """Raised for a controller_type outside the supported enumeration."""

    def __init__(self, controller_type):
        self.controller_type = controller_type
        super().__init__(f"Unsupported controller_type={controller_type!r} specified")


class InitializationError(SimulationError):
    """Raised when the supervisor lifecycle is driven out of order."""
    pass


class IntegrationFailure(SimulationError):
    """Raised when an adaptive solver reports a failed step."""
    pass
