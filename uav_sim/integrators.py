"""
UAV Flight Simulation - Numerical Integration

This module implements the two time-advance primitives used by the
supervisor and the driver:
- Forward Euler update of a flat state vector
- Adaptive variable-step solving (RK45 / BDF) with a per-step output callback
"""

import logging
from typing import Callable, Tuple

import numpy as np
from scipy.integrate import BDF, RK45

from .errors import IntegrationFailure

logger = logging.getLogger(__name__)

# Solver classes keyed by method name
ADAPTIVE_METHODS = {
    'RK45': RK45,
    'BDF': BDF,
}

# Accepted-step count above which a warning is emitted
_MANY_STEPS_WARNING = 100_000


def euler_update(y: np.ndarray, dy: np.ndarray, dt: float) -> np.ndarray:
    """
    Perform a single forward Euler update.

    y_new = y + dt * dy

    Args:
        y: Flat state vector
        dy: Flat state derivative, same shape as y
        dt: Time step (s)

    Returns:
        New flat state vector

    Raises:
        ValueError: If dt <= 0, shapes differ or dy is not finite
    """
    if dt <= 0:
        raise ValueError(f"Time step dt must be positive, got {dt}")
    y = np.asarray(y, dtype=np.float64)
    dy = np.asarray(dy, dtype=np.float64)
    if y.shape != dy.shape:
        raise ValueError(f"Derivative shape {dy.shape} does not match state shape {y.shape}")
    if not np.all(np.isfinite(dy)):
        raise ValueError("State derivative contains NaN or Inf values")
    return y + dt * dy


def solve_adaptive(fun: Callable, t_span: Tuple[float, float], y0: np.ndarray,
                   method: str = 'RK45',
                   output_fcn: Callable = None,
                   rtol: float = 1e-6, atol: float = 1e-8,
                   max_step: float = np.inf) -> Tuple[np.ndarray, np.ndarray]:
    """
    Solve dy/dt = fun(t, y) over t_span with an adaptive solver.

    The solver is stepped manually so that output_fcn sees every accepted
    step, in the order:
        output_fcn(t0, y0, 'init')
        output_fcn(t, y, '')       after each accepted step
        output_fcn(t, y, 'done')
    If output_fcn returns True the solve stops after the current step.

    Args:
        fun: Derivative function f(t, y) -> dy/dt
        t_span: (t_0, t_f)
        y0: Initial flat state
        method: 'RK45' or 'BDF'
        output_fcn: Optional callback g(t, y, flag) -> stop
        rtol, atol: Error tolerances
        max_step: Largest step the solver may take (s)

    Returns:
        (t, y) with t of shape (N,) and y of shape (N, n)

    Raises:
        ValueError: For an unknown method
        IntegrationFailure: If the solver reports a failed step
    """
    try:
        solver_cls = ADAPTIVE_METHODS[method]
    except KeyError:
        raise ValueError(f"Unknown adaptive method {method!r}, "
                         f"expected one of {sorted(ADAPTIVE_METHODS)}") from None

    t0, t_f = float(t_span[0]), float(t_span[1])
    y0 = np.asarray(y0, dtype=np.float64)
    solver = solver_cls(fun, t0, y0, t_f, max_step=max_step, rtol=rtol, atol=atol)

    ts = [t0]
    ys = [y0.copy()]
    stop = False
    if output_fcn is not None:
        stop = bool(output_fcn(t0, y0.copy(), 'init'))

    while not stop and solver.status == 'running':
        message = solver.step()
        if solver.status == 'failed':
            raise IntegrationFailure(f"{method} failed at t={solver.t:.6f}: {message}")

        if solver.t == ts[-1]:
            # Zero-length span
            continue
        ts.append(solver.t)
        ys.append(solver.y.copy())
        if output_fcn is not None:
            stop = bool(output_fcn(solver.t, solver.y.copy(), ''))

    if output_fcn is not None:
        output_fcn(ts[-1], ys[-1].copy(), 'done')

    n_steps = len(ts) - 1
    logger.debug(f"{method} finished: {n_steps} accepted steps, {solver.nfev} evaluations")
    if n_steps > _MANY_STEPS_WARNING:
        logger.warning(f"{method} needed {n_steps} steps; the problem may be stiff "
                       f"or the tolerances too tight")

    return np.array(ts), np.vstack(ys)
