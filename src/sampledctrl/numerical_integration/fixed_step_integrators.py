# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Fixed-Step Integrators

Classic 4th-order Runge-Kutta steps as pure functions:
- rk4_time_varying: dy/dt = f(t, y), one step of length dt
- rk4: dx/dt = f(x, u) with u held over the step
- integrate_time_varying: repeated time-varying steps over a span

The state may be any array that supports addition and scalar
multiplication (vectors, matrices). No error estimation or step-size
control is performed; non-finite values produced by f propagate to the
caller unchanged.

Algorithm:
    k1 = f(t, y)
    k2 = f(t + dt/2, y + dt/2 * k1)
    k3 = f(t + dt/2, y + dt/2 * k2)
    k4 = f(t + dt, y + dt * k3)
    y_next = y + (dt/6) * (k1 + 2*k2 + 2*k3 + k4)

Examples
--------
>>> # Integrate a covariance-shaped integrand over one step
>>> A = np.array([[0.0, 1.0], [0.0, 0.0]])
>>> f = lambda t, P: expm(A * t) @ Q @ expm(A.T * t)
>>> Qd = rk4_time_varying(f, 0.0, np.zeros((2, 2)), 1.0)
"""

import time
from typing import Optional

import numpy as np

from sampledctrl.types.core import (
    ControlledDynamics,
    ControlVector,
    ScalarLike,
    StateVector,
    TimeVaryingDynamics,
)
from sampledctrl.types.trajectories import (
    IntegrationResult,
    TimePoints,
    TimeSpan,
)


def rk4_time_varying(
    f: TimeVaryingDynamics, t0: ScalarLike, y0: StateVector, dt: ScalarLike
) -> StateVector:
    """
    Take one RK4 step of a time-varying ODE.

    Parameters
    ----------
    f : Callable[[float, ArrayLike], ArrayLike]
        Right-hand side dy/dt = f(t, y)
    t0 : float
        Time at the start of the step
    y0 : ArrayLike
        State at t0 (any shape)
    dt : float
        Step length

    Returns
    -------
    ArrayLike
        Estimate of y(t0 + dt)

    Examples
    --------
    >>> y1 = rk4_time_varying(lambda t, y: -y, 0.0, np.array([1.0]), 0.1)
    >>> np.allclose(y1, np.exp(-0.1))
    True
    """
    h = 0.5 * dt

    k1 = f(t0, y0)
    k2 = f(t0 + h, y0 + h * k1)
    k3 = f(t0 + h, y0 + h * k2)
    k4 = f(t0 + dt, y0 + dt * k3)

    return y0 + dt / 6.0 * (k1 + 2.0 * k2 + 2.0 * k3 + k4)


def rk4(
    f: ControlledDynamics,
    x: StateVector,
    u: Optional[ControlVector],
    dt: ScalarLike,
) -> StateVector:
    """
    Take one RK4 step of a time-invariant system.

    Control is held constant over the step (zero-order hold).

    Parameters
    ----------
    f : Callable
        Dynamics f(x, u), or f(x) when u is None
    x : ArrayLike
        Current state
    u : Optional[ArrayLike]
        Control input (None for autonomous systems)
    dt : float
        Step length

    Returns
    -------
    ArrayLike
        Next state

    Examples
    --------
    >>> # Double integrator pushed with unit acceleration
    >>> f = lambda x, u: np.array([x[1], u[0]])
    >>> rk4(f, np.zeros(2), np.array([1.0]), 1.0)
    array([0.5, 1. ])
    """
    if u is None:
        return rk4_time_varying(lambda t, y: f(y), 0.0, x, dt)
    return rk4_time_varying(lambda t, y: f(y, u), 0.0, x, dt)


def integrate_time_varying(
    f: TimeVaryingDynamics,
    t_span: TimeSpan,
    y0: StateVector,
    dt: ScalarLike,
    t_eval: Optional[TimePoints] = None,
) -> IntegrationResult:
    """
    Integrate a time-varying ODE with fixed RK4 steps.

    Parameters
    ----------
    f : Callable[[float, ArrayLike], ArrayLike]
        Right-hand side dy/dt = f(t, y)
    t_span : Tuple[float, float]
        (t_start, t_end)
    y0 : ArrayLike
        Initial state at t_start
    dt : float
        Nominal step length; the last step is shortened to end on t_end
    t_eval : Optional[ArrayLike]
        Explicit time grid to step along (overrides dt). Must start at
        t_start and be increasing.

    Returns
    -------
    IntegrationResult
        TypedDict containing:
        - t: Time points (T,)
        - x: Trajectory (T, ...)
        - success: Integration completed
        - nfev: Function evaluations
        - nsteps: Number of steps
        - integration_time: Computation time
        - solver: Integrator name

    Raises
    ------
    ValueError
        If dt <= 0, t_end < t_start, or t_eval is not increasing

    Examples
    --------
    >>> result = integrate_time_varying(
    ...     lambda t, y: np.cos(t) * np.ones_like(y),
    ...     t_span=(0.0, np.pi / 2),
    ...     y0=np.zeros(1),
    ...     dt=0.01,
    ... )
    >>> print(f"Final: {result['x'][-1]}")  # ≈ sin(pi/2) = 1
    """
    start_time = time.time()

    t0, tf = t_span
    if tf < t0:
        raise ValueError(f"t_span must satisfy t_end >= t_start, got {t_span}")

    # Create time grid
    if t_eval is None:
        if dt <= 0:
            raise ValueError(f"Time step dt must be positive, got {dt}")
        num_steps = int(np.ceil((tf - t0) / dt - 1e-12))
        t_points = np.minimum(t0 + dt * np.arange(num_steps + 1), tf)
    else:
        t_points = np.asarray(t_eval, dtype=float)
        if np.any(np.diff(t_points) <= 0):
            raise ValueError("t_eval must be strictly increasing")

    trajectory = [y0]
    y = y0

    for i in range(len(t_points) - 1):
        t = float(t_points[i])
        h = float(t_points[i + 1] - t_points[i])
        y = rk4_time_varying(f, t, y, h)
        trajectory.append(y)

    elapsed = time.time() - start_time
    nsteps = len(t_points) - 1

    result: IntegrationResult = {
        "t": t_points,
        "x": np.stack([np.asarray(y_k) for y_k in trajectory]),
        "success": True,
        "message": "RK4 integration completed",
        "nfev": 4 * nsteps,
        "nsteps": nsteps,
        "integration_time": elapsed,
        "solver": "RK4",
    }

    return result


__all__ = ["rk4_time_varying", "rk4", "integrate_time_varying"]
