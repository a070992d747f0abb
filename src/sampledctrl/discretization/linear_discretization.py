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
Linear State-Space Discretization

Pure stateless functions converting a continuous-time linear model to its
discrete-time equivalent for a fixed sample period dt:

- discretize_a:          Ad = expm(A dt)
- discretize_ab:         (Ad, Bd) from one augmented exponential
- discretize_aq:         (Ad, Qd) via Van Loan's method
- discretize_aq_taylor:  (Ad, Qd) via a truncated series for Qd
- discretize_r:          Rd = R / dt

All functions are pure (no side effects, no state) and work like scipy.
Backend conversion is handled internally.

Mathematical Background
-----------------------
Continuous system:
    dx/dt = A x + B u + w,   E[w(t) w(s)'] = Q δ(t - s)
    y     = C x + v,         E[v(t) v(s)'] = R δ(t - s)

Discrete equivalent with zero-order hold on u:
    x[k+1] = Ad x[k] + Bd u[k] + w[k],   Cov(w[k]) = Qd
    y[k]   = C x[k] + v[k],              Cov(v[k]) = Rd

where
    Ad = e^(A dt)
    Bd = ∫₀^dt e^(Aτ) dτ B
    Qd = ∫₀^dt e^(Aτ) Q e^(A'τ) dτ
    Rd = R / dt

Van Loan: with M = dt [[-A, Q], [0, A']] and Φ = e^M,
    Φ22 = e^(A' dt)  ⇒  Ad = Φ22'
    Qd  = Ad Φ12

Usage
-----
>>> from sampledctrl.discretization import discretize_ab, discretize_aq
>>> import numpy as np
>>>
>>> A = np.array([[0.0, 1.0], [0.0, 0.0]])
>>> B = np.array([[0.0], [1.0]])
>>> Ad, Bd = discretize_ab(A, B, dt=1.0)
>>> Bd
array([[0.5],
       [1. ]])
"""

import warnings
from typing import Tuple

import numpy as np
from scipy import linalg

from sampledctrl.types.backends import Backend, validate_backend
from sampledctrl.types.core import (
    CovarianceMatrix,
    InputMatrix,
    ScalarLike,
    StateMatrix,
)
from sampledctrl.utils.backend_utils import check_square, from_numpy, to_numpy

DEFAULT_TAYLOR_ORDER = 6
"""Number of series terms used by discretize_aq_taylor."""


# ============================================================================
# Internal Helpers
# ============================================================================


def _validate_dt(dt: ScalarLike) -> float:
    dt = float(dt)
    if not np.isfinite(dt) or dt <= 0:
        raise ValueError(f"Sample period dt must be positive and finite, got {dt}")
    return dt


def _expm(M: np.ndarray) -> np.ndarray:
    """Matrix exponential with a warning when the result is not finite."""
    result = linalg.expm(M)
    if not np.all(np.isfinite(result)):
        warnings.warn(
            "Matrix exponential produced non-finite values; "
            "A*dt is too large or ill-conditioned for exact discretization.",
            RuntimeWarning,
            stacklevel=3,
        )
    return result


def _symmetrize(M: np.ndarray) -> np.ndarray:
    return 0.5 * (M + M.T)


def _check_covariance(Q_np: np.ndarray, nx: int, name: str) -> None:
    if Q_np.shape != (nx, nx):
        raise ValueError(f"{name} must be ({nx}, {nx}), got {Q_np.shape}")


# ============================================================================
# Dynamics and Input Matrices
# ============================================================================


def discretize_a(A: StateMatrix, dt: ScalarLike, backend: Backend = "numpy") -> StateMatrix:
    """
    Discretize the dynamics matrix.

    Ad = e^(A dt), exact for any linear time-invariant system.

    Parameters
    ----------
    A : StateMatrix
        Continuous dynamics matrix (nx, nx)
    dt : float
        Sample period in seconds, must be positive
    backend : Backend
        Computational backend ('numpy', 'torch', 'jax'), default 'numpy'

    Returns
    -------
    StateMatrix
        Discrete dynamics matrix Ad (nx, nx)

    Raises
    ------
    ValueError
        If A is not square or dt <= 0

    Examples
    --------
    >>> A = np.array([[0.0, 1.0], [0.0, 0.0]])
    >>> discretize_a(A, 1.0)
    array([[1., 1.],
           [0., 1.]])
    """
    backend = validate_backend(backend)
    dt = _validate_dt(dt)

    A_np = to_numpy(A, backend)
    check_square(A_np, "A")

    return from_numpy(_expm(A_np * dt), backend)


def discretize_ab(
    A: StateMatrix,
    B: InputMatrix,
    dt: ScalarLike,
    backend: Backend = "numpy",
) -> Tuple[StateMatrix, InputMatrix]:
    """
    Discretize the dynamics and input matrices together.

    Builds the augmented matrix

        M = [[A, B],
             [0, 0]]    (nx+nu, nx+nu)

    and reads both results off e^(M dt):

        e^(M dt) = [[Ad, Bd],
                    [0,  I ]]

    Computing both from one exponential keeps Ad and Bd consistent with
    each other (same dt, same rounding).

    Parameters
    ----------
    A : StateMatrix
        Continuous dynamics matrix (nx, nx)
    B : InputMatrix
        Continuous input matrix (nx, nu)
    dt : float
        Sample period in seconds, must be positive
    backend : Backend
        Computational backend ('numpy', 'torch', 'jax'), default 'numpy'

    Returns
    -------
    Tuple[StateMatrix, InputMatrix]
        (Ad, Bd) with shapes (nx, nx) and (nx, nu)

    Raises
    ------
    ValueError
        If shapes are incompatible or dt <= 0

    Examples
    --------
    Double integrator with unit period:

    >>> A = np.array([[0.0, 1.0], [0.0, 0.0]])
    >>> B = np.array([[0.0], [1.0]])
    >>> Ad, Bd = discretize_ab(A, B, 1.0)
    >>> Ad
    array([[1., 1.],
           [0., 1.]])
    >>> Bd
    array([[0.5],
           [1. ]])
    """
    backend = validate_backend(backend)
    dt = _validate_dt(dt)

    A_np = to_numpy(A, backend)
    B_np = to_numpy(B, backend)

    nx = check_square(A_np, "A")
    if B_np.ndim != 2 or B_np.shape[0] != nx:
        raise ValueError(f"B must have {nx} rows, got shape {B_np.shape}")
    nu = B_np.shape[1]

    M = np.zeros((nx + nu, nx + nu))
    M[:nx, :nx] = A_np
    M[:nx, nx:] = B_np

    phi = _expm(M * dt)

    Ad = phi[:nx, :nx]
    Bd = phi[:nx, nx:]

    return from_numpy(Ad, backend), from_numpy(Bd, backend)


# ============================================================================
# Process Noise Covariance
# ============================================================================


def discretize_aq(
    A: StateMatrix,
    Q: CovarianceMatrix,
    dt: ScalarLike,
    backend: Backend = "numpy",
) -> Tuple[StateMatrix, CovarianceMatrix]:
    """
    Discretize the dynamics matrix and process noise covariance (Van Loan).

    Builds

        M = dt [[-A, Q ],
                [ 0, A']]    (2nx, 2nx)

    and partitions Φ = e^M into nx×nx blocks:

        Ad = Φ22'
        Qd = Ad Φ12

    Qd is the exact covariance of continuous white noise with spectral
    density Q integrated through the dynamics over one period.

    Parameters
    ----------
    A : StateMatrix
        Continuous dynamics matrix (nx, nx)
    Q : CovarianceMatrix
        Continuous process noise covariance (nx, nx), symmetric PSD
    dt : float
        Sample period in seconds, must be positive
    backend : Backend
        Computational backend ('numpy', 'torch', 'jax'), default 'numpy'

    Returns
    -------
    Tuple[StateMatrix, CovarianceMatrix]
        (Ad, Qd), Qd symmetric positive semi-definite

    Raises
    ------
    ValueError
        If shapes are incompatible or dt <= 0

    Examples
    --------
    >>> A = np.array([[0.0, 1.0], [0.0, 0.0]])
    >>> Q = np.eye(2)
    >>> Ad, Qd = discretize_aq(A, Q, 1.0)
    >>> Qd  # [[dt + dt³/3, dt²/2], [dt²/2, dt]]
    array([[1.33333333, 0.5       ],
           [0.5       , 1.        ]])

    Notes
    -----
    For stiff A (eigenvalues with large magnitude relative to 1/dt) the
    2nx×2nx exponential can lose precision, since e^(-A dt) and e^(A' dt)
    sit in the same matrix. discretize_aq_taylor avoids forming that
    matrix. The choice between the two is left to the caller.

    See Also
    --------
    discretize_aq_taylor : Series-based alternative for stiff models
    """
    backend = validate_backend(backend)
    dt = _validate_dt(dt)

    A_np = to_numpy(A, backend)
    Q_np = to_numpy(Q, backend)

    nx = check_square(A_np, "A")
    _check_covariance(Q_np, nx, "Q")

    # Make continuous Q symmetric if it isn't already
    Q_sym = _symmetrize(Q_np)

    M = np.zeros((2 * nx, 2 * nx))
    M[:nx, :nx] = -A_np * dt
    M[:nx, nx:] = Q_sym * dt
    M[nx:, nx:] = A_np.T * dt

    phi = _expm(M)

    phi12 = phi[:nx, nx:]
    phi22 = phi[nx:, nx:]

    Ad = phi22.T
    Qd = _symmetrize(Ad @ phi12)

    return from_numpy(Ad, backend), from_numpy(Qd, backend)


def discretize_aq_taylor(
    A: StateMatrix,
    Q: CovarianceMatrix,
    dt: ScalarLike,
    order: int = DEFAULT_TAYLOR_ORDER,
    backend: Backend = "numpy",
) -> Tuple[StateMatrix, CovarianceMatrix]:
    """
    Discretize A and Q using a truncated series for Van Loan's Φ12 block.

    Ad comes from discretize_a. Φ12 is expanded directly instead of being
    read off a 2nx×2nx exponential:

        Φ12 = Σₖ dtᵏ/k! Tₖ,   k = 1 … order
        T₁  = Q
        Tₖ  = -A Tₖ₋₁ + Q (A')ᵏ⁻¹

        Qd  = Ad Φ12

    All ``order`` terms are summed.

    Parameters
    ----------
    A : StateMatrix
        Continuous dynamics matrix (nx, nx)
    Q : CovarianceMatrix
        Continuous process noise covariance (nx, nx), symmetric PSD
    dt : float
        Sample period in seconds, must be positive
    order : int
        Number of series terms, default 6
    backend : Backend
        Computational backend ('numpy', 'torch', 'jax'), default 'numpy'

    Returns
    -------
    Tuple[StateMatrix, CovarianceMatrix]
        (Ad, Qd), Qd symmetric positive semi-definite

    Raises
    ------
    ValueError
        If shapes are incompatible, dt <= 0 or order < 1

    Examples
    --------
    >>> A = np.array([[0.0, 1.0], [0.0, -1500.0]])
    >>> Q = np.diag([0.0025, 1.0])
    >>> Ad, Qd = discretize_aq_taylor(A, Q, 0.005)

    Notes
    -----
    Six terms match discretize_aq to near machine precision for the sample
    periods typical of control loops (milliseconds) on well-conditioned
    models. Very long periods relative to the model's time constants need
    a higher order.
    """
    if order < 1:
        raise ValueError(f"Series order must be at least 1, got {order}")

    backend = validate_backend(backend)
    dt = _validate_dt(dt)

    A_np = to_numpy(A, backend)
    Q_np = to_numpy(Q, backend)

    nx = check_square(A_np, "A")
    _check_covariance(Q_np, nx, "Q")

    Q_sym = _symmetrize(Q_np)

    last_term = Q_sym.copy()
    last_coeff = dt
    At_pow = A_np.T.copy()

    phi12 = last_term * last_coeff

    # Every term is summed: Tₖ vanishes for even k when A Q = Q A', yet the
    # odd terms that follow do not.
    for k in range(2, order + 1):
        last_term = -A_np @ last_term + Q_sym @ At_pow
        last_coeff *= dt / k

        phi12 += last_term * last_coeff

        At_pow = At_pow @ A_np.T

    Ad = _expm(A_np * dt)
    Qd = _symmetrize(Ad @ phi12)

    return from_numpy(Ad, backend), from_numpy(Qd, backend)


# ============================================================================
# Measurement Noise Covariance
# ============================================================================


def discretize_r(R: CovarianceMatrix, dt: ScalarLike, backend: Backend = "numpy") -> CovarianceMatrix:
    """
    Discretize the measurement noise covariance.

    Rd = R / dt

    A continuous noise spectral density R sampled every dt seconds gives a
    discrete sample variance of R / dt.

    Parameters
    ----------
    R : CovarianceMatrix
        Continuous measurement noise covariance (ny, ny)
    dt : float
        Sample period in seconds, must be positive
    backend : Backend
        Computational backend ('numpy', 'torch', 'jax'), default 'numpy'

    Returns
    -------
    CovarianceMatrix
        Discrete measurement noise covariance Rd (ny, ny)

    Raises
    ------
    ValueError
        If R is not square or dt <= 0

    Examples
    --------
    >>> discretize_r(np.diag([2.0, 1.0]), 0.5)
    array([[4., 0.],
           [0., 2.]])
    """
    backend = validate_backend(backend)
    dt = _validate_dt(dt)

    R_np = to_numpy(R, backend)
    check_square(R_np, "R")

    return from_numpy(R_np / dt, backend)


__all__ = [
    "DEFAULT_TAYLOR_ORDER",
    "discretize_a",
    "discretize_ab",
    "discretize_aq",
    "discretize_aq_taylor",
    "discretize_r",
]
