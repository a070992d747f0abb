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
Core Types - Arrays, Matrices and Signal Samples

Defines the basic types shared by the integrator, discretization and
filter modules:
- Multi-backend array types (NumPy, PyTorch, JAX)
- State-space matrix types (dynamics, input, covariance)
- Scalar and sample types for sampled-time signals
- Function signatures for time-varying and time-invariant ODEs

Usage
-----
>>> from sampledctrl.types.core import StateMatrix, InputMatrix
>>>
>>> def propagate(Ad: StateMatrix, Bd: InputMatrix, x, u):
...     return Ad @ x + Bd @ u
"""

from typing import TYPE_CHECKING, Callable, Sequence, Union

import numpy as np

if TYPE_CHECKING:
    import jax.numpy as jnp
    import torch


# ============================================================================
# Basic Array Types - Multi-Backend Support
# ============================================================================

ArrayLike = Union[np.ndarray, "torch.Tensor", "jnp.ndarray"]
"""
Array-like type supporting multiple backends.

Can be NumPy array, PyTorch tensor, or JAX array.
"""

ScalarLike = Union[float, int, np.number]
"""
Scalar value such as a sample period or time constant.

Examples
--------
>>> dt: ScalarLike = 0.005
>>> tau: ScalarLike = 0.1
"""

# ============================================================================
# State-Space Matrix Types
# ============================================================================

StateVector = ArrayLike
"""State vector x (nx,) or any array-valued ODE state."""

ControlVector = ArrayLike
"""Control input u (nu,)."""

StateMatrix = ArrayLike
"""
Dynamics matrix A (nx, nx).

Continuous: dx/dt = Ax + Bu
Discrete:   x[k+1] = Ad x[k] + Bd u[k]
"""

InputMatrix = ArrayLike
"""Input matrix B (nx, nu)."""

CovarianceMatrix = ArrayLike
"""
Symmetric positive semi-definite covariance matrix.

Process noise Q (nx, nx) or measurement noise R (ny, ny).
"""

# ============================================================================
# Signal Types
# ============================================================================

FilterSample = Union[float, np.ndarray]
"""
One sample of a filtered signal.

A plain float for scalar signals, or a NumPy array filtered element-wise.
"""

GainSequence = Sequence[float]
"""Feedforward or feedback gains of a linear filter."""

# ============================================================================
# Function Signatures
# ============================================================================

TimeVaryingDynamics = Callable[[float, StateVector], StateVector]
"""
Right-hand side of dy/dt = f(t, y).

y may be any array shape (vectors, matrices).
"""

ControlledDynamics = Callable[..., StateVector]
"""
Right-hand side of dx/dt = f(x, u), or f(x) for autonomous systems.
"""


__all__ = [
    "ArrayLike",
    "ScalarLike",
    "StateVector",
    "ControlVector",
    "StateMatrix",
    "InputMatrix",
    "CovarianceMatrix",
    "FilterSample",
    "GainSequence",
    "TimeVaryingDynamics",
    "ControlledDynamics",
]
