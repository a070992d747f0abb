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
Backend and Configuration Types

Defines types related to:
- Computational backends (NumPy, PyTorch, JAX)
- Default numerical settings shared by the discretization routines

The discretization functions always compute in NumPy/SciPy; the backend
only controls how inputs are read and results are returned.

Usage
-----
>>> from sampledctrl.types.backends import Backend, validate_backend
>>>
>>> def discretize(A, dt, backend: Backend = 'numpy'):
...     backend = validate_backend(backend)
"""

from typing import Literal

import numpy as np

# ============================================================================
# Backend Types
# ============================================================================

Backend = Literal["numpy", "torch", "jax"]
"""
Computational backend identifier.

- 'numpy': NumPy arrays (always available)
- 'torch': PyTorch tensors (optional dependency)
- 'jax': JAX arrays (optional dependency)
"""


# ============================================================================
# Constants - Valid Values
# ============================================================================

VALID_BACKENDS = ("numpy", "torch", "jax")
"""Tuple of valid backend names."""

DEFAULT_BACKEND: Backend = "numpy"
"""
Default backend if not specified.

NumPy is default because it is a core dependency and SciPy's matrix
exponential operates on NumPy arrays directly.
"""

DEFAULT_DTYPE = np.float64
"""
Default numerical precision.

Discretized covariances are compared against integrated references at
1e-10, which needs double precision.
"""


def validate_backend(backend: str) -> Backend:
    """
    Validate and normalize backend string.

    Parameters
    ----------
    backend : str
        Backend name to validate

    Returns
    -------
    Backend
        Validated backend (typed)

    Raises
    ------
    ValueError
        If backend is not valid

    Examples
    --------
    >>> validate_backend('numpy')
    'numpy'
    >>> validate_backend('pytorch')  # ValueError
    """
    if backend not in VALID_BACKENDS:
        raise ValueError(f"Invalid backend '{backend}'. " f"Choose from: {VALID_BACKENDS}")
    return backend


__all__ = [
    "Backend",
    "VALID_BACKENDS",
    "DEFAULT_BACKEND",
    "DEFAULT_DTYPE",
    "validate_backend",
]
