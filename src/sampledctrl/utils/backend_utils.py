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
Backend Conversion Utilities

Convert arrays to NumPy for SciPy operations and back to the caller's
backend. PyTorch and JAX are imported lazily, only when requested.
"""

import numpy as np

from sampledctrl.types.backends import DEFAULT_DTYPE, Backend
from sampledctrl.types.core import ArrayLike


def to_numpy(arr: ArrayLike, backend: Backend) -> np.ndarray:
    """
    Convert array to a float64 NumPy array.

    Args:
        arr: Array in any backend (lists and scalars are accepted too)
        backend: Source backend identifier (tensors are recognized by their
            detach() method, so lists convert under any backend)

    Returns:
        NumPy array
    """
    if isinstance(arr, np.ndarray):
        return arr.astype(DEFAULT_DTYPE, copy=False)

    if hasattr(arr, "detach"):
        # PyTorch tensor
        return arr.detach().cpu().numpy().astype(DEFAULT_DTYPE, copy=False)
    return np.asarray(arr, dtype=DEFAULT_DTYPE)


def from_numpy(arr: np.ndarray, backend: Backend) -> ArrayLike:
    """
    Convert NumPy array back to target backend.

    Args:
        arr: NumPy array
        backend: Target backend

    Returns:
        Array in target backend
    """
    if backend == "numpy":
        return arr
    if backend == "torch":
        import torch

        return torch.from_numpy(np.ascontiguousarray(arr))
    if backend == "jax":
        import jax.numpy as jnp

        return jnp.array(arr)
    return arr


def check_square(arr: np.ndarray, name: str) -> int:
    """
    Check that a NumPy array is a square matrix and return its size.

    Raises
    ------
    ValueError
        If the array is not 2-D or not square
    """
    if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
        raise ValueError(f"{name} must be square, got shape {arr.shape}")
    return arr.shape[0]


__all__ = ["to_numpy", "from_numpy", "check_square"]
