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
SampledControl - Numerical Primitives for Sampled-Time Control

- discretization: continuous-to-discrete conversion of (A, B, Q, R)
- filters: FIR/IIR linear filters with common presets
- numerical_integration: fixed-step Runge-Kutta integration

Examples
--------
>>> import numpy as np
>>> from sampledctrl import LinearFilter, discretize_ab
>>>
>>> Ad, Bd = discretize_ab(np.array([[0.0, 1.0], [0.0, 0.0]]), np.array([[0.0], [1.0]]), 0.01)
>>> filt = LinearFilter.single_pole_iir(time_constant=0.1, period=0.01)
"""

from sampledctrl.discretization import (
    discretize_a,
    discretize_ab,
    discretize_aq,
    discretize_aq_taylor,
    discretize_r,
)
from sampledctrl.filters import LinearFilter
from sampledctrl.numerical_integration import integrate_time_varying, rk4, rk4_time_varying

__version__ = "0.1.0"

__all__ = [
    "discretize_a",
    "discretize_ab",
    "discretize_aq",
    "discretize_aq_taylor",
    "discretize_r",
    "LinearFilter",
    "rk4_time_varying",
    "rk4",
    "integrate_time_varying",
]
