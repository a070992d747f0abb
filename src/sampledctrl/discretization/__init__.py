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
Discretization Module

Continuous-to-discrete conversion of linear state-space models.

Usage
-----
>>> from sampledctrl.discretization import discretize_ab, discretize_aq, discretize_r
>>>
>>> Ad, Bd = discretize_ab(A, B, dt=0.005)
>>> _, Qd = discretize_aq(A, Q, dt=0.005)
>>> Rd = discretize_r(R, dt=0.005)
"""

from .linear_discretization import (
    DEFAULT_TAYLOR_ORDER,
    discretize_a,
    discretize_ab,
    discretize_aq,
    discretize_aq_taylor,
    discretize_r,
)

__all__ = [
    "DEFAULT_TAYLOR_ORDER",
    "discretize_a",
    "discretize_ab",
    "discretize_aq",
    "discretize_aq_taylor",
    "discretize_r",
]
