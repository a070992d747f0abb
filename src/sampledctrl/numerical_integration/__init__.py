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
Numerical Integration Module

Fixed-step Runge-Kutta integration used standalone and as the reference
for validating discretized covariances.
"""

from .fixed_step_integrators import integrate_time_varying, rk4, rk4_time_varying

__all__ = [
    "rk4_time_varying",
    "rk4",
    "integrate_time_varying",
]
