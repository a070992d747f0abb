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
Trajectory Types

Time arrays and the result of fixed-step integration.

Shape Conventions:
- Time points: (T,)
- Trajectory: (T, *y0.shape), time-major

Usage
-----
>>> from sampledctrl.types.trajectories import IntegrationResult, TimeSpan
>>>
>>> result: IntegrationResult = integrate_time_varying(f, (0.0, 1.0), y0, dt=0.01)
>>> y_final = result["x"][-1]
"""

from typing import Tuple

from typing_extensions import TypedDict

from sampledctrl.types.core import ArrayLike

TimePoints = ArrayLike
"""Monotonically increasing time grid (T,)."""

TimeSpan = Tuple[float, float]
"""(t_start, t_end) integration interval."""


class IntegrationResult(TypedDict, total=False):
    """
    Result from fixed-step integration.

    Attributes
    ----------
    t : ArrayLike
        Time points (T,)
    x : ArrayLike
        Trajectory (T, ...) - time-major ordering, x[0] is the initial state
    success : bool
        Whether integration succeeded
    message : str
        Status message
    nfev : int
        Number of right-hand side evaluations
    nsteps : int
        Number of integration steps
    integration_time : float
        Computation time in seconds
    solver : str
        Name of solver used

    Examples
    --------
    >>> result = integrate_time_varying(lambda t, y: -y, (0.0, 1.0), np.ones(2), dt=0.1)
    >>> print(f"Steps: {result['nsteps']}, evaluations: {result['nfev']}")
    """

    t: ArrayLike
    x: ArrayLike
    success: bool
    message: str
    nfev: int
    nsteps: int
    integration_time: float
    solver: str


__all__ = [
    "TimePoints",
    "TimeSpan",
    "IntegrationResult",
]
