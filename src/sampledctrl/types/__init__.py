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
Types Module - Type Definitions for SampledControl

Central import point for all type definitions, re-exported for convenience.

Module Organization
------------------
- core: Basic arrays, state-space matrices, signal samples
- backends: Backend identifiers and defaults
- trajectories: Time grids and integration results
"""

from .backends import (
    DEFAULT_BACKEND,
    DEFAULT_DTYPE,
    VALID_BACKENDS,
    Backend,
    validate_backend,
)
from .core import (
    ArrayLike,
    ControlledDynamics,
    ControlVector,
    CovarianceMatrix,
    FilterSample,
    GainSequence,
    InputMatrix,
    ScalarLike,
    StateMatrix,
    StateVector,
    TimeVaryingDynamics,
)
from .trajectories import (
    IntegrationResult,
    TimePoints,
    TimeSpan,
)

__all__ = [
    # Backends
    "Backend",
    "DEFAULT_BACKEND",
    "DEFAULT_DTYPE",
    "VALID_BACKENDS",
    "validate_backend",
    # Core
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
    # Trajectories
    "IntegrationResult",
    "TimePoints",
    "TimeSpan",
]
