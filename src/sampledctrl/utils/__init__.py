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

"""Backend conversion and usage reporting helpers."""

from .backend_utils import check_square, from_numpy, to_numpy
from .usage_reporting import (
    CountingUsageReporter,
    NullUsageReporter,
    UsageId,
    UsageReporter,
    get_default_usage_reporter,
    set_default_usage_reporter,
    use_usage_reporter,
)

__all__ = [
    "to_numpy",
    "from_numpy",
    "check_square",
    "UsageId",
    "UsageReporter",
    "CountingUsageReporter",
    "NullUsageReporter",
    "get_default_usage_reporter",
    "set_default_usage_reporter",
    "use_usage_reporter",
]
