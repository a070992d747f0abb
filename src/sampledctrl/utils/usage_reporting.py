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
Usage Reporting

Fire-and-forget usage events for telemetry. Components that want to be
counted take a ``UsageReporter`` (anything with ``report_usage``) and fall
back to the process default when none is injected.

The default reporter is a ``CountingUsageReporter``. Counts are approximate
under concurrent use; nothing in the library reads them back.

Examples
--------
>>> reporter = CountingUsageReporter()
>>> filt = LinearFilter.moving_average(5, usage_reporter=reporter)
>>> reporter.count(UsageId.FILTER_LINEAR)
1
>>>
>>> # Temporarily replace the process default
>>> with use_usage_reporter(NullUsageReporter()):
...     filt = LinearFilter.single_pole_iir(0.1, 0.02)
"""

from collections import Counter
from contextlib import contextmanager
from enum import Enum
from typing import Iterator

from typing_extensions import Protocol, runtime_checkable


class UsageId(Enum):
    """Tags identifying what was used."""

    FILTER_LINEAR = "filter_linear"


@runtime_checkable
class UsageReporter(Protocol):
    """Anything that accepts usage events."""

    def report_usage(self, usage_id: UsageId, count: int = 1) -> None:
        ...


class CountingUsageReporter:
    """
    In-memory usage counters, one monotonically increasing count per tag.

    Examples
    --------
    >>> reporter = CountingUsageReporter()
    >>> reporter.report_usage(UsageId.FILTER_LINEAR)
    >>> reporter.report_usage(UsageId.FILTER_LINEAR, 2)
    >>> reporter.count(UsageId.FILTER_LINEAR)
    3
    """

    def __init__(self):
        self._counts: Counter = Counter()

    def report_usage(self, usage_id: UsageId, count: int = 1) -> None:
        if count < 0:
            raise ValueError(f"Usage count must be non-negative, got {count}")
        self._counts[usage_id] += count

    def count(self, usage_id: UsageId) -> int:
        return self._counts[usage_id]

    def total(self) -> int:
        return sum(self._counts.values())

    def __repr__(self) -> str:
        counts = {usage_id.value: n for usage_id, n in self._counts.items()}
        return f"CountingUsageReporter({counts})"


class NullUsageReporter:
    """Discards every event."""

    def report_usage(self, usage_id: UsageId, count: int = 1) -> None:
        pass


_default_reporter: UsageReporter = CountingUsageReporter()


def get_default_usage_reporter() -> UsageReporter:
    """Return the process-wide reporter used when none is injected."""
    return _default_reporter


def set_default_usage_reporter(reporter: UsageReporter) -> UsageReporter:
    """
    Replace the process-wide reporter.

    Parameters
    ----------
    reporter : UsageReporter
        New default reporter

    Returns
    -------
    UsageReporter
        The previous default, so callers can restore it

    Raises
    ------
    TypeError
        If reporter has no ``report_usage`` method
    """
    global _default_reporter

    if not isinstance(reporter, UsageReporter):
        raise TypeError(
            f"reporter must implement report_usage(), got {type(reporter).__name__}"
        )
    previous = _default_reporter
    _default_reporter = reporter
    return previous


@contextmanager
def use_usage_reporter(reporter: UsageReporter) -> Iterator[UsageReporter]:
    """
    Temporarily install a default reporter.

    Examples
    --------
    >>> counter = CountingUsageReporter()
    >>> with use_usage_reporter(counter):
    ...     LinearFilter.moving_average(3)
    >>> counter.total()
    1
    """
    previous = set_default_usage_reporter(reporter)
    try:
        yield reporter
    finally:
        set_default_usage_reporter(previous)


__all__ = [
    "UsageId",
    "UsageReporter",
    "CountingUsageReporter",
    "NullUsageReporter",
    "get_default_usage_reporter",
    "set_default_usage_reporter",
    "use_usage_reporter",
]
