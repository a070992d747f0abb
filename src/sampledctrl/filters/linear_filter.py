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
Linear Filter - Digital FIR and IIR Filtering

Filters are of the form:

    y[n] = (b0 x[n] + b1 x[n-1] + b2 x[n-2] + …)
         - (a0 y[n-1] + a1 y[n-2] + …)

where
- x[n] is the input and y[n] the output at step n
- b0, b1, … are the feedforward (FIR) gains
- a0, a1, … are the feedback (IIR) gains

Note the minus sign in front of the feedback term. This is the usual
signal-processing convention.

Low-pass filters smooth noisy sensor readings or operator commands;
high-pass filters strip slow drift so sudden changes stand out.

Timing
------
Gains are a function of the sample period. A filter designed for 100 Hz
has a different cutoff when called at 200 Hz. The caller must invoke
``calculate()`` at the period the gains were designed for; nothing here
can detect a mismatch.

Examples
--------
>>> filt = LinearFilter.single_pole_iir(time_constant=0.1, period=0.02)
>>> for reading in sensor_readings:
...     smoothed = filt.calculate(reading)
>>>
>>> # Custom gains
>>> filt = LinearFilter([0.5, 0.5], [])
>>> filt.calculate(2.0)
1.0
"""

import math
from collections import deque
from typing import Any, Deque, Dict, Optional, Tuple

from sampledctrl.types.core import FilterSample, GainSequence, ScalarLike
from sampledctrl.utils.usage_reporting import (
    UsageId,
    UsageReporter,
    get_default_usage_reporter,
)


class LinearFilter:
    """
    Linear digital filter supporting all FIR and IIR forms.

    Keeps the most recent P inputs and Q outputs, where P and Q are the
    number of feedforward and feedback gains. Histories start zero-filled
    and the newest sample sits at index 0.

    Samples may be floats or NumPy arrays; arrays are filtered
    element-wise with the same gains.

    Attributes
    ----------
    ff_gains : Tuple[float, ...]
        Feedforward gains
    fb_gains : Tuple[float, ...]
        Feedback gains

    Examples
    --------
    >>> # Three-tap moving average
    >>> filt = LinearFilter.moving_average(3)
    >>> [filt.calculate(x) for x in (3.0, 3.0, 3.0)]
    [1.0, 2.0, 3.0]
    >>>
    >>> # Clear history between runs
    >>> filt.reset()
    """

    def __init__(
        self,
        ff_gains: GainSequence,
        fb_gains: GainSequence,
        usage_reporter: Optional[UsageReporter] = None,
    ):
        """
        Create a linear FIR or IIR filter.

        Parameters
        ----------
        ff_gains : Sequence[float]
            Feedforward (FIR) gains
        fb_gains : Sequence[float]
            Feedback (IIR) gains
        usage_reporter : Optional[UsageReporter]
            Receives one usage event for this filter. Defaults to the
            process-wide reporter.
        """
        self._ff_gains: Tuple[float, ...] = tuple(float(g) for g in ff_gains)
        self._fb_gains: Tuple[float, ...] = tuple(float(g) for g in fb_gains)

        self._inputs: Deque[FilterSample] = deque(
            [0.0] * len(self._ff_gains), maxlen=len(self._ff_gains)
        )
        self._outputs: Deque[FilterSample] = deque(
            [0.0] * len(self._fb_gains), maxlen=len(self._fb_gains)
        )
        self._last_value: FilterSample = 0.0

        if usage_reporter is None:
            usage_reporter = get_default_usage_reporter()
        usage_reporter.report_usage(UsageId.FILTER_LINEAR, 1)

    # ========================================================================
    # Factory Methods
    # ========================================================================

    @classmethod
    def single_pole_iir(
        cls,
        time_constant: ScalarLike,
        period: ScalarLike,
        usage_reporter: Optional[UsageReporter] = None,
    ) -> "LinearFilter":
        """
        Create a one-pole IIR low-pass filter.

            y[n] = (1 - gain) x[n] + gain y[n-1],   gain = e^(-period / T)

        T = 1 / (2π f) where f is the cutoff frequency in Hz, the frequency
        above which the input starts to attenuate. Steady-state gain is 1.

        Parameters
        ----------
        time_constant : float
            Time constant T in seconds, must be positive and finite
        period : float
            Seconds between calls to ``calculate()``, must be positive and finite
        usage_reporter : Optional[UsageReporter]
            Passed to the constructor

        Returns
        -------
        LinearFilter

        Raises
        ------
        ValueError
            If time_constant or period is not positive and finite

        Examples
        --------
        >>> filt = LinearFilter.single_pole_iir(0.1, 0.02)
        >>> filt.ff_gains, filt.fb_gains  # (1 - e^-0.2,), (-e^-0.2,)
        """
        gain = _pole_gain(time_constant, period)
        return cls([1.0 - gain], [-gain], usage_reporter=usage_reporter)

    @classmethod
    def high_pass(
        cls,
        time_constant: ScalarLike,
        period: ScalarLike,
        usage_reporter: Optional[UsageReporter] = None,
    ) -> "LinearFilter":
        """
        Create a first-order high-pass filter.

            y[n] = gain x[n] - gain x[n-1] + gain y[n-1],   gain = e^(-period / T)

        T = 1 / (2π f) where f is the cutoff frequency in Hz, the frequency
        below which the input starts to attenuate.

        Parameters
        ----------
        time_constant : float
            Time constant T in seconds, must be positive and finite
        period : float
            Seconds between calls to ``calculate()``, must be positive and finite
        usage_reporter : Optional[UsageReporter]
            Passed to the constructor

        Returns
        -------
        LinearFilter

        Raises
        ------
        ValueError
            If time_constant or period is not positive and finite
        """
        gain = _pole_gain(time_constant, period)
        return cls([gain, -gain], [-gain], usage_reporter=usage_reporter)

    @classmethod
    def moving_average(
        cls, taps: int, usage_reporter: Optional[UsageReporter] = None
    ) -> "LinearFilter":
        """
        Create a K-tap FIR moving average filter.

            y[n] = 1/K (x[n] + x[n-1] + … + x[n-K+1])

        Always stable. More taps give a smoother but slower response.

        Parameters
        ----------
        taps : int
            Number of samples to average over, must be positive
        usage_reporter : Optional[UsageReporter]
            Passed to the constructor

        Returns
        -------
        LinearFilter

        Raises
        ------
        ValueError
            If taps <= 0

        Examples
        --------
        >>> LinearFilter.moving_average(4).ff_gains
        (0.25, 0.25, 0.25, 0.25)
        """
        if taps <= 0:
            raise ValueError(f"Number of taps must be greater than zero, got {taps}")
        return cls([1.0 / taps] * taps, [], usage_reporter=usage_reporter)

    # ========================================================================
    # Filtering
    # ========================================================================

    def calculate(self, value: FilterSample) -> FilterSample:
        """
        Calculate the next value of the filter.

        Parameters
        ----------
        value : float or np.ndarray
            Current input sample

        Returns
        -------
        float or np.ndarray
            Filtered value at this step
        """
        # Rotate the inputs
        if self._ff_gains:
            self._inputs.appendleft(value)

        output: FilterSample = 0.0
        for sample, gain in zip(self._inputs, self._ff_gains):
            output = output + sample * gain
        for sample, gain in zip(self._outputs, self._fb_gains):
            output = output - sample * gain

        # Rotate the outputs
        if self._fb_gains:
            self._outputs.appendleft(output)

        self._last_value = output
        return output

    def reset(self) -> None:
        """Zero both histories. Gains and history lengths are unchanged."""
        for i in range(len(self._inputs)):
            self._inputs[i] = 0.0
        for i in range(len(self._outputs)):
            self._outputs[i] = 0.0
        self._last_value = 0.0

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def ff_gains(self) -> Tuple[float, ...]:
        return self._ff_gains

    @property
    def fb_gains(self) -> Tuple[float, ...]:
        return self._fb_gains

    @property
    def input_history(self) -> Tuple[FilterSample, ...]:
        """Snapshot of past inputs, newest first."""
        return tuple(self._inputs)

    @property
    def output_history(self) -> Tuple[FilterSample, ...]:
        """Snapshot of past outputs, newest first."""
        return tuple(self._outputs)

    @property
    def last_value(self) -> FilterSample:
        """Most recent output (0.0 before the first call or after reset)."""
        return self._last_value

    def get_info(self) -> Dict[str, Any]:
        """
        Get filter summary.

        Returns
        -------
        dict
            Gains, history lengths and filter class ('FIR' or 'IIR')

        Examples
        --------
        >>> LinearFilter.moving_average(2).get_info()['type']
        'FIR'
        """
        return {
            "type": "IIR" if self._fb_gains else "FIR",
            "ff_gains": self._ff_gains,
            "fb_gains": self._fb_gains,
            "input_history_length": len(self._inputs),
            "output_history_length": len(self._outputs),
        }

    def __repr__(self) -> str:
        return f"LinearFilter(ff_gains={list(self._ff_gains)}, fb_gains={list(self._fb_gains)})"


def _pole_gain(time_constant: ScalarLike, period: ScalarLike) -> float:
    """gain = e^(-period / time_constant), with both arguments validated."""
    if not math.isfinite(period) or period <= 0:
        raise ValueError(f"Sample period must be positive and finite, got {period}")
    if not math.isfinite(time_constant) or time_constant <= 0:
        raise ValueError(f"Time constant must be positive and finite, got {time_constant}")
    return math.exp(-float(period) / float(time_constant))


__all__ = ["LinearFilter"]
