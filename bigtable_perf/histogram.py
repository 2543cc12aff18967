# Copyright 2024 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""
Latency recording backed by an HDR histogram.
"""
from __future__ import annotations

from hdrh.histogram import HdrHistogram

LOWEST_TRACKABLE_MS = 1
# one hour
HIGHEST_TRACKABLE_MS = 60 * 60 * 1000
SIGNIFICANT_FIGURES = 3


class LatencyRecorder:
    """
    Records operation latencies in milliseconds.

    Percentiles are approximate (log-linear buckets at ``significant_figures``
    precision). ``min()`` and ``max()`` are exact.

    Values outside ``[0, highest]`` are clamped: negative durations record as
    0, durations above the ceiling record as the ceiling.
    """

    def __init__(
        self,
        lowest: int = LOWEST_TRACKABLE_MS,
        highest: int = HIGHEST_TRACKABLE_MS,
        significant_figures: int = SIGNIFICANT_FIGURES,
    ):
        self.lowest = lowest
        self.highest = highest
        self.significant_figures = significant_figures
        self._histogram = HdrHistogram(lowest, highest, significant_figures)
        self._min: int | None = None
        self._max: int | None = None

    @property
    def count(self) -> int:
        return self._histogram.get_total_count()

    def clamp(self, duration_ms) -> int:
        return min(max(int(duration_ms), 0), self.highest)

    def record(self, duration_ms) -> int:
        """
        Record a single duration

        Returns:
          - the value that was recorded, after clamping
        """
        value = self.clamp(duration_ms)
        self._histogram.record_value(value)
        self._track(value, value)
        return value

    def _track(self, low: int, high: int):
        self._min = low if self._min is None else min(self._min, low)
        self._max = high if self._max is None else max(self._max, high)

    def min(self) -> int:
        return 0 if self._min is None else self._min

    def max(self) -> int:
        return 0 if self._max is None else self._max

    def percentile(self, percentile: float) -> int:
        """
        Smallest recorded bucket value covering ``percentile`` percent of samples

        Raises:
          - ValueError if percentile is outside [0, 100]
        """
        if not 0 <= percentile <= 100:
            raise ValueError("percentile must be between 0 and 100")
        if self._min is None:
            return 0
        value = self._histogram.get_value_at_percentile(percentile)
        return min(max(int(value), self._min), self._max)

    def merge(self, other: "LatencyRecorder"):
        """
        Add all samples recorded by ``other`` into this recorder
        """
        if other._min is None:
            return
        self._histogram.add(other._histogram)
        self._track(other._min, other._max)

    def reset(self):
        self._histogram.reset()
        self._min = None
        self._max = None

    def __repr__(self):
        return f"LatencyRecorder(count={self.count}, min={self.min()}, max={self.max()})"
