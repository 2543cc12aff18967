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

import random

import pytest


class TestLatencyRecorder:
    def _target_class(self):
        from bigtable_perf.histogram import LatencyRecorder

        return LatencyRecorder

    def _make_one(self, *args, **kwargs):
        return self._target_class()(*args, **kwargs)

    def test_defaults(self):
        recorder = self._make_one()
        assert recorder.lowest == 1
        assert recorder.highest == 3_600_000
        assert recorder.significant_figures == 3

    def test_empty(self):
        recorder = self._make_one()
        assert recorder.count == 0
        assert recorder.min() == 0
        assert recorder.max() == 0
        assert recorder.percentile(50) == 0
        assert recorder.percentile(99.99) == 0

    def test_min_max_exact(self):
        """large values fall in wide buckets, but min/max stay exact"""
        recorder = self._make_one()
        durations = [123_457, 5, 2_049, 987_651, 33_333]
        for value in durations:
            recorder.record(value)
        assert recorder.count == len(durations)
        assert recorder.min() == min(durations)
        assert recorder.max() == max(durations)

    def test_zero_is_recorded(self):
        recorder = self._make_one()
        recorder.record(0)
        recorder.record(7)
        assert recorder.min() == 0
        assert recorder.max() == 7
        assert recorder.count == 2

    def test_clamps_out_of_range(self):
        recorder = self._make_one()
        assert recorder.record(-5) == 0
        assert recorder.record(10_000_000) == 3_600_000
        assert recorder.min() == 0
        assert recorder.max() == 3_600_000
        assert recorder.count == 2

    def test_percentiles_small_values_exact(self):
        recorder = self._make_one()
        for value in range(1, 101):
            recorder.record(value)
        assert recorder.percentile(50) == 50
        assert recorder.percentile(90) == 90
        assert recorder.percentile(99) == 99
        assert recorder.percentile(100) == 100

    def test_percentile_within_min_max(self):
        recorder = self._make_one()
        for value in (100_001, 100_003, 100_007):
            recorder.record(value)
        for p in (0, 50, 99.99, 100):
            assert recorder.min() <= recorder.percentile(p) <= recorder.max()

    def test_percentile_monotonic(self):
        rng = random.Random(7)
        recorder = self._make_one()
        for _ in range(5000):
            recorder.record(int(rng.expovariate(1 / 250)))
        ranks = [0, 1, 10, 25, 50, 75, 90, 95, 99, 99.9, 99.99, 100]
        values = [recorder.percentile(p) for p in ranks]
        assert values == sorted(values)

    @pytest.mark.parametrize("percentile", [-0.1, 100.01, 200])
    def test_percentile_out_of_range(self, percentile):
        recorder = self._make_one()
        with pytest.raises(ValueError):
            recorder.percentile(percentile)

    def test_merge(self):
        first = self._make_one()
        second = self._make_one()
        for value in (10, 20, 30):
            first.record(value)
        for value in (5, 40):
            second.record(value)
        first.merge(second)
        assert first.count == 5
        assert first.min() == 5
        assert first.max() == 40
        assert second.count == 2

    def test_merge_empty(self):
        first = self._make_one()
        first.record(3)
        first.merge(self._make_one())
        assert first.count == 1
        assert first.min() == first.max() == 3

    def test_reset(self):
        recorder = self._make_one()
        recorder.record(12)
        recorder.reset()
        assert recorder.count == 0
        assert recorder.min() == 0
        assert recorder.max() == 0

    def test_repr(self):
        recorder = self._make_one()
        recorder.record(4)
        assert repr(recorder) == "LatencyRecorder(count=1, min=4, max=4)"
