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

import dataclasses

import pytest


@pytest.mark.parametrize(
    "operations,elapsed_ms,ndigits,expected",
    [
        (100, 2000, 2, 50.0),
        (1, 3000, 2, 0.33),
        (1, 3000, 4, 0.3333),
        (30, 15, 2, 2000.0),
        (10, 0, 2, 0.0),
        (0, 500, 2, 0.0),
    ],
)
def test_compute_throughput(operations, elapsed_ms, ndigits, expected):
    from bigtable_perf.stats import compute_throughput

    assert compute_throughput(operations, elapsed_ms, ndigits) == expected


class TestRunStatistics:
    def _target_class(self):
        from bigtable_perf.stats import RunStatistics

        return RunStatistics

    def _make_recorder(self, *values):
        from bigtable_perf.histogram import LatencyRecorder

        recorder = LatencyRecorder()
        for value in values:
            recorder.record(value)
        return recorder

    def test_from_recorder(self):
        recorder = self._make_recorder(*range(1, 101))
        stats = self._target_class().from_recorder(
            "Data Load", recorder, 2000, 100, 98, 2
        )
        assert stats.operation_name == "Data Load"
        assert stats.run_time_ms == 2000
        assert stats.max_latency_ms == 100
        assert stats.min_latency_ms == 1
        assert stats.operations == 100
        assert stats.throughput == 50.0
        assert stats.p50 == 50
        assert stats.p75 == 75
        assert stats.p90 == 90
        assert stats.p95 == 95
        assert stats.p99 == 99
        assert stats.p9999 == 100
        assert stats.success_operations == 98
        assert stats.failed_operations == 2

    def test_from_empty_recorder(self):
        stats = self._target_class().from_recorder(
            "Random Read", self._make_recorder(), 0, 0, 0, 0
        )
        assert stats.throughput == 0.0
        assert stats.as_row()[1:] == [0] * 4 + [0.0] + [0] * 8

    def test_as_row_matches_header(self):
        from bigtable_perf.stats import REPORT_HEADER

        stats = self._target_class().from_recorder(
            "Random Write", self._make_recorder(3, 5), 8, 2, 2, 0
        )
        row = stats.as_row()
        assert len(row) == len(REPORT_HEADER)
        assert row[0] == "Random Write"
        as_dict = stats.as_dict()
        assert list(as_dict) == list(REPORT_HEADER)
        assert as_dict["Throughput"] == 250.0
        assert as_dict["Failed Operations"] == 0

    def test_frozen(self):
        stats = self._target_class().from_recorder(
            "x", self._make_recorder(1), 1, 1, 1, 0
        )
        with pytest.raises(dataclasses.FrozenInstanceError):
            stats.operations = 5
