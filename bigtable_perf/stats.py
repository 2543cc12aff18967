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
#
from __future__ import annotations

from dataclasses import astuple, dataclass
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from bigtable_perf.histogram import LatencyRecorder

PERCENTILES = (50, 75, 90, 95, 99, 99.99)

REPORT_HEADER = (
    "Operation Name",
    "Run Time",
    "Max Latency",
    "Min Latency",
    "Operations",
    "Throughput",
    "p50 Latency",
    "p75 Latency",
    "p90 Latency",
    "p95 Latency",
    "p99 Latency",
    "p99.99 Latency",
    "Success Operations",
    "Failed Operations",
)


def compute_throughput(operations: int, elapsed_ms: float, ndigits: int = 2) -> float:
    """
    Operations per second over ``elapsed_ms``, rounded to ``ndigits``

    Returns 0.0 when no time has elapsed.
    """
    if elapsed_ms <= 0:
        return 0.0
    return round(operations / (elapsed_ms / 1000), ndigits)


@dataclass(frozen=True)
class RunStatistics:
    """
    Summary of one benchmark phase. All latencies and run time in milliseconds.
    """

    operation_name: str
    run_time_ms: int
    max_latency_ms: int
    min_latency_ms: int
    operations: int
    throughput: float
    p50: int
    p75: int
    p90: int
    p95: int
    p99: int
    p9999: int
    success_operations: int
    failed_operations: int

    @classmethod
    def from_recorder(
        cls,
        operation_name: str,
        recorder: "LatencyRecorder",
        run_time_ms: int,
        operations: int,
        success: int,
        failure: int,
        ndigits: int = 2,
    ) -> "RunStatistics":
        percentiles = [recorder.percentile(p) for p in PERCENTILES]
        return cls(
            operation_name,
            run_time_ms,
            recorder.max(),
            recorder.min(),
            operations,
            compute_throughput(operations, run_time_ms, ndigits),
            *percentiles,
            success,
            failure,
        )

    def as_row(self) -> list[Any]:
        return list(astuple(self))

    def as_dict(self) -> dict[str, Any]:
        return dict(zip(REPORT_HEADER, self.as_row()))
