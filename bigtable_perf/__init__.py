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
from bigtable_perf.backend import EntryStatus
from bigtable_perf.backend import StorageBackend
from bigtable_perf.config import BenchmarkConfig
from bigtable_perf.config import RemainderPolicy
from bigtable_perf.config import UnknownStatusPolicy
from bigtable_perf.exceptions import BackendError
from bigtable_perf.exceptions import ErrorKind
from bigtable_perf.exceptions import ValidationError
from bigtable_perf.histogram import LatencyRecorder
from bigtable_perf.mutations import Cell
from bigtable_perf.mutations import MutationBatch
from bigtable_perf.mutations import ReadModifyWriteRule
from bigtable_perf.mutations import RowMutationEntry
from bigtable_perf.mutations import build_batch
from bigtable_perf.runner import BenchmarkRunner
from bigtable_perf.stats import RunStatistics
from bigtable_perf.workload import ValuePool
from bigtable_perf.workload import WorkloadGenerator

__version__ = "0.1.0"

__all__ = (
    "BackendError",
    "BenchmarkConfig",
    "BenchmarkRunner",
    "Cell",
    "EntryStatus",
    "ErrorKind",
    "LatencyRecorder",
    "MutationBatch",
    "ReadModifyWriteRule",
    "RemainderPolicy",
    "RowMutationEntry",
    "RunStatistics",
    "StorageBackend",
    "UnknownStatusPolicy",
    "ValidationError",
    "ValuePool",
    "WorkloadGenerator",
    "build_batch",
)
