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

import enum
import os
from dataclasses import dataclass, field

from bigtable_perf.exceptions import ValidationError
from bigtable_perf.mutations import NUM_QUALIFIERS
from bigtable_perf.workload import FIELD_SIZE
from bigtable_perf.workload import POOL_SIZE

# The name of the column family used in the benchmark.
COLUMN_FAMILY = "cf"

ROW_KEY_PREFIX = "perf"


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got {value!r}")


def _env_choice(name, enum_cls, default):
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return enum_cls(value.lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{name} must be one of {choices}, got {value!r}")


class RemainderPolicy(enum.Enum):
    """
    How a load phase handles ``total_rows`` not divisible by ``batch_size``
    """

    # ceil(total / batch) batches, the last one short
    SHORT_FINAL_BATCH = "short"
    # floor(total / batch) batches, leftover rows never written
    TRUNCATE = "truncate"
    # ceil(total / batch) full batches, writes past total_rows
    FULL_FINAL_BATCH = "full"


class UnknownStatusPolicy(enum.Enum):
    """
    How bulk write status codes other than 0 and 1 are counted
    """

    FAILURE = "failure"
    IGNORE = "ignore"


@dataclass
class BenchmarkConfig:
    """
    Settings shared by every benchmark phase.

    Defaults come from BIGTABLE_PERF_* environment variables when set.
    """

    row_key_prefix: str = field(
        default_factory=lambda: os.getenv("BIGTABLE_PERF_ROW_PREFIX", ROW_KEY_PREFIX)
    )
    column_family: str = field(
        default_factory=lambda: os.getenv("BIGTABLE_PERF_COLUMN_FAMILY", COLUMN_FAMILY)
    )
    cells_per_row: int = field(
        default_factory=lambda: _env_int("BIGTABLE_PERF_CELLS_PER_ROW", NUM_QUALIFIERS)
    )
    value_size: int = field(
        default_factory=lambda: _env_int("BIGTABLE_PERF_VALUE_SIZE", FIELD_SIZE)
    )
    pool_size: int = field(
        default_factory=lambda: _env_int("BIGTABLE_PERF_POOL_SIZE", POOL_SIZE)
    )
    remainder: RemainderPolicy = field(
        default_factory=lambda: _env_choice(
            "BIGTABLE_PERF_REMAINDER", RemainderPolicy, RemainderPolicy.SHORT_FINAL_BATCH
        )
    )
    unknown_status: UnknownStatusPolicy = field(
        default_factory=lambda: _env_choice(
            "BIGTABLE_PERF_UNKNOWN_STATUS",
            UnknownStatusPolicy,
            UnknownStatusPolicy.FAILURE,
        )
    )

    def __post_init__(self):
        for name in ("cells_per_row", "value_size", "pool_size"):
            if getattr(self, name) <= 0:
                raise ValidationError(f"{name} must be greater than 0")
        if not self.column_family:
            raise ValidationError("column_family must not be empty")
