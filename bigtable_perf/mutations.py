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

import datetime
from dataclasses import dataclass
from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from bigtable_perf.workload import WorkloadGenerator

# number of qualifiers written per row
NUM_QUALIFIERS = 10

_MICROS_PER_SECOND = 1_000_000


def truncated_timestamp_micros(now: datetime.datetime | None = None) -> int:
    """
    Current UTC time in microseconds, truncated to whole seconds.

    All cells built within the same wall-clock second share a timestamp.
    """
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return int(now.timestamp()) * _MICROS_PER_SECOND


@dataclass(frozen=True)
class Cell:
    family: str
    qualifier: str
    value: bytes
    timestamp_micros: int | None = None


@dataclass(frozen=True)
class RowMutationEntry:
    row_key: str
    cells: tuple[Cell, ...]


@dataclass(frozen=True)
class ReadModifyWriteRule:
    """
    Server-side transform of one cell: append bytes to it, or add to it as a
    64-bit big-endian integer. Exactly one of ``append_value`` and
    ``increment_amount`` must be set.
    """

    family: str
    qualifier: str
    append_value: bytes | None = None
    increment_amount: int | None = None

    def __post_init__(self):
        if (self.append_value is None) == (self.increment_amount is None):
            raise ValueError(
                "exactly one of append_value and increment_amount must be set"
            )


class MutationBatch(Sequence[RowMutationEntry]):
    """
    Ordered group of row mutations submitted as one bulk write
    """

    def __init__(self, entries: Sequence[RowMutationEntry]):
        self.entries = tuple(entries)

    def __len__(self):
        return len(self.entries)

    def __getitem__(self, idx):
        return self.entries[idx]

    def __repr__(self):
        return f"MutationBatch(rows={len(self.entries)})"


def build_cells(
    generator: "WorkloadGenerator",
    column_family: str,
    cells_per_row: int = NUM_QUALIFIERS,
    timestamp_micros: int | None = None,
) -> tuple[Cell, ...]:
    return tuple(
        Cell(
            column_family,
            f"field{qual}",
            generator.next_value(),
            timestamp_micros,
        )
        for qual in range(cells_per_row)
    )


def build_batch(
    generator: "WorkloadGenerator",
    row_key_prefix: str,
    start_index: int,
    batch_size: int,
    column_family: str,
    cells_per_row: int = NUM_QUALIFIERS,
) -> MutationBatch:
    """
    Build ``batch_size`` rows with consecutive keys starting at ``start_index``

    Args:
      - generator: source of row keys and cell values
      - row_key_prefix: prefix for each row key
      - start_index: index of the first row in the batch
      - batch_size: number of rows in the batch
      - column_family: family every cell is written to
      - cells_per_row: number of cells per row, with qualifiers field0..fieldN-1
    Returns:
      - MutationBatch with ``batch_size`` entries
    Raises:
      - ValueError if batch_size or cells_per_row is not positive
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be greater than 0")
    if cells_per_row <= 0:
        raise ValueError("cells_per_row must be greater than 0")
    entries = []
    for idx in range(start_index, start_index + batch_size):
        cells = build_cells(
            generator,
            column_family,
            cells_per_row,
            truncated_timestamp_micros(),
        )
        entries.append(RowMutationEntry(generator.row_key(row_key_prefix, idx), cells))
    return MutationBatch(entries)
