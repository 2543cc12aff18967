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
Drives benchmark phases against a StorageBackend.

Calls are issued sequentially: each one is awaited and timed before the next
is sent, so the recorded latencies carry no client-side queuing.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Sequence, TYPE_CHECKING

from tqdm import tqdm

from bigtable_perf.backend import STATUS_CANCELLED
from bigtable_perf.backend import STATUS_OK
from bigtable_perf.config import RemainderPolicy
from bigtable_perf.config import UnknownStatusPolicy
from bigtable_perf.exceptions import ValidationError
from bigtable_perf.histogram import LatencyRecorder
from bigtable_perf.mutations import Cell
from bigtable_perf.mutations import NUM_QUALIFIERS
from bigtable_perf.mutations import build_batch
from bigtable_perf.stats import RunStatistics

if TYPE_CHECKING:
    from bigtable_perf.backend import EntryStatus
    from bigtable_perf.backend import StorageBackend
    from bigtable_perf.workload import WorkloadGenerator

LOGGER = logging.getLogger(__name__)

# Maximum number of mutations in one bulk write request
MAX_BULK_MUTATIONS = 100_000


def batch_sizes(
    total_rows: int,
    batch_size: int,
    remainder: RemainderPolicy = RemainderPolicy.SHORT_FINAL_BATCH,
    cells_per_row: int = NUM_QUALIFIERS,
) -> list[int]:
    """
    Row count of each batch a load phase submits

    Raises:
      - ValidationError if batch_size is not positive, exceeds total_rows,
          or would put more than MAX_BULK_MUTATIONS cells in one request
    """
    if batch_size <= 0:
        raise ValidationError("batch_size must be greater than 0")
    if batch_size * cells_per_row > MAX_BULK_MUTATIONS:
        raise ValidationError(
            f"batch_size {batch_size} with {cells_per_row} cells per row exceeds "
            f"the limit of {MAX_BULK_MUTATIONS} mutations per bulk request"
        )
    if total_rows < batch_size:
        raise ValidationError(
            f"Please set total rows (total_rows) >= {batch_size}, got {total_rows}"
        )
    full, leftover = divmod(total_rows, batch_size)
    if not leftover:
        return [batch_size] * full
    if remainder is RemainderPolicy.TRUNCATE:
        LOGGER.warning("Dropping %d rows that do not fill a batch", leftover)
        return [batch_size] * full
    if remainder is RemainderPolicy.FULL_FINAL_BATCH:
        LOGGER.warning(
            "Writing %d rows past total_rows to fill the last batch",
            batch_size - leftover,
        )
        return [batch_size] * (full + 1)
    return [batch_size] * full + [leftover]


class BenchmarkRunner:
    """
    Runs load, mixed read/write, and read-only phases.

    Args:
      - backend: the StorageBackend to issue calls against
      - generator: source of row keys and values
      - clock: returns the current time in seconds, used for timing and deadlines
      - remainder: how to handle rows that do not fill a full batch
      - unknown_status: how to count bulk write status codes other than 0 and 1
      - show_progress: display a progress bar during load phases
    """

    def __init__(
        self,
        backend: "StorageBackend",
        generator: "WorkloadGenerator",
        clock: Callable[[], float] = time.perf_counter,
        remainder: RemainderPolicy = RemainderPolicy.SHORT_FINAL_BATCH,
        unknown_status: UnknownStatusPolicy = UnknownStatusPolicy.FAILURE,
        show_progress: bool = True,
    ):
        self.backend = backend
        self.generator = generator
        self._clock = clock
        self.remainder = remainder
        self.unknown_status = unknown_status
        self.show_progress = show_progress

    def _elapsed_ms(self, start: float) -> int:
        return round((self._clock() - start) * 1000)

    def _tally(self, statuses: Sequence["EntryStatus"]) -> tuple[int, int]:
        success, failure = 0, 0
        for status in statuses:
            if status.code == STATUS_OK:
                success += 1
            elif status.code == STATUS_CANCELLED:
                failure += 1
            elif self.unknown_status is UnknownStatusPolicy.FAILURE:
                failure += 1
            else:
                LOGGER.debug("Ignoring status code %d for entry %d", status.code, status.index)
        return success, failure

    @staticmethod
    def _validate_timed(total_rows: int, timeout_seconds: float):
        if total_rows <= 0:
            raise ValidationError("total_rows must be greater than 0")
        if timeout_seconds < 0:
            raise ValidationError("timeout must not be negative")

    def load_records(
        self,
        table_id: str,
        row_key_prefix: str,
        column_family: str,
        total_rows: int,
        batch_size: int,
        cells_per_row: int = NUM_QUALIFIERS,
        operation_name: str = "Data Load",
        ndigits: int = 2,
    ) -> RunStatistics:
        """
        Write ``total_rows`` rows in bulk batches of ``batch_size``

        Each batch is timed individually; the reported run time is the sum of
        the batch times.

        Raises:
          - ValidationError if total_rows < batch_size, before any backend call
        """
        sizes = batch_sizes(total_rows, batch_size, self.remainder, cells_per_row)
        recorder = LatencyRecorder()
        index, success, failure, total_elapsed = 0, 0, 0, 0
        with tqdm(total=sum(sizes), disable=not self.show_progress) as pbar:
            for size in sizes:
                batch = build_batch(
                    self.generator,
                    row_key_prefix,
                    index,
                    size,
                    column_family,
                    cells_per_row,
                )
                index += size
                start_time = self._clock()
                statuses = self.backend.submit_batch(table_id, batch)
                elapsed = self._elapsed_ms(start_time)
                recorder.record(elapsed)
                total_elapsed += elapsed
                batch_success, batch_failure = self._tally(statuses)
                success += batch_success
                failure += batch_failure
                pbar.update(size)
        LOGGER.info("Total time taken for loading rows is %d ms", total_elapsed)
        return RunStatistics.from_recorder(
            operation_name, recorder, total_elapsed, index, success, failure, ndigits
        )

    def random_read_write(
        self,
        table_id: str,
        row_key_prefix: str,
        column_family: str,
        total_rows: int,
        timeout_seconds: float,
        ndigits: int = 2,
    ) -> tuple[RunStatistics, RunStatistics]:
        """
        Alternate single-row reads and writes on random keys until the deadline

        Even iterations read, odd iterations overwrite ``field0``. Reads and
        writes are recorded in separate histograms. The deadline is checked
        before each call; a call in flight is never interrupted.

        Returns:
          - (read statistics, write statistics)
        """
        self._validate_timed(total_rows, timeout_seconds)
        read_recorder, write_recorder = LatencyRecorder(), LatencyRecorder()
        read_ok, read_failed, read_time = 0, 0, 0
        write_ok, write_failed, write_time = 0, 0, 0
        deadline = self._clock() + timeout_seconds
        LOGGER.info("Random read/write phase will run for %s seconds", timeout_seconds)
        iteration = 0
        while self._clock() < deadline:
            row_key = self.generator.random_row_key(row_key_prefix, total_rows)
            if iteration % 2 == 0:
                start_time = self._clock()
                rows = self.backend.read_by_key(table_id, row_key)
                elapsed = self._elapsed_ms(start_time)
                if rows:
                    read_ok += 1
                else:
                    read_failed += 1
                read_time += elapsed
                read_recorder.record(elapsed)
            else:
                cells = (Cell(column_family, "field0", self.generator.next_value()),)
                start_time = self._clock()
                committed = self.backend.submit_single(table_id, row_key, cells)
                elapsed = self._elapsed_ms(start_time)
                if committed:
                    write_ok += 1
                else:
                    write_failed += 1
                write_time += elapsed
                write_recorder.record(elapsed)
            iteration += 1
        read_stats = RunStatistics.from_recorder(
            "Random Read",
            read_recorder,
            read_time,
            read_ok + read_failed,
            read_ok,
            read_failed,
            ndigits,
        )
        write_stats = RunStatistics.from_recorder(
            "Random Write",
            write_recorder,
            write_time,
            write_ok + write_failed,
            write_ok,
            write_failed,
            ndigits,
        )
        return read_stats, write_stats

    def random_read(
        self,
        table_id: str,
        row_key_prefix: str,
        total_rows: int,
        timeout_seconds: float,
        scan_size: int | None = None,
        cells_per_row_limit: int | None = 1,
        ndigits: int = 4,
    ) -> RunStatistics:
        """
        Read random keys, or scan from random keys, until the deadline

        Args:
          - scan_size: if None, read single rows. Otherwise read up to
              scan_size rows starting at the random key
          - cells_per_row_limit: cells returned per row, None for all
        A read succeeds if at least one row comes back.
        """
        self._validate_timed(total_rows, timeout_seconds)
        if scan_size is not None and scan_size <= 0:
            raise ValidationError("scan_size must be greater than 0")
        recorder = LatencyRecorder()
        success, failure, total_time = 0, 0, 0
        deadline = self._clock() + timeout_seconds
        LOGGER.info("Random read phase will run for %s seconds", timeout_seconds)
        while self._clock() < deadline:
            row_key = self.generator.random_row_key(row_key_prefix, total_rows)
            start_time = self._clock()
            if scan_size is None:
                rows = self.backend.read_by_key(table_id, row_key, cells_per_row_limit)
            else:
                rows = self.backend.read_by_range(
                    table_id, row_key, scan_size, cells_per_row_limit
                )
            elapsed = self._elapsed_ms(start_time)
            if rows:
                success += 1
            else:
                failure += 1
            total_time += elapsed
            recorder.record(elapsed)
        name = "Random Read" if scan_size is None else "Random Scan"
        return RunStatistics.from_recorder(
            name, recorder, total_time, success + failure, success, failure, ndigits
        )
