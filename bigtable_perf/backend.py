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
Contains the abstract storage interface driven by the benchmark runner.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence, TYPE_CHECKING

from bigtable_perf.exceptions import BackendError
from bigtable_perf.exceptions import ErrorKind

if TYPE_CHECKING:
    from bigtable_perf.mutations import Cell
    from bigtable_perf.mutations import MutationBatch

LOGGER = logging.getLogger(__name__)

# google.rpc.Code values
STATUS_OK = 0
STATUS_CANCELLED = 1


@dataclass(frozen=True)
class EntryStatus:
    """
    Result of one entry in a bulk write
    """

    index: int
    code: int


class StorageBackend(ABC):
    """
    Base class for the storage operations a benchmark issues.

    Every call blocks until the backend responds. Errors are raised as
    BackendError.
    """

    @abstractmethod
    def submit_batch(
        self, table_id: str, batch: "MutationBatch"
    ) -> Sequence[EntryStatus]:
        """
        Apply every entry in ``batch``. Returns one status per entry.
        """
        raise NotImplementedError

    @abstractmethod
    def submit_single(self, table_id: str, row_key: str, cells: Sequence["Cell"]) -> bool:
        raise NotImplementedError

    @abstractmethod
    def read_by_key(
        self, table_id: str, row_key: str, cells_per_row_limit: int | None = None
    ) -> list[Any]:
        raise NotImplementedError

    @abstractmethod
    def read_by_range(
        self,
        table_id: str,
        start_key: str,
        row_limit: int,
        cells_per_row_limit: int | None = None,
    ) -> list[Any]:
        """
        Read up to ``row_limit`` rows starting at ``start_key`` (inclusive)
        """
        raise NotImplementedError

    @abstractmethod
    def get_table(self, table_id: str) -> None:
        """
        Raises BackendError with kind NOT_FOUND if the table does not exist
        """
        raise NotImplementedError

    @abstractmethod
    def create_table(self, table_id: str, column_family: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_table(self, table_id: str) -> None:
        raise NotImplementedError

    def create_table_if_absent(self, table_id: str, column_family: str) -> bool:
        """
        Create ``table_id`` with a single column family, unless it already exists

        Returns:
          - True if the table was created
        Raises:
          - BackendError for any error other than NOT_FOUND
        """
        try:
            self.get_table(table_id)
        except BackendError as exc:
            if exc.kind is not ErrorKind.NOT_FOUND:
                raise
            LOGGER.info("Creating table %s", table_id)
            self.create_table(table_id, column_family)
            return True
        LOGGER.info("Table %s already exists", table_id)
        return False
