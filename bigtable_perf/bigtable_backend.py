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

"""StorageBackend implemented with the Google Cloud Bigtable client."""

import datetime
import functools
import logging

from google.api_core import exceptions as core_exceptions
from google.cloud.bigtable import Client
from google.cloud.bigtable import column_family as cf_lib
from google.cloud.bigtable.row_filters import CellsRowLimitFilter

from bigtable_perf.backend import EntryStatus
from bigtable_perf.backend import STATUS_OK
from bigtable_perf.backend import StorageBackend
from bigtable_perf.exceptions import BackendError

LOGGER = logging.getLogger(__name__)

_TRANSLATED_ERRORS = (core_exceptions.GoogleAPICallError, core_exceptions.RetryError)


def _translate_errors(func):
    """Re-raise client library errors as :class:`BackendError`."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except _TRANSLATED_ERRORS as exc:
            raise BackendError.from_api_error(exc) from exc

    return wrapper


def _datetime_from_micros(timestamp_micros):
    if timestamp_micros is None:
        return None
    return datetime.datetime.fromtimestamp(
        timestamp_micros / 1_000_000, tz=datetime.timezone.utc
    )


def _cells_filter(cells_per_row_limit):
    if cells_per_row_limit is None:
        return None
    return CellsRowLimitFilter(cells_per_row_limit)


class BigtableBackend(StorageBackend):
    """Benchmark backend bound to one Bigtable instance.

    :type instance: :class:`~google.cloud.bigtable.instance.Instance`
    :param instance: The instance holding the benchmark tables. Its client
                     must have been created with ``admin=True``.

    :type mutation_timeout: float
    :param mutation_timeout: (Optional) Timeout in seconds for bulk writes.

    :type max_versions: int
    :param max_versions: (Optional) Garbage collection rule for column
                         families created by :meth:`create_table`.
    """

    def __init__(self, instance, mutation_timeout=None, max_versions=1):
        self._instance = instance
        self.mutation_timeout = mutation_timeout
        self.max_versions = max_versions
        self._tables = {}

    @classmethod
    def from_ids(cls, project_id, instance_id, **kwargs):
        """Build a backend with a new admin client.

        :type project_id: str
        :param project_id: The ID of the project owning the instance.

        :type instance_id: str
        :param instance_id: The ID of the instance.

        :rtype: :class:`BigtableBackend`
        :returns: A backend bound to ``projects/{project_id}/instances/{instance_id}``.
        """
        client = Client(project=project_id, admin=True)
        return cls(client.instance(instance_id), **kwargs)

    @property
    def instance(self):
        return self._instance

    def table(self, table_id):
        table = self._tables.get(table_id)
        if table is None:
            table = self._instance.table(
                table_id, mutation_timeout=self.mutation_timeout
            )
            self._tables[table_id] = table
        return table

    def _direct_row(self, table, row_key, cells):
        row = table.direct_row(row_key)
        for cell in cells:
            row.set_cell(
                cell.family,
                cell.qualifier,
                cell.value,
                timestamp=_datetime_from_micros(cell.timestamp_micros),
            )
        return row

    @_translate_errors
    def submit_batch(self, table_id, batch):
        table = self.table(table_id)
        rows = [self._direct_row(table, entry.row_key, entry.cells) for entry in batch]
        statuses = table.mutate_rows(rows)
        return [EntryStatus(idx, status.code) for idx, status in enumerate(statuses)]

    @_translate_errors
    def submit_single(self, table_id, row_key, cells):
        row = self._direct_row(self.table(table_id), row_key, cells)
        status = row.commit()
        return status is None or status.code == STATUS_OK

    @_translate_errors
    def read_by_key(self, table_id, row_key, cells_per_row_limit=None):
        row = self.table(table_id).read_row(
            row_key.encode(), filter_=_cells_filter(cells_per_row_limit)
        )
        return [] if row is None else [row]

    @_translate_errors
    def read_by_range(self, table_id, start_key, row_limit, cells_per_row_limit=None):
        rows = self.table(table_id).read_rows(
            start_key=start_key.encode(),
            limit=row_limit,
            filter_=_cells_filter(cells_per_row_limit),
        )
        return list(rows)

    @_translate_errors
    def check_and_mutate_row(
        self, table_id, row_key, predicate_filter, true_cells=(), false_cells=()
    ):
        """Atomically write one set of cells or another, depending on a filter.

        :type predicate_filter: :class:`~google.cloud.bigtable.row_filters.RowFilter`
        :param predicate_filter: Checked against the current contents of the row.

        :type true_cells: tuple
        :param true_cells: :class:`~bigtable_perf.mutations.Cell` values written
                           if the filter matches any cell.

        :type false_cells: tuple
        :param false_cells: Cells written if the filter matches nothing.

        :rtype: bool
        :returns: Whether the filter matched.
        """
        row = self.table(table_id).conditional_row(row_key, filter_=predicate_filter)
        for state, cells in ((True, true_cells), (False, false_cells)):
            for cell in cells:
                row.set_cell(
                    cell.family,
                    cell.qualifier,
                    cell.value,
                    timestamp=_datetime_from_micros(cell.timestamp_micros),
                    state=state,
                )
        return row.commit()

    @_translate_errors
    def read_modify_write_row(self, table_id, row_key, rules):
        """Apply append and increment rules to a row, in order.

        :type rules: list
        :param rules: :class:`~bigtable_perf.mutations.ReadModifyWriteRule`
                      values. Later rules see the result of earlier ones.

        :rtype: dict
        :returns: The new contents of the modified cells, as
                  ``{family: {qualifier: [(value, timestamp), ...]}}``.
        """
        if not rules:
            raise ValueError("at least one rule is required")
        row = self.table(table_id).append_row(row_key)
        for rule in rules:
            if rule.append_value is not None:
                row.append_cell_value(rule.family, rule.qualifier, rule.append_value)
            else:
                row.increment_cell_value(
                    rule.family, rule.qualifier, rule.increment_amount
                )
        return row.commit()

    @_translate_errors
    def get_table(self, table_id):
        # raises NotFound for a missing table
        self.table(table_id).list_column_families()

    @_translate_errors
    def create_table(self, table_id, column_family):
        gc_rule = cf_lib.MaxVersionsGCRule(self.max_versions)
        LOGGER.debug("Creating table %s with column family %s", table_id, column_family)
        self.table(table_id).create(column_families={column_family: gc_rule})

    @_translate_errors
    def delete_table(self, table_id):
        LOGGER.debug("Deleting table %s", table_id)
        self.table(table_id).delete()
        self._tables.pop(table_id, None)

    @_translate_errors
    def list_tables(self):
        """List the IDs of the tables in the instance.

        :rtype: list
        :returns: The table IDs, in the order returned by the service.
        """
        return [table.table_id for table in self._instance.list_tables()]

    @_translate_errors
    def add_column_family(self, table_id, column_family, max_versions=None):
        gc_rule = cf_lib.MaxVersionsGCRule(max_versions or self.max_versions)
        self.table(table_id).column_family(column_family, gc_rule=gc_rule).create()

    @_translate_errors
    def delete_column_family(self, table_id, column_family):
        self.table(table_id).column_family(column_family).delete()

    @_translate_errors
    def sample_row_keys(self, table_id):
        """Sample row keys delimiting roughly equal sections of the table.

        :rtype: list
        :returns: ``(row_key, offset_bytes)`` tuples in key order.
        """
        return [
            (sample.row_key, sample.offset_bytes)
            for sample in self.table(table_id).sample_row_keys()
        ]
