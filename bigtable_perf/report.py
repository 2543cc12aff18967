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
Writes benchmark results as CSV and prints them to the console.
"""
from __future__ import annotations

import csv
import datetime
import os
import platform
from typing import Iterable

import rich
from rich.console import Console
from rich.table import Table

from google.cloud import bigtable

from bigtable_perf.stats import REPORT_HEADER
from bigtable_perf.stats import RunStatistics

_FILENAME_TIME_FORMAT = "%m_%d_%Y_%H_%M_%S"


def report_filename(prefix: str, now: datetime.datetime | None = None) -> str:
    """
    e.g. ``reports_latency_test_At_06_01_2024_13_05_09.csv``
    """
    now = now or datetime.datetime.now()
    return f"{prefix}_{now.strftime(_FILENAME_TIME_FORMAT)}.csv"


def report_preamble(start_time: datetime.datetime | None = None) -> list[list[str]]:
    start_time = start_time or datetime.datetime.now(datetime.timezone.utc)
    return [
        ["Platform", platform.system()],
        ["Python", platform.python_version()],
        ["Bigtable", bigtable.__version__],
        ["Start Time", start_time.strftime("%a %b %d %Y %H:%M:%S %Z")],
        [],
        ["NOTE: All values are in milliseconds"],
        [],
    ]


def write_report(
    path: str | os.PathLike,
    stats_list: Iterable[RunStatistics],
    start_time: datetime.datetime | None = None,
) -> str:
    """
    Write a CSV report with one row per phase

    Args:
      - path: destination file, overwritten if present
      - stats_list: results to write, in order
      - start_time: benchmark start time shown in the preamble
    Returns:
      - the path written to
    """
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerows(report_preamble(start_time))
        writer.writerow(REPORT_HEADER)
        for stats in stats_list:
            writer.writerow(stats.as_row())
    return os.fspath(path)


def print_statistics(
    stats_list: Iterable[RunStatistics], console: Console | None = None
):
    """
    Print results as a table, one column per phase
    """
    stats_list = list(stats_list)
    table = Table(title="Benchmark Results (ms)")
    table.add_column("Metric", style="cyan")
    for stats in stats_list:
        table.add_column(stats.operation_name, justify="right")
    rows = [stats.as_row() for stats in stats_list]
    for idx, title in enumerate(REPORT_HEADER[1:], start=1):
        table.add_row(title, *[str(row[idx]) for row in rows])
    if console is None:
        rich.print(table)
    else:
        console.print(table)
