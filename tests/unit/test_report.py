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

import csv
import datetime
import io

from rich.console import Console


def _make_stats(name="Data Load", run_time=2000, operations=100):
    from bigtable_perf.histogram import LatencyRecorder
    from bigtable_perf.stats import RunStatistics

    recorder = LatencyRecorder()
    for value in range(1, 21):
        recorder.record(value)
    return RunStatistics.from_recorder(name, recorder, run_time, operations, 99, 1)


def test_report_filename():
    from bigtable_perf.report import report_filename

    now = datetime.datetime(2024, 6, 1, 13, 5, 9)
    assert (
        report_filename("reports_latency_test_At", now)
        == "reports_latency_test_At_06_01_2024_13_05_09.csv"
    )


def test_report_preamble():
    from google.cloud import bigtable
    from bigtable_perf.report import report_preamble

    start = datetime.datetime(2024, 6, 1, 13, 5, 9, tzinfo=datetime.timezone.utc)
    preamble = report_preamble(start)
    assert preamble[0][0] == "Platform"
    assert preamble[1][0] == "Python"
    assert preamble[2] == ["Bigtable", bigtable.__version__]
    assert preamble[3] == ["Start Time", "Sat Jun 01 2024 13:05:09 UTC"]
    assert preamble[4:] == [[], ["NOTE: All values are in milliseconds"], []]


def test_write_report(tmp_path):
    from bigtable_perf.report import write_report
    from bigtable_perf.stats import REPORT_HEADER

    load = _make_stats()
    read = _make_stats("Random Read", 400, 20)
    path = tmp_path / "report.csv"
    assert write_report(path, [load, read]) == str(path)
    with open(path, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[5] == ["NOTE: All values are in milliseconds"]
    assert rows[7] == list(REPORT_HEADER)
    assert rows[8] == [str(value) for value in load.as_row()]
    assert rows[9][0] == "Random Read"
    assert rows[9][5] == "50.0"
    assert len(rows) == 10


def test_print_statistics():
    from bigtable_perf.report import print_statistics

    console = Console(file=io.StringIO(), width=200)
    print_statistics([_make_stats(), _make_stats("Random Write")], console=console)
    output = console.file.getvalue()
    assert "Data Load" in output
    assert "Random Write" in output
    assert "p99.99 Latency" in output
    assert "Failed Operations" in output
