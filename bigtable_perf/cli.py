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
Command line entry points for the latency benchmarks.

    bigtable-perf perf-test --project-id my-project --instance-id perf \
        --total-rows 10000 --batch-size 1000 --timeout-minutes 30
"""
from __future__ import annotations

import argparse
import datetime
import logging
import os

from rich.logging import RichHandler

from bigtable_perf.config import BenchmarkConfig
from bigtable_perf.config import RemainderPolicy
from bigtable_perf.config import UnknownStatusPolicy
from bigtable_perf.exceptions import BackendError
from bigtable_perf.exceptions import ValidationError
from bigtable_perf.report import print_statistics
from bigtable_perf.report import report_filename
from bigtable_perf.report import write_report
from bigtable_perf.runner import BenchmarkRunner
from bigtable_perf.runner import batch_sizes
from bigtable_perf.workload import ValuePool
from bigtable_perf.workload import WorkloadGenerator
from bigtable_perf.workload import random_table_id

LOGGER = logging.getLogger(__name__)


def _positive_int(value):
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer")
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"{value!r} must be greater than 0")
    return parsed


def _non_negative_int(value):
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer")
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"{value!r} must not be negative")
    return parsed


def _add_env_option(parser, flag, env_var, help_text):
    default = os.getenv(env_var) or None
    parser.add_argument(
        flag,
        default=default,
        required=default is None,
        help=f"{help_text} (default: ${env_var})",
    )


def _add_connection_args(parser):
    _add_env_option(parser, "--project-id", "GOOGLE_CLOUD_PROJECT", "Project ID")
    _add_env_option(parser, "--instance-id", "BIGTABLE_INSTANCE", "Instance ID")
    parser.add_argument(
        "--output-dir", default=".", help="directory for the CSV report"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")


def _add_load_args(parser):
    parser.add_argument(
        "--total-rows",
        type=_positive_int,
        required=True,
        help="total number of rows to insert, must be >= batch size",
    )
    parser.add_argument(
        "--batch-size",
        type=_positive_int,
        required=True,
        help="number of rows mutated per bulk request",
    )
    parser.add_argument(
        "--timeout-millis",
        type=_positive_int,
        default=None,
        help="(optional) timeout for each bulk request",
    )
    parser.add_argument(
        "--remainder",
        choices=[policy.value for policy in RemainderPolicy],
        default=None,
        help="handling of rows that do not fill the last batch "
        "(default: $BIGTABLE_PERF_REMAINDER or short)",
    )
    parser.add_argument(
        "--unknown-status",
        choices=[policy.value for policy in UnknownStatusPolicy],
        default=None,
        help="how bulk write status codes other than 0 and 1 are counted "
        "(default: $BIGTABLE_PERF_UNKNOWN_STATUS or failure)",
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="bigtable-perf", description="Bigtable latency benchmarks"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    perf = subparsers.add_parser(
        "perf-test",
        help="load rows into a scratch table, then run random reads and writes",
    )
    _add_connection_args(perf)
    _add_load_args(perf)
    perf.add_argument(
        "--timeout-minutes",
        type=_non_negative_int,
        required=True,
        help="duration of the random read/write phase",
    )

    load = subparsers.add_parser(
        "scan-test-load", help="create a table if needed and load rows into it"
    )
    _add_connection_args(load)
    load.add_argument("--table-id", required=True, help="table to load")
    _add_load_args(load)

    scan = subparsers.add_parser(
        "scan-test", help="random reads against a previously loaded table"
    )
    _add_connection_args(scan)
    scan.add_argument("--table-id", required=True, help="table to read")
    scan.add_argument(
        "--total-rows",
        type=_positive_int,
        required=True,
        help="number of rows in the table, used to pick random keys",
    )
    scan.add_argument(
        "--timeout-minutes",
        type=_non_negative_int,
        required=True,
        help="duration of the random read phase",
    )
    scan.add_argument(
        "--scan-size",
        type=_positive_int,
        default=None,
        help="(optional) read this many rows from each random key",
    )
    return parser


def configure_logging(verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def default_backend_factory(args):
    from bigtable_perf.bigtable_backend import BigtableBackend

    timeout_millis = getattr(args, "timeout_millis", None)
    mutation_timeout = timeout_millis / 1000 if timeout_millis else None
    return BigtableBackend.from_ids(
        args.project_id, args.instance_id, mutation_timeout=mutation_timeout
    )


def _make_runner(backend, config, show_progress=True):
    pool = ValuePool(config.pool_size, config.value_size)
    return BenchmarkRunner(
        backend,
        WorkloadGenerator(pool),
        remainder=config.remainder,
        unknown_status=config.unknown_status,
        show_progress=show_progress,
    )


def _finish(args, prefix, stats_list, start_time):
    path = os.path.join(args.output_dir, report_filename(prefix))
    write_report(path, stats_list, start_time)
    LOGGER.info("File generated %s", path)
    print_statistics(stats_list)
    return path


def run_perf_test(args, backend, config):
    start_time = datetime.datetime.now(datetime.timezone.utc)
    runner = _make_runner(backend, config)
    table_id = random_table_id(config.row_key_prefix)
    LOGGER.info("Creating table %s", table_id)
    backend.create_table_if_absent(table_id, config.column_family)
    try:
        LOGGER.info("Loading %d rows", args.total_rows)
        load_stats = runner.load_records(
            table_id,
            config.row_key_prefix,
            config.column_family,
            args.total_rows,
            args.batch_size,
            config.cells_per_row,
        )
        LOGGER.info("Load phase completed, starting random read/write phase")
        read_stats, write_stats = runner.random_read_write(
            table_id,
            config.row_key_prefix,
            config.column_family,
            args.total_rows,
            args.timeout_minutes * 60,
        )
        path = _finish(
            args,
            "reports_latency_test_At",
            [load_stats, read_stats, write_stats],
            start_time,
        )
    except BaseException:
        # keep the phase error, not a cleanup error
        try:
            backend.delete_table(table_id)
        except BackendError as exc:
            LOGGER.warning("Could not delete table %s: %s", table_id, exc)
        raise
    LOGGER.info("Deleting table %s", table_id)
    backend.delete_table(table_id)
    return path


def run_scan_test_load(args, backend, config):
    start_time = datetime.datetime.now(datetime.timezone.utc)
    runner = _make_runner(backend, config)
    backend.create_table_if_absent(args.table_id, config.column_family)
    LOGGER.info("Loading %d rows", args.total_rows)
    load_stats = runner.load_records(
        args.table_id,
        config.row_key_prefix,
        config.column_family,
        args.total_rows,
        args.batch_size,
        config.cells_per_row,
        operation_name=f"Load ({args.batch_size} Batch)",
        ndigits=4,
    )
    return _finish(args, "scantest_table_load_At", [load_stats], start_time)


def run_scan_test(args, backend, config):
    start_time = datetime.datetime.now(datetime.timezone.utc)
    runner = _make_runner(backend, config, show_progress=False)
    read_stats = runner.random_read(
        args.table_id,
        config.row_key_prefix,
        args.total_rows,
        args.timeout_minutes * 60,
        scan_size=args.scan_size,
    )
    return _finish(args, "reports_latency_scan_test", [read_stats], start_time)


_COMMANDS = {
    "perf-test": run_perf_test,
    "scan-test-load": run_scan_test_load,
    "scan-test": run_scan_test,
}


def _config_overrides(args):
    overrides = {}
    if getattr(args, "remainder", None):
        overrides["remainder"] = RemainderPolicy(args.remainder)
    if getattr(args, "unknown_status", None):
        overrides["unknown_status"] = UnknownStatusPolicy(args.unknown_status)
    return overrides


def main(argv=None, backend_factory=default_backend_factory):
    """
    Parse arguments and run the selected benchmark.

    Returns:
      - process exit status
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    try:
        config = BenchmarkConfig(**_config_overrides(args))
        if hasattr(args, "batch_size"):
            # reject bad sizes before connecting
            batch_sizes(
                args.total_rows,
                args.batch_size,
                config.remainder,
                config.cells_per_row,
            )
        backend = backend_factory(args)
        _COMMANDS[args.command](args, backend, config)
    except ValidationError as exc:
        LOGGER.error("%s", exc)
        return 1
    except BackendError as exc:
        LOGGER.error("Backend error: %s", exc)
        return 1
    return 0
