#!/usr/bin/env python3
"""
Command line entry point: run the pipeline over files, or benchmark it
across pool sizes.
"""

import csv
import sys
import time
import logging
import argparse

from phasemr.client.loader import load_work_items
from phasemr.client.output import format_result, format_timings, write_result
from phasemr.common.config import DEFAULT_GROUP_BATCH_SIZE, PipelineConfig
from phasemr.common.errors import PhaseFailed, PipelineError
from phasemr.common.types import GroupStrategy
from phasemr.coordinator.pipeline import WordCountPipeline

logger = logging.getLogger("phasemr")

CSV_FIELDS = [
    'pool_size', 'reduce_pool_size', 'group_strategy', 'run',
    'map_phase_ms', 'group_phase_ms', 'reduce_phase_ms', 'total_time_ms',
    'num_mapped_items', 'num_distinct_tokens',
]


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def build_config(args, pool_size: int) -> PipelineConfig:
    return PipelineConfig(
        pool_size=pool_size,
        reduce_pool_size=args.reduce_pool_size,
        group_strategy=GroupStrategy(args.group_strategy),
        group_batch_size=args.group_batch_size,
        record_memory=args.record_memory,
    )


def run_command(args) -> int:
    """Load files, run the pipeline once, print or write the result"""
    start = time.time()
    store = load_work_items(args.files)
    load_time_ms = (time.time() - start) * 1000

    result = WordCountPipeline(build_config(args, args.pool_size)).run(store)

    if args.output:
        write_result(result.counts, args.output, sort=args.sort)
        logger.info(f"Wrote {len(result.counts)} tokens to {args.output}")
    else:
        for line in format_result(result.counts, sort=args.sort):
            print(line)

    for line in format_timings(result.metrics, load_time_ms):
        print(line, file=sys.stderr)

    if args.metrics:
        result.metrics.save_to_file(args.metrics)
        logger.info(f"Saved metrics to {args.metrics}")
    return 0


def benchmark_command(args) -> int:
    """Run the pipeline for every pool size and write one CSV row per run"""
    store = load_work_items(args.files)
    rows = []
    for pool_size in args.pool_sizes:
        for run in range(args.runs):
            metrics = WordCountPipeline(build_config(args, pool_size)).run(store).metrics
            row = {name: value for name, value in metrics.to_dict().items() if name in CSV_FIELDS}
            row['run'] = run
            rows.append(row)
            print(f"pool_size={pool_size} run={run}: {metrics.total_time_ms:.1f}ms")

    with open(args.csv, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        writer.writerows(rows)
    logger.info(f"Saved {len(rows)} benchmark rows to {args.csv}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Phase-parallel word count")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level")

    # Options shared by both commands
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--group-strategy", default=GroupStrategy.SEQUENTIAL.value,
                        choices=[s.value for s in GroupStrategy],
                        help="Fold mapped items on one thread or on the pool")
    common.add_argument("--group-batch-size", type=positive_int, default=DEFAULT_GROUP_BATCH_SIZE,
                        help="Mapped items per parallel group task")
    common.add_argument("--reduce-pool-size", type=positive_int, default=None,
                        help="Bound the reduce phase to N threads (default: one thread per token)")
    common.add_argument("--record-memory", action="store_true",
                        help="Sample process memory at each phase boundary")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    run_parser = subparsers.add_parser("run", parents=[common], help="Count words in files")
    run_parser.add_argument("pool_size", type=positive_int, help="Number of map threads")
    run_parser.add_argument("files", nargs="+", help="Input files")
    run_parser.add_argument("--output", "-o", help="Write results to this file instead of stdout")
    run_parser.add_argument("--metrics", help="Save timing metrics as JSON")
    run_parser.add_argument("--sort", action="store_true", help="Sort output by token")

    bench_parser = subparsers.add_parser("benchmark", parents=[common],
                                         help="Time the pipeline across pool sizes")
    bench_parser.add_argument("files", nargs="+", help="Input files")
    bench_parser.add_argument("--pool-sizes", type=positive_int, nargs="+", default=[1, 2, 4, 8],
                              help="Pool sizes to try")
    bench_parser.add_argument("--runs", type=positive_int, default=3, help="Runs per pool size")
    bench_parser.add_argument("--csv", default="benchmark_results.csv", help="Output CSV path")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.command == "run":
        handler = run_command
    elif args.command == "benchmark":
        handler = benchmark_command
    else:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except PhaseFailed as e:
        logger.error(str(e))
        for failure in e.failures:
            logger.error(f"  {failure}")
        return 1
    except PipelineError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
