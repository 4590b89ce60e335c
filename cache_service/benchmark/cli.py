#!/usr/bin/env python3
"""Eviction policy benchmark CLI."""

import argparse
import sys
from typing import List, Optional, Tuple


def _weight_set(value: str) -> Tuple[float, float, float]:
    try:
        parts = tuple(float(part) for part in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid weight set: {value!r}")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"weight set needs quality,recency,frequency: {value!r}")
    return parts


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Cache eviction policy benchmark",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compare every policy on a highly repetitive workload
  python -m cache_service.benchmark.cli run \\
      --questions 500 --repetition HIGH --sizes 10 25 50

  # Tune Quality Score only, print a table
  python -m cache_service.benchmark.cli run \\
      --policies quality_score --learning-rates 0.3 0.5 \\
      --weights 0.6,0.3,0.1 0.8,0.15,0.05 --output-format table
""",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run the policy benchmark")
    run_parser.add_argument("--questions", type=int, default=500, help="Queries in the trace (default: 500)")
    run_parser.add_argument(
        "--repetition",
        choices=["HIGH", "LOW", "MIXED"],
        default="HIGH",
        help="Degree of repetition of the trace (default: HIGH)",
    )
    run_parser.add_argument(
        "--sizes", type=int, nargs="+", default=[10, 25, 50, 100], help="Cache max sizes to compare"
    )
    run_parser.add_argument("--clean-size", type=int, default=1, help="Entries evicted per overflow (default: 1)")
    run_parser.add_argument(
        "--policies",
        nargs="+",
        default=["quality_score", "LRU", "LFU", "FIFO", "RR"],
        help="Policies to compare",
    )
    run_parser.add_argument(
        "--learning-rates", type=float, nargs="+", default=[0.5], help="Quality Score learning rates"
    )
    run_parser.add_argument(
        "--weights",
        type=_weight_set,
        nargs="+",
        default=[(0.6, 0.3, 0.1), (0.8, 0.1, 0.1)],
        help="Quality Score weight sets as quality,recency,frequency",
    )
    run_parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    run_parser.add_argument("--output", default=None, help="Write the report to this path")
    run_parser.add_argument(
        "--output-format", choices=["json", "table"], default="table", help="Output format (default: table)"
    )
    run_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    return parser


def run_benchmark(args) -> int:
    """Run the benchmark command."""
    from cache_service.benchmark.config import BenchmarkConfig
    from cache_service.benchmark.formatters import get_formatter
    from cache_service.benchmark.runner import BenchmarkRunner

    config = BenchmarkConfig(
        number_of_questions=args.questions,
        degree_of_repetition=args.repetition,
        seed=args.seed,
        max_sizes=args.sizes,
        clean_size=args.clean_size,
        policies=args.policies,
        learning_rates=args.learning_rates,
        weight_sets=list(args.weights),
        output_format=args.output_format,
        output_path=args.output,
        verbose=args.verbose,
    )

    errors = config.validate()
    if errors:
        print(f"Configuration errors: {errors}")
        return 1

    def progress(current, total, message=""):
        if args.verbose:
            print(f"\r{message} [{current}/{total}]", end="", flush=True)

    runner = BenchmarkRunner(config)
    print(
        f"Replaying {len(runner.workload)} queries "
        f"({runner.workload.distinct_questions} distinct, {config.degree_of_repetition} repetition)..."
    )
    report = runner.run(progress_callback=progress)
    if args.verbose:
        print()

    formatter = get_formatter(config.output_format)
    if config.output_path:
        formatter.save(report, config.output_path)
        print(f"Results saved to: {config.output_path}")
    else:
        print(formatter.format(report))

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command == "run":
        return run_benchmark(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
