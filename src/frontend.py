"""
Frontend module for the benchmark report generator.

This module handles command-line argument parsing and plot declaration
loading, then generates the report for a results file.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from core.errors import ReportError
from core.grouping import group_sizes, group_tolerant
from core.plot_config import DefaultAxisPolicy
from reporting.artifacts import read_results_json
from reporting.plot_declarations import load_plot_registry
from reporting.reporter import generate_report


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="jmh-report",
        description="Generate grouped and pivoted reports from benchmark results",
        epilog="Example: jmh-report results/2026-10-19.json --plots plots.yaml",
    )

    parser.add_argument(
        "results",
        type=Path,
        help="Path to the results JSON file",
    )

    parser.add_argument(
        "--plots",
        type=Path,
        metavar="PLOTS_YAML",
        help="Plot declarations YAML file",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        metavar="DIR",
        help="Output directory (default: reports/<results file name>)",
    )

    parser.add_argument(
        "--default-axis",
        choices=[p.value for p in DefaultAxisPolicy],
        default=DefaultAxisPolicy.SECOND_KEY.value,
        help="Parameter used as axis when a plot declares none (default: second)",
    )

    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip chart generation",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on any inconsistent benchmark or invalid plot",
    )

    parser.add_argument(
        "--list",
        dest="list_benchmarks",
        action="store_true",
        help="List benchmarks in the results file and exit",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    return parser


def cmd_list_benchmarks(results: Path) -> int:
    """List benchmarks of a results file with their record counts."""
    records = read_results_json(results)
    groups, errors = group_tolerant(records)

    print(f"\n{'Benchmark':<60} {'Results':>8}")
    print("-" * 69)
    for benchmark_id, count in group_sizes(groups).items():
        print(f"{benchmark_id:<60} {count:>8}")
    for error in errors:
        print(f"Warning: {error}")
    print()
    return 0


def cmd_generate_report(
    results: Path,
    plots: Optional[Path] = None,
    output: Optional[Path] = None,
    default_axis: str = DefaultAxisPolicy.SECOND_KEY.value,
    with_plots: bool = True,
    strict: bool = False,
    verbose: bool = False,
) -> int:
    """Generate the report for a results file."""
    registry = load_plot_registry(plots) if plots else None
    if verbose and registry is not None:
        print(f"Loaded {len(registry)} plot declaration(s) from {plots}")

    print(f"Generating report for {results}")
    files = generate_report(
        results,
        registry=registry,
        output_dir=output,
        policy=DefaultAxisPolicy(default_axis),
        strict=strict,
        with_plots=with_plots,
    )

    content = files["content"]
    if verbose:
        for report in content.groups:
            print(f"  {report.group.benchmark_id}: {len(report.datasets)} plot(s)")

    print(f"\n{'='*60}")
    print("Report Summary")
    print(f"{'='*60}")
    print(f"Benchmarks: {len(content)}")
    print(f"Errors:     {len(content.errors)}")
    print(f"Markdown:   {files['markdown']}")
    print(f"JSON:       {files['json']}")
    print(f"{'='*60}\n")

    if strict and content.errors:
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the frontend.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        if args.list_benchmarks:
            return cmd_list_benchmarks(args.results)

        return cmd_generate_report(
            args.results,
            plots=args.plots,
            output=args.output,
            default_axis=args.default_axis,
            with_plots=not args.no_plots,
            strict=args.strict,
            verbose=args.verbose,
        )

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ReportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except yaml.YAMLError as e:
        print(f"Error parsing YAML: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 3


if __name__ == "__main__":
    sys.exit(main())
