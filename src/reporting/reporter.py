"""
Report generator module for creating benchmark reports.

This module renders a prepared ReportContent into a Markdown report (one
chapter per benchmark, in the order benchmarks first appear in the results)
plus a JSON report and chart images.
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from core.pipeline import ReportContent, GroupReport, prepare_report
from core.plot_config import DefaultAxisPolicy, PlotRegistry
from core.records import BenchmarkGroup, RunSettings

from reporting.artifacts import (
    ensure_reports_dir,
    read_results_json,
    report_date,
    write_report_json,
)
from reporting.config import RenderingConfiguration
from reporting.plotting import generate_plots


RESULT_HEADERS = ["Score", "Error (±)", "Unit"]

MODE_LABELS = {
    "thrpt": "Throughput, ops/time",
    "avgt": "Average time, time/op",
    "sample": "Sampling time",
    "ss": "Single shot invocation time",
    "all": "All benchmark modes",
}

_TIME_UNITS_NS = {
    "ns": 1,
    "us": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "min": 60_000_000_000,
    "hr": 3_600_000_000_000,
    "day": 86_400_000_000_000,
}


def time_value_ns(value: Optional[str]) -> Optional[int]:
    """
    Convert a harness time value ("10 s", "500 ms", "1 min") to nanoseconds.

    Returns:
        Nanoseconds, or None if the value cannot be parsed
    """
    if not value:
        return None
    match = re.match(r"^\s*(\d+(?:\.\d+)?)\s*([a-z]+)\s*$", str(value))
    if not match:
        return None
    unit = _TIME_UNITS_NS.get(match.group(2))
    if unit is None:
        return None
    return int(float(match.group(1)) * unit)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


def _iteration_text(count: int, time: Optional[str], batch_size: int) -> str:
    if count <= 0:
        return "<none>"
    text = f"{_plural(count, 'iteration')}, {time or '?'} each"
    if batch_size > 1:
        text += f", {batch_size} calls per op"
    return text


def format_run_parameters(settings: Optional[RunSettings]) -> List[str]:
    """
    Markdown lines describing the harness settings of a benchmark.

    Includes warnings for a timeout not larger than the iteration time and
    for unsynchronized iterations.
    """
    if settings is None:
        return []

    lines = []
    if settings.jmh_version:
        lines.append(f"**JMH version:** {settings.jmh_version}  ")
    lines.append(f"**Forks:** {_plural(settings.forks, 'fork')}  ")
    lines.append(
        f"**Warmup:** {_iteration_text(settings.warmup.count, settings.warmup.time, settings.warmup.batch_size)}  "
    )
    lines.append(
        "**Measurement:** "
        f"{_iteration_text(settings.measurement.count, settings.measurement.time, settings.measurement.batch_size)}  "
    )

    if settings.timeout:
        timeout_ns = time_value_ns(settings.timeout)
        iteration_ns = [
            time_value_ns(settings.measurement.time),
            time_value_ns(settings.warmup.time),
        ]
        too_low = timeout_ns is not None and any(
            t is not None and timeout_ns <= t for t in iteration_ns
        )
        warning = ", ***WARNING: The timeout might be too low!***" if too_low else ""
        lines.append(f"**Timeout:** {settings.timeout} per iteration{warning}  ")

    threads = f"**Threads:** {_plural(settings.threads, 'thread')}"
    if settings.synchronize_iterations:
        threads += ", will synchronize iterations"
    elif settings.mode != "ss":
        threads += ", ***WARNING: Synchronize iterations are disabled!***"
    lines.append(threads + "  ")

    if settings.mode:
        lines.append(f"**Benchmark mode:** {MODE_LABELS.get(settings.mode, settings.mode)}  ")

    return lines


def format_results_table(group: BenchmarkGroup) -> List[str]:
    """
    Markdown table with one row per record, in arrival order.

    Columns are the group's parameter keys followed by score, error and unit.
    """
    headers = list(group.param_keys) + RESULT_HEADERS
    align = [":--" for _ in group.param_keys] + ["--:", "--:", ":-:"]

    lines = [
        "| " + " | ".join(headers) + " |",
        "|" + "|".join(align) + "|",
    ]
    for record in group.records:
        cells = [record.param(k) for k in group.param_keys]
        cells += [
            f"{record.summary.mean:.3f}",
            f"{record.summary.error:.3f}",
            group.unit,
        ]
        lines.append("| " + " | ".join(cells) + " |")
    return lines


def format_chapter(
    number: int,
    report: GroupReport,
    images: Optional[List[Path]] = None,
    reports_dir: Optional[Path] = None,
) -> List[str]:
    """Markdown chapter of one benchmark: settings, table, charts, errors."""
    group = report.group
    lines = [
        f"## {number}. {group.benchmark_id}",
        "",
        f"*{group.short_name}* ({_plural(len(group), 'result')})",
        "",
    ]

    run_parameters = format_run_parameters(group.settings)
    if run_parameters:
        lines.extend(run_parameters)
        lines.append("")

    lines.extend(format_results_table(group))
    lines.append("")

    for image in images or []:
        path = Path(image)
        if reports_dir is not None:
            try:
                path = path.relative_to(reports_dir)
            except ValueError:
                pass
        lines.extend([f"![{group.short_name}]({path.as_posix()})", ""])

    for error in report.errors:
        lines.extend([f"> **Plot skipped:** {error}", ""])

    return lines


def generate_markdown_report(
    content: ReportContent,
    plot_files: Optional[Dict[str, List[Path]]] = None,
    title: str = "Benchmark Report",
    source: Optional[str] = None,
    reports_dir: Optional[Path] = None,
) -> str:
    """
    Generate the Markdown report.

    Args:
        content: Prepared report content
        plot_files: Optional mapping benchmark id -> chart images
        title: Report title
        source: Results file the report was generated from
        reports_dir: Directory image paths are made relative to

    Returns:
        Markdown report as string
    """
    plot_files = plot_files or {}
    lines = [
        f"# {title}",
        "",
        f"**Generated:** {report_date()} GMT  ",
    ]
    if source:
        lines.append(f"**Source:** `{source}`  ")
    lines.extend([f"**Benchmarks:** {len(content)}", "", "---", ""])

    if content.rejected:
        lines.extend(["## Rejected benchmarks", ""])
        for error in content.rejected:
            lines.append(f"- {error}")
        lines.extend(["", "---", ""])

    for number, report in enumerate(content.groups, 1):
        lines.extend(
            format_chapter(
                number,
                report,
                images=plot_files.get(report.group.benchmark_id),
                reports_dir=reports_dir,
            )
        )
        lines.extend(["---", ""])

    lines.extend(["*Report generated by jmh-report*", ""])
    return "\n".join(lines)


def write_report_files(
    content: ReportContent,
    reports_dir: Path,
    source: Optional[str] = None,
    with_plots: bool = True,
    rendering: Optional[RenderingConfiguration] = None,
) -> Dict[str, Any]:
    """
    Write Markdown, JSON and chart files for a report.

    Args:
        content: Prepared report content
        reports_dir: Output directory
        source: Results file the report was generated from
        with_plots: Render chart images
        rendering: Font sizes and resolution for charts

    Returns:
        Dictionary with paths to generated files
    """
    reports_dir = Path(reports_dir)
    reports_dir.mkdir(parents=True, exist_ok=True)

    if with_plots:
        print("  Generating plots...")
        plot_files = generate_plots(content, reports_dir / "plots", rendering=rendering)
    else:
        print("  Skipping plots")
        plot_files = {}

    print("  Generating report files...")
    md_content = generate_markdown_report(
        content, plot_files=plot_files, source=source, reports_dir=reports_dir
    )
    md_file = reports_dir / "report.md"
    with open(md_file, "w") as f:
        f.write(md_content)

    json_file = write_report_json(reports_dir, content, source=source, plot_files=plot_files)

    return {"markdown": md_file, "json": json_file, "plots": plot_files}


def generate_report(
    results_path: Union[str, Path],
    registry: Optional[PlotRegistry] = None,
    output_dir: Optional[Union[str, Path]] = None,
    policy: DefaultAxisPolicy = DefaultAxisPolicy.SECOND_KEY,
    strict: bool = False,
    with_plots: bool = True,
) -> Dict[str, Any]:
    """
    Generate a complete report from a results file.

    Args:
        results_path: Path to the results JSON file
        registry: Plot declarations; None gives one default plot per benchmark
        output_dir: Output directory; defaults to reports/<results file stem>
        policy: Default axis selection policy
        strict: Abort on the first inconsistent benchmark
        with_plots: Render chart images

    Returns:
        Dictionary with paths to generated files and the report content
    """
    results_path = Path(results_path)

    print("  Loading results...")
    records = read_results_json(results_path)

    print("  Pivoting results...")
    content = prepare_report(records, registry=registry, policy=policy, strict=strict)

    for error in content.errors:
        print(f"Warning: {error}")

    if output_dir is None:
        reports_dir = ensure_reports_dir(results_path.stem)
    else:
        reports_dir = Path(output_dir)

    files = write_report_files(
        content, reports_dir, source=str(results_path), with_plots=with_plots
    )
    files["content"] = content
    return files
