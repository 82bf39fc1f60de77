"""
Artifact management module for the benchmark report generator.

This module handles reading and writing of report artifacts:
- results JSON: array of benchmark runs produced by the measurement harness
- report.json: machine-readable report with pivoted datasets and errors
"""

import json
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import git
import numpy as np

from core.errors import ResultFormatError
from core.records import IterationSettings, MeasurementRecord, RunSettings, Summary

from .config import REPORTS_DIR


def get_git_commit() -> Optional[str]:
    """Get the current git commit hash."""
    try:
        repo = git.Repo(search_parent_directories=True)
        return repo.head.commit.hexsha
    except (git.InvalidGitRepositoryError, git.NoSuchPathError, ValueError):
        return None


def report_date() -> str:
    """Current GMT time formatted for report names and metadata."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%d-%H:%M:%S")


def _require(entry: Dict[str, Any], key: str, index: int, benchmark_id: Optional[str] = None) -> Any:
    if key not in entry:
        raise ResultFormatError(
            f"Missing '{key}' field", entry_index=index, benchmark_id=benchmark_id
        )
    return entry[key]


def _as_float(value: Any, name: str, index: int, benchmark_id: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ResultFormatError(
            f"Field '{name}' is not a number: {value!r}",
            entry_index=index,
            benchmark_id=benchmark_id,
        )


def _as_int(entry: Dict[str, Any], key: str, default: int, index: int, benchmark_id: str) -> int:
    value = entry.get(key, default)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ResultFormatError(
            f"Field '{key}' is not an integer: {value!r}",
            entry_index=index,
            benchmark_id=benchmark_id,
        )


def _read_iteration_settings(
    entry: Dict[str, Any], prefix: str, index: int, benchmark_id: str
) -> IterationSettings:
    return IterationSettings(
        count=_as_int(entry, f"{prefix}Iterations", 0, index, benchmark_id),
        time=entry.get(f"{prefix}Time"),
        batch_size=_as_int(entry, f"{prefix}BatchSize", 1, index, benchmark_id) or 1,
    )


def _read_run_settings(entry: Dict[str, Any], index: int, benchmark_id: str) -> RunSettings:
    return RunSettings(
        jmh_version=entry.get("jmhVersion"),
        mode=entry.get("mode"),
        threads=_as_int(entry, "threads", 1, index, benchmark_id) or 1,
        forks=_as_int(entry, "forks", 1, index, benchmark_id) or 1,
        warmup=_read_iteration_settings(entry, "warmup", index, benchmark_id),
        measurement=_read_iteration_settings(entry, "measurement", index, benchmark_id),
        timeout=entry.get("timeout"),
        synchronize_iterations=bool(entry.get("synchronizeIterations", True)),
    )


def _read_raw_samples(metric: Dict[str, Any], index: int, benchmark_id: str) -> Optional[np.ndarray]:
    raw = metric.get("rawData")
    if not raw:
        return None
    try:
        samples = np.array(raw, dtype=float)
    except (TypeError, ValueError):
        raise ResultFormatError(
            "Field 'rawData' is not a rectangular array of numbers",
            entry_index=index,
            benchmark_id=benchmark_id,
        )
    if samples.ndim != 2:
        raise ResultFormatError(
            f"Field 'rawData' must be 2-D (fork x iteration), got {samples.ndim}-D",
            entry_index=index,
            benchmark_id=benchmark_id,
        )
    return samples


def parse_result_entry(entry: Dict[str, Any], index: int = 0) -> MeasurementRecord:
    """
    Decode one run of a results file into a MeasurementRecord.

    Args:
        entry: One element of the results JSON array
        index: Position of the entry, used in error messages

    Returns:
        MeasurementRecord with the primary metric as summary

    Raises:
        ResultFormatError: If required fields are missing or malformed
    """
    if not isinstance(entry, dict):
        raise ResultFormatError(
            f"Result entry must be an object, got {type(entry).__name__}", entry_index=index
        )

    benchmark_id = _require(entry, "benchmark", index)
    if not isinstance(benchmark_id, str) or not benchmark_id:
        raise ResultFormatError("Field 'benchmark' must be a non-empty string", entry_index=index)

    params = entry.get("params") or {}
    if not isinstance(params, dict):
        raise ResultFormatError(
            "Field 'params' must be an object", entry_index=index, benchmark_id=benchmark_id
        )

    metric = _require(entry, "primaryMetric", index, benchmark_id)
    if not isinstance(metric, dict):
        raise ResultFormatError(
            "Field 'primaryMetric' must be an object", entry_index=index, benchmark_id=benchmark_id
        )

    score = _as_float(_require(metric, "score", index, benchmark_id), "score", index, benchmark_id)
    error = metric.get("scoreError", 0.0)
    error = 0.0 if error in (None, "NaN") else _as_float(error, "scoreError", index, benchmark_id)
    if math.isnan(error):
        error = 0.0
    confidence = metric.get("scoreConfidence") or [score, score]
    if not isinstance(confidence, list) or len(confidence) != 2:
        raise ResultFormatError(
            "Field 'scoreConfidence' must be a [low, high] pair",
            entry_index=index,
            benchmark_id=benchmark_id,
        )

    summary = Summary(
        mean=score,
        error=error,
        confidence_low=_as_float(confidence[0], "scoreConfidence", index, benchmark_id),
        confidence_high=_as_float(confidence[1], "scoreConfidence", index, benchmark_id),
        unit=str(_require(metric, "scoreUnit", index, benchmark_id)),
    )

    return MeasurementRecord(
        benchmark_id=benchmark_id,
        parameters={str(k): str(v) for k, v in params.items()},
        summary=summary,
        raw_samples=_read_raw_samples(metric, index, benchmark_id),
        settings=_read_run_settings(entry, index, benchmark_id),
    )


def parse_results(data: Any) -> List[MeasurementRecord]:
    """
    Decode a parsed results JSON document.

    Args:
        data: The JSON array loaded from a results file

    Returns:
        MeasurementRecords in file order
    """
    if not isinstance(data, list):
        raise ResultFormatError(
            f"Results document must be a JSON array, got {type(data).__name__}"
        )
    return [parse_result_entry(entry, index) for index, entry in enumerate(data)]


def read_results_json(path: Union[str, Path]) -> List[MeasurementRecord]:
    """
    Read a results JSON file.

    Args:
        path: Path to the results file

    Returns:
        MeasurementRecords in file order

    Raises:
        FileNotFoundError: If the file does not exist
        ResultFormatError: If the content is not a valid results document
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Results file not found: {path}")

    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ResultFormatError(f"Invalid JSON in {path.name}: {e}")

    return parse_results(data)


def ensure_reports_dir(report_name: str, base_dir: Optional[Union[str, Path]] = None) -> Path:
    """Ensure the reports directory exists for a report."""
    reports_dir = Path(base_dir or REPORTS_DIR) / report_name
    reports_dir.mkdir(parents=True, exist_ok=True)
    return reports_dir


def dataset_to_dict(dataset) -> Dict[str, Any]:
    """Serializable form of a PivotedDataset."""
    return {
        "benchmark_id": dataset.benchmark_id,
        "axis_key": dataset.axis_key,
        "series_keys": list(dataset.series_keys),
        "unit": dataset.unit,
        "axis_labels": list(dataset.axis_labels),
        "series_labels": list(dataset.series_labels),
        "cells": [
            {
                "series": series,
                "axis": axis,
                "mean": cell.mean,
                "error": cell.error,
                "unit": cell.unit,
            }
            for (series, axis), cell in dataset.cells.items()
        ],
    }


def write_report_json(
    reports_dir: Path,
    content,
    source: Optional[str] = None,
    plot_files: Optional[Dict[str, List[Path]]] = None,
) -> Path:
    """
    Write report.json with the pivoted datasets of every benchmark.

    Args:
        reports_dir: Directory of the report
        content: ReportContent produced by core.pipeline.prepare_report
        source: Results file the report was generated from
        plot_files: Optional mapping benchmark id -> chart image paths

    Returns:
        Path to the written report.json file
    """
    plot_files = plot_files or {}
    benchmarks = []
    for report in content.groups:
        group = report.group
        benchmarks.append({
            "benchmark_id": group.benchmark_id,
            "short_name": group.short_name,
            "unit": group.unit,
            "param_keys": list(group.param_keys),
            "records": len(group),
            "plots": [
                {
                    "config": plot.config.to_dict(),
                    "part": plot.part,
                    "dataset": dataset_to_dict(plot.dataset) if plot.dataset is not None else None,
                    "error": plot.error.to_dict() if plot.error is not None else None,
                }
                for plot in report.plots
            ],
            "images": [str(p) for p in plot_files.get(group.benchmark_id, [])],
        })

    report_data = {
        "generated_at": report_date(),
        "git_commit": get_git_commit(),
        "source": source,
        "benchmarks": benchmarks,
        "rejected": [e.to_dict() for e in content.rejected],
    }

    reports_dir.mkdir(parents=True, exist_ok=True)
    report_file = reports_dir / "report.json"
    with open(report_file, "w") as f:
        json.dump(report_data, f, indent=2)

    return report_file
