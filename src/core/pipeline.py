"""
Report preparation: group records, resolve plot configurations and pivot.

The result is a ReportContent that renderers walk in order. Errors that are
fatal to a single group or a single plot are collected next to the thing
they concern, so one bad configuration does not hide the rest of the report.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .errors import ConsistencyError, ReportError
from .grouping import group, group_tolerant
from .pivot import pivot, pivot_per_param
from .plot_config import (
    DefaultAxisPolicy,
    PlotConfiguration,
    PlotRegistry,
    resolve_configurations,
)
from .records import BenchmarkGroup, MeasurementRecord, PivotedDataset


@dataclass
class PlotResult:
    """Outcome of one pivot: a dataset, or the error that prevented it."""
    config: PlotConfiguration
    dataset: Optional[PivotedDataset] = None
    error: Optional[ReportError] = None
    part: Optional[str] = None  # per-param value this dataset is restricted to

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class GroupReport:
    """A benchmark group with the plots prepared for it."""
    group: BenchmarkGroup
    plots: List[PlotResult] = field(default_factory=list)

    @property
    def datasets(self) -> List[PivotedDataset]:
        return [p.dataset for p in self.plots if p.dataset is not None]

    @property
    def errors(self) -> List[ReportError]:
        return [p.error for p in self.plots if p.error is not None]


@dataclass
class ReportContent:
    """Everything a renderer needs, in benchmark first-seen order."""
    groups: List[GroupReport] = field(default_factory=list)
    rejected: List[ConsistencyError] = field(default_factory=list)

    @property
    def errors(self) -> List[ReportError]:
        errors: List[ReportError] = list(self.rejected)
        for report in self.groups:
            errors.extend(report.errors)
        return errors

    def __len__(self) -> int:
        return len(self.groups)


def pivot_group(
    benchmark_group: BenchmarkGroup,
    configurations: Iterable[PlotConfiguration],
    policy: DefaultAxisPolicy = DefaultAxisPolicy.SECOND_KEY,
) -> GroupReport:
    """
    Pivot one group once per configuration.

    Configuration and duplicate-cell errors end that configuration only.
    """
    report = GroupReport(group=benchmark_group)
    for config in configurations:
        try:
            if config.per_param is not None:
                for value, dataset in pivot_per_param(benchmark_group, config, policy).items():
                    report.plots.append(PlotResult(config=config, dataset=dataset, part=value))
            else:
                report.plots.append(
                    PlotResult(config=config, dataset=pivot(benchmark_group, config, policy))
                )
        except ReportError as e:
            report.plots.append(PlotResult(config=config, error=e))
    return report


def prepare_report(
    records: Iterable[MeasurementRecord],
    registry: Optional[PlotRegistry] = None,
    policy: DefaultAxisPolicy = DefaultAxisPolicy.SECOND_KEY,
    strict: bool = False,
) -> ReportContent:
    """
    Build the report content for a sequence of measurement records.

    Args:
        records: Records in arrival order
        registry: Plot declarations; None means one default plot per group
        policy: Default axis selection policy
        strict: Raise on the first inconsistent group instead of excluding it

    Returns:
        ReportContent with one GroupReport per consistent benchmark

    Raises:
        ConsistencyError: Only in strict mode
    """
    if strict:
        groups, rejected = group(records), []
    else:
        groups, rejected = group_tolerant(records)

    content = ReportContent(rejected=list(rejected))
    for benchmark_id, benchmark_group in groups.items():
        configurations = resolve_configurations(benchmark_id, registry)
        content.groups.append(pivot_group(benchmark_group, configurations, policy))
    return content
