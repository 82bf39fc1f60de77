"""
Core engine of the benchmark report generator.

Contains:
- records: Measurement records, benchmark groups and pivoted datasets
- grouping: Benchmark-identity bucketing with consistency checks
- plot_config: Plot configuration policy objects and their registry
- pivot: Axis/series dimension selection and dataset construction
- pipeline: Report preparation over all groups and configurations
- errors: Error taxonomy
"""

from .errors import (
    ReportError,
    ConsistencyError,
    ConfigurationError,
    DuplicateCellError,
    ResultFormatError,
)
from .records import (
    Summary,
    IterationSettings,
    RunSettings,
    MeasurementRecord,
    BenchmarkGroup,
    Cell,
    PivotedDataset,
)
from .grouping import group, group_tolerant, short_name, GroupingEngine
from .plot_config import (
    ChartKind,
    Orientation,
    DefaultAxisPolicy,
    PlotConfiguration,
    PlotRegistry,
    resolve_configurations,
)
from .pivot import pivot, pivot_per_param, resolve_axis_key
from .pipeline import prepare_report, ReportContent, GroupReport, PlotResult
