"""
Data model for benchmark measurement records and their pivoted form.

A MeasurementRecord is one benchmark execution under one parameter
configuration. Records are bucketed into BenchmarkGroups by the grouping
engine, and each group is turned into a PivotedDataset by the pivot engine.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class Summary:
    """Pre-aggregated statistics of one measurement (never recomputed here)."""
    mean: float
    error: float
    confidence_low: float
    confidence_high: float
    unit: str


@dataclass(frozen=True)
class IterationSettings:
    """Warmup or measurement phase settings of a run."""
    count: int = 0
    time: Optional[str] = None
    batch_size: int = 1


@dataclass(frozen=True)
class RunSettings:
    """Harness settings a record was measured with (used for report text only)."""
    jmh_version: Optional[str] = None
    mode: Optional[str] = None
    threads: int = 1
    forks: int = 1
    warmup: IterationSettings = field(default_factory=IterationSettings)
    measurement: IterationSettings = field(default_factory=IterationSettings)
    timeout: Optional[str] = None
    synchronize_iterations: bool = True


@dataclass(frozen=True)
class MeasurementRecord:
    """
    One benchmark execution under one configuration.

    ``parameters`` keeps insertion order; it is wrapped in a read-only view
    on construction so a record cannot change once created.
    """
    benchmark_id: str
    parameters: Mapping[str, str]
    summary: Summary
    raw_samples: Optional[np.ndarray] = field(default=None, compare=False, repr=False)
    settings: Optional[RunSettings] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))
        if self.raw_samples is not None:
            samples = np.array(self.raw_samples, dtype=float)
            if samples.ndim != 2:
                raise ValueError(
                    f"raw_samples must be 2-D (replicate x repetition), got {samples.ndim}-D"
                )
            samples.setflags(write=False)
            object.__setattr__(self, "raw_samples", samples)

    @property
    def param_keys(self) -> Tuple[str, ...]:
        return tuple(self.parameters.keys())

    @property
    def unit(self) -> str:
        return self.summary.unit

    def param(self, key: Optional[str]) -> str:
        """Value of a parameter, or the empty string for no key."""
        if key is None:
            return ""
        return self.parameters[key]


@dataclass(frozen=True)
class BenchmarkGroup:
    """All records sharing one benchmark id, in arrival order."""
    benchmark_id: str
    param_keys: Tuple[str, ...]
    unit: str
    records: Tuple[MeasurementRecord, ...]

    @property
    def short_name(self) -> str:
        from .grouping import short_name

        return short_name(self.benchmark_id)

    @property
    def settings(self) -> Optional[RunSettings]:
        """Run settings of the first record, if the source provided any."""
        for record in self.records:
            if record.settings is not None:
                return record.settings
        return None

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[MeasurementRecord]:
        return iter(self.records)


@dataclass(frozen=True)
class Cell:
    """One (series, axis) point of a pivoted dataset."""
    mean: float
    error: float
    unit: str


@dataclass
class PivotedDataset:
    """
    Statistical dataset keyed by (series label, axis label).

    Labels keep the order in which they were first observed while pivoting,
    which follows the group's record order.
    """
    benchmark_id: str
    axis_key: Optional[str]
    series_keys: Tuple[str, ...]
    unit: str
    cells: Dict[Tuple[str, str], Cell] = field(default_factory=dict)
    axis_labels: List[str] = field(default_factory=list)
    series_labels: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.cells)

    def __contains__(self, key: Tuple[str, str]) -> bool:
        return key in self.cells

    def __getitem__(self, key: Tuple[str, str]) -> Cell:
        return self.cells[key]

    def get(self, series_label: str, axis_label: str) -> Optional[Cell]:
        return self.cells.get((series_label, axis_label))

    def series(self, series_label: str) -> "Dict[str, Cell]":
        """Cells of one series keyed by axis label, in axis label order."""
        return {
            axis: self.cells[(series_label, axis)]
            for axis in self.axis_labels
            if (series_label, axis) in self.cells
        }

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Mean and error matrices shaped (series, axis).

        Missing cells are NaN so renderers can skip them.
        """
        shape = (len(self.series_labels), len(self.axis_labels))
        means = np.full(shape, np.nan)
        errors = np.full(shape, np.nan)
        for i, series in enumerate(self.series_labels):
            for j, axis in enumerate(self.axis_labels):
                cell = self.cells.get((series, axis))
                if cell is not None:
                    means[i, j] = cell.mean
                    errors[i, j] = cell.error
        return means, errors
