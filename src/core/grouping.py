"""
Grouping engine: buckets measurement records by benchmark identity.

Groups come out in the order their benchmark id was first seen, which is the
chapter order of the final report. The first record of a group fixes its
parameter key set and unit; any later record that disagrees is reported as
a ConsistencyError instead of being merged.
"""

from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import ConsistencyError
from .records import BenchmarkGroup, MeasurementRecord


def short_name(benchmark_id: str) -> str:
    """
    Display name of a benchmark: its last two dotted segments.

    Args:
        benchmark_id: Fully-qualified benchmark identity

    Returns:
        "Class.method" for "pkg.Class.method", or the id itself when it has
        fewer than two segments
    """
    segments = benchmark_id.split(".")
    if len(segments) < 2:
        return benchmark_id
    return ".".join(segments[-2:])


def class_name_for(benchmark_id: str) -> str:
    """Everything before the last dot ("pkg.Class" for "pkg.Class.method")."""
    index = benchmark_id.rfind(".")
    if index < 0:
        return benchmark_id
    return benchmark_id[:index]


class _GroupBuilder:
    """Accumulates the records of one benchmark while checking consistency."""

    def __init__(self, benchmark_id: str):
        self.benchmark_id = benchmark_id
        self.param_keys: Tuple[str, ...] = ()
        self.unit: Optional[str] = None
        self.records: List[MeasurementRecord] = []
        self.error: Optional[ConsistencyError] = None

    def add(self, record: MeasurementRecord, position: int) -> None:
        if not self.records:
            self.param_keys = record.param_keys
            self.unit = record.unit
            self.records.append(record)
            return

        if set(record.param_keys) != set(self.param_keys):
            raise ConsistencyError(
                self.benchmark_id,
                field="parameter keys",
                expected=list(self.param_keys),
                actual=list(record.param_keys),
                record_index=position,
            )
        if record.unit != self.unit:
            raise ConsistencyError(
                self.benchmark_id,
                field="unit",
                expected=self.unit,
                actual=record.unit,
                record_index=position,
            )
        self.records.append(record)

    def build(self) -> BenchmarkGroup:
        return BenchmarkGroup(
            benchmark_id=self.benchmark_id,
            param_keys=self.param_keys,
            unit=self.unit or "",
            records=tuple(self.records),
        )


class GroupingEngine:
    """
    Order-sensitive, single-threaded accumulator of benchmark groups.

    In strict mode the first inconsistent record raises. Otherwise the
    offending group is marked failed, further records of it are ignored,
    and it is left out of ``finish()``; its error is kept in ``errors``.
    """

    def __init__(self, strict: bool = True):
        self.strict = strict
        self._builders: "OrderedDict[str, _GroupBuilder]" = OrderedDict()
        self._position = 0
        self._finished = False

    def add(self, record: MeasurementRecord) -> None:
        if self._finished:
            raise RuntimeError("Cannot add records after grouping has finished")

        position = self._position
        self._position += 1

        builder = self._builders.get(record.benchmark_id)
        if builder is None:
            builder = _GroupBuilder(record.benchmark_id)
            self._builders[record.benchmark_id] = builder

        if builder.error is not None:
            return

        try:
            builder.add(record, position)
        except ConsistencyError as e:
            if self.strict:
                raise
            builder.error = e

    def extend(self, records: Iterable[MeasurementRecord]) -> None:
        for record in records:
            self.add(record)

    @property
    def errors(self) -> List[ConsistencyError]:
        return [b.error for b in self._builders.values() if b.error is not None]

    def finish(self) -> "OrderedDict[str, BenchmarkGroup]":
        """Freeze and return the consistent groups in first-seen order."""
        self._finished = True
        groups: "OrderedDict[str, BenchmarkGroup]" = OrderedDict()
        for benchmark_id, builder in self._builders.items():
            if builder.error is None:
                groups[benchmark_id] = builder.build()
        return groups


def group(records: Iterable[MeasurementRecord]) -> "OrderedDict[str, BenchmarkGroup]":
    """
    Bucket records by benchmark id.

    Args:
        records: Measurement records in arrival order

    Returns:
        Ordered mapping benchmark id -> BenchmarkGroup, in first-seen order

    Raises:
        ConsistencyError: If two records of one benchmark disagree on their
            parameter key set or unit
    """
    engine = GroupingEngine(strict=True)
    engine.extend(records)
    return engine.finish()


def group_tolerant(
    records: Iterable[MeasurementRecord],
) -> Tuple["OrderedDict[str, BenchmarkGroup]", List[ConsistencyError]]:
    """
    Bucket records by benchmark id, excluding inconsistent groups.

    Returns:
        Tuple of (consistent groups in first-seen order, errors of the
        excluded groups)
    """
    engine = GroupingEngine(strict=False)
    engine.extend(records)
    groups = engine.finish()
    return groups, engine.errors


def group_sizes(groups: Dict[str, BenchmarkGroup]) -> Dict[str, int]:
    """Number of records per benchmark, for progress output."""
    return {benchmark_id: len(g) for benchmark_id, g in groups.items()}
