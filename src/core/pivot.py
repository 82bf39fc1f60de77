"""
Pivot engine: turns a benchmark group into a (series, axis) dataset.

One parameter key becomes the axis dimension (chart categories, table
columns); all remaining keys, joined in first-seen order, form the series
dimension (legend entries, table rows). Labels keep record order, they are
never sorted.
"""

from collections import OrderedDict
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import ConfigurationError, DuplicateCellError
from .plot_config import DefaultAxisPolicy, PlotConfiguration
from .records import BenchmarkGroup, Cell, MeasurementRecord, PivotedDataset

SERIES_SEPARATOR = " - "


def _check_filter_keys(group: BenchmarkGroup, config: PlotConfiguration) -> None:
    for key in config.series_filter:
        if key not in group.param_keys:
            raise ConfigurationError(
                f"Filter parameter '{key}' is not a parameter of this benchmark",
                benchmark_id=group.benchmark_id,
                key=key,
                available=group.param_keys,
            )


def _select_axis_key(
    group: BenchmarkGroup,
    keys: Sequence[str],
    config: PlotConfiguration,
    policy: DefaultAxisPolicy,
) -> Optional[str]:
    if config.axis_key is not None:
        if config.axis_key not in keys:
            raise ConfigurationError(
                f"Axis parameter '{config.axis_key}' is not a parameter of this benchmark",
                benchmark_id=group.benchmark_id,
                key=config.axis_key,
                available=keys,
            )
        return config.axis_key

    if len(keys) < 2:
        return None
    return keys[policy.index]


def resolve_axis_key(
    group: BenchmarkGroup,
    config: PlotConfiguration,
    policy: DefaultAxisPolicy = DefaultAxisPolicy.SECOND_KEY,
) -> Optional[str]:
    """
    Parameter key used as the axis dimension.

    An explicit ``config.axis_key`` wins. Otherwise the default policy picks
    the first or second key of the group in first-seen order; groups with
    fewer than two keys have no axis key.

    Raises:
        ConfigurationError: If ``config.axis_key`` is not a key of the group
    """
    return _select_axis_key(group, group.param_keys, config, policy)


def series_keys_for(group: BenchmarkGroup, axis_key: Optional[str]) -> Tuple[str, ...]:
    """All group keys except the axis key, in first-seen order."""
    return tuple(k for k in group.param_keys if k != axis_key)


def series_label_for(record: MeasurementRecord, series_keys: Sequence[str]) -> str:
    return SERIES_SEPARATOR.join(record.param(k) for k in series_keys)


def _populate(
    group: BenchmarkGroup,
    dataset: PivotedDataset,
    records: Sequence[Tuple[int, MeasurementRecord]],
) -> PivotedDataset:
    first_index: Dict[Tuple[str, str], int] = {}
    seen_axis = set()
    seen_series = set()

    for index, record in records:
        axis_label = record.param(dataset.axis_key)
        series_label = series_label_for(record, dataset.series_keys)
        key = (series_label, axis_label)

        if key in first_index:
            raise DuplicateCellError(
                group.benchmark_id,
                series_label=series_label,
                axis_label=axis_label,
                first_index=first_index[key],
                second_index=index,
            )
        first_index[key] = index

        summary = record.summary
        dataset.cells[key] = Cell(mean=summary.mean, error=summary.error, unit=summary.unit)

        if axis_label not in seen_axis:
            seen_axis.add(axis_label)
            dataset.axis_labels.append(axis_label)
        if series_label not in seen_series:
            seen_series.add(series_label)
            dataset.series_labels.append(series_label)

    return dataset


def filter_records(
    group: BenchmarkGroup, config: PlotConfiguration
) -> List[Tuple[int, MeasurementRecord]]:
    """
    Records of the group that pass the series filter, with their position.

    Raises:
        ConfigurationError: If a filter names a key the group does not have
    """
    _check_filter_keys(group, config)
    return [
        (index, record)
        for index, record in enumerate(group.records)
        if config.accepts(record.parameters)
    ]


def pivot(
    group: BenchmarkGroup,
    config: Optional[PlotConfiguration] = None,
    policy: DefaultAxisPolicy = DefaultAxisPolicy.SECOND_KEY,
) -> PivotedDataset:
    """
    Pivot one benchmark group into a (series, axis) dataset.

    Args:
        group: Consistent group produced by the grouping engine
        config: Plot configuration; defaults to PlotConfiguration()
        policy: Default axis selection when config has no axis key

    Returns:
        PivotedDataset with one cell per record kept by the filters

    Raises:
        ConfigurationError: If the configuration names unknown keys
        DuplicateCellError: If two records land on the same cell
    """
    config = config or PlotConfiguration()
    records = filter_records(group, config)

    axis_key = resolve_axis_key(group, config, policy)
    dataset = PivotedDataset(
        benchmark_id=group.benchmark_id,
        axis_key=axis_key,
        series_keys=series_keys_for(group, axis_key),
        unit=group.unit,
    )
    return _populate(group, dataset, records)


def pivot_per_param(
    group: BenchmarkGroup,
    config: PlotConfiguration,
    policy: DefaultAxisPolicy = DefaultAxisPolicy.SECOND_KEY,
) -> "OrderedDict[str, PivotedDataset]":
    """
    Split a group on ``config.per_param`` and pivot each part.

    The split key is removed from both dimensions; axis selection then works
    on the remaining keys. Parts follow the first-seen order of the split
    key's values among the filtered records.

    Returns:
        Ordered mapping per-param value -> PivotedDataset

    Raises:
        ConfigurationError: If per_param is unset, unknown, or equal to the
            axis key
        DuplicateCellError: If two records of one part land on the same cell
    """
    split_key = config.per_param
    if split_key is None:
        raise ConfigurationError(
            "Plot configuration has no per_param key", benchmark_id=group.benchmark_id
        )
    if split_key not in group.param_keys:
        raise ConfigurationError(
            f"Per-param key '{split_key}' is not a parameter of this benchmark",
            benchmark_id=group.benchmark_id,
            key=split_key,
            available=group.param_keys,
        )
    if config.axis_key == split_key:
        raise ConfigurationError(
            "Per-param key cannot also be the axis key",
            benchmark_id=group.benchmark_id,
            key=split_key,
        )

    records = filter_records(group, config)
    remaining = tuple(k for k in group.param_keys if k != split_key)
    axis_key = _select_axis_key(group, remaining, config, policy)
    series_keys = tuple(k for k in remaining if k != axis_key)

    parts: "OrderedDict[str, List[Tuple[int, MeasurementRecord]]]" = OrderedDict()
    for index, record in records:
        parts.setdefault(record.param(split_key), []).append((index, record))

    datasets: "OrderedDict[str, PivotedDataset]" = OrderedDict()
    for value, part in parts.items():
        dataset = PivotedDataset(
            benchmark_id=group.benchmark_id,
            axis_key=axis_key,
            series_keys=series_keys,
            unit=group.unit,
        )
        datasets[value] = _populate(group, dataset, part)
    return datasets
