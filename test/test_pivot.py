"""
Unit tests for the pivot engine.

Covers default axis selection, label ordering, filtering, duplicate cell
detection and the per-param split.
"""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.errors import ConfigurationError, DuplicateCellError
from core.grouping import group
from core.pivot import pivot, pivot_per_param, resolve_axis_key
from core.plot_config import DefaultAxisPolicy, PlotConfiguration
from core.records import MeasurementRecord, Summary


def make_record(benchmark_id: str, params: dict, mean: float = 1.0, error: float = 0.1,
                unit: str = "ns/op") -> MeasurementRecord:
    """Create a fixture record."""
    return MeasurementRecord(
        benchmark_id=benchmark_id,
        parameters=params,
        summary=Summary(mean=mean, error=error, confidence_low=mean - error,
                        confidence_high=mean + error, unit=unit),
    )


def scenario_group():
    """The four-record impl x size scenario."""
    records = [
        make_record("pkg.Bench.run", {"impl": "A", "size": "10"}, mean=1.0),
        make_record("pkg.Bench.run", {"impl": "A", "size": "100"}, mean=2.0),
        make_record("pkg.Bench.run", {"impl": "B", "size": "10"}, mean=3.0),
        make_record("pkg.Bench.run", {"impl": "B", "size": "100"}, mean=4.0),
    ]
    return group(records)["pkg.Bench.run"]


class TestEndToEndScenario:

    def test_default_pivot(self):
        g = scenario_group()
        assert g.short_name == "Bench.run"

        dataset = pivot(g, PlotConfiguration())
        assert dataset.axis_key == "size"
        assert dataset.series_keys == ("impl",)
        assert dataset.series_labels == ["A", "B"]
        assert dataset.axis_labels == ["10", "100"]
        assert dataset.cells[("A", "10")].mean == 1.0
        assert dataset.cells[("B", "100")].mean == 4.0
        assert dataset.unit == "ns/op"

    def test_filter(self):
        dataset = pivot(scenario_group(), PlotConfiguration(series_filter={"impl": "^A$"}))
        assert dataset.series_labels == ["A"]
        assert dataset.axis_labels == ["10", "100"]
        assert len(dataset) == 2

    def test_values_pass_through(self):
        records = [make_record("pkg.Bench.run", {"impl": "A", "size": "1"}, mean=1.23456789, error=0.0001)]
        cell = pivot(group(records)["pkg.Bench.run"]).cells[("A", "1")]
        assert cell.mean == 1.23456789
        assert cell.error == 0.0001
        assert cell.unit == "ns/op"


class TestAxisSelection:

    def three_key_group(self):
        records = [make_record("pkg.Bench.run", {"impl": "A", "size": "10", "threads": "1"})]
        return group(records)["pkg.Bench.run"]

    def test_default_is_second_key(self):
        assert resolve_axis_key(self.three_key_group(), PlotConfiguration()) == "size"
        dataset = pivot(self.three_key_group())
        assert dataset.axis_key == "size"
        assert dataset.series_keys == ("impl", "threads")

    def test_first_key_policy(self):
        dataset = pivot(self.three_key_group(), PlotConfiguration(), DefaultAxisPolicy.FIRST_KEY)
        assert dataset.axis_key == "impl"
        assert dataset.series_keys == ("size", "threads")

    def test_explicit_axis_key(self):
        dataset = pivot(self.three_key_group(), PlotConfiguration(axis_key="threads"))
        assert dataset.axis_key == "threads"
        assert dataset.series_labels == ["A - 10"]
        assert dataset.axis_labels == ["1"]

    def test_unknown_axis_key_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            pivot(self.three_key_group(), PlotConfiguration(axis_key="missing"))
        assert exc_info.value.key == "missing"
        assert exc_info.value.benchmark_id == "pkg.Bench.run"
        assert exc_info.value.available == ("impl", "size", "threads")

    def test_single_key_has_no_axis(self):
        records = [
            make_record("pkg.Bench.run", {"impl": "A"}, mean=1.0),
            make_record("pkg.Bench.run", {"impl": "B"}, mean=2.0),
        ]
        dataset = pivot(group(records)["pkg.Bench.run"])
        assert dataset.axis_key is None
        assert dataset.series_keys == ("impl",)
        assert dataset.axis_labels == [""]
        assert dataset.series_labels == ["A", "B"]
        assert dataset.get("B", "").mean == 2.0

    def test_no_keys(self):
        records = [make_record("pkg.Bench.run", {}, mean=5.0)]
        dataset = pivot(group(records)["pkg.Bench.run"])
        assert dataset.axis_key is None
        assert dataset.series_labels == [""]
        assert dataset.axis_labels == [""]
        assert dataset[("", "")].mean == 5.0


class TestLabels:

    def test_first_seen_not_sorted(self):
        records = [
            make_record("pkg.Bench.run", {"impl": "zeta", "size": "1000"}),
            make_record("pkg.Bench.run", {"impl": "alpha", "size": "2"}),
            make_record("pkg.Bench.run", {"impl": "zeta", "size": "2"}),
        ]
        dataset = pivot(group(records)["pkg.Bench.run"])
        assert dataset.series_labels == ["zeta", "alpha"]
        assert dataset.axis_labels == ["1000", "2"]

    def test_series_label_join(self):
        records = [make_record("pkg.Bench.run", {"impl": "A", "size": "10", "threads": "4", "mode": "x"})]
        dataset = pivot(group(records)["pkg.Bench.run"])
        assert dataset.series_labels == ["A - 4 - x"]

    def test_deterministic(self):
        g = scenario_group()
        first = pivot(g)
        second = pivot(g)
        assert first.axis_labels == second.axis_labels
        assert first.series_labels == second.series_labels
        assert first.cells == second.cells


class TestFiltering:

    def test_completeness(self):
        g = scenario_group()
        for config in (
            PlotConfiguration(),
            PlotConfiguration(series_filter={"impl": "B"}),
            PlotConfiguration(series_filter={"size": "^10$"}),
            PlotConfiguration(series_filter={"impl": "A", "size": "100"}),
        ):
            kept = [r for r in g.records if config.accepts(r.parameters)]
            assert len(pivot(g, config)) == len(kept)

    def test_filter_uses_search(self):
        dataset = pivot(scenario_group(), PlotConfiguration(series_filter={"size": "0{2}"}))
        assert dataset.axis_labels == ["100"]

    def test_filter_excluding_everything(self):
        dataset = pivot(scenario_group(), PlotConfiguration(series_filter={"impl": "^C$"}))
        assert len(dataset) == 0
        assert dataset.axis_labels == []
        assert dataset.series_labels == []

    def test_unknown_filter_key_raises(self):
        with pytest.raises(ConfigurationError):
            pivot(scenario_group(), PlotConfiguration(series_filter={"missing": ".*"}))


class TestDuplicateCells:

    def test_duplicate_raises(self):
        records = [
            make_record("pkg.Bench.run", {"impl": "A", "size": "10"}, mean=1.0),
            make_record("pkg.Bench.run", {"impl": "B", "size": "10"}, mean=2.0),
            make_record("pkg.Bench.run", {"impl": "A", "size": "10"}, mean=3.0),
        ]
        with pytest.raises(DuplicateCellError) as exc_info:
            pivot(group(records)["pkg.Bench.run"])
        error = exc_info.value
        assert error.series_label == "A"
        assert error.axis_label == "10"
        assert error.first_index == 0
        assert error.second_index == 2

    def test_filtered_out_duplicate_is_ignored(self):
        records = [
            make_record("pkg.Bench.run", {"impl": "A", "size": "10"}),
            make_record("pkg.Bench.run", {"impl": "A", "size": "10"}),
            make_record("pkg.Bench.run", {"impl": "B", "size": "10"}),
        ]
        dataset = pivot(group(records)["pkg.Bench.run"], PlotConfiguration(series_filter={"impl": "B"}))
        assert len(dataset) == 1


class TestPerParam:

    def test_split(self):
        records = [
            make_record("pkg.Bench.run", {"impl": "A", "size": "10", "threads": "1"}, mean=1.0),
            make_record("pkg.Bench.run", {"impl": "A", "size": "10", "threads": "2"}, mean=2.0),
            make_record("pkg.Bench.run", {"impl": "B", "size": "10", "threads": "1"}, mean=3.0),
        ]
        parts = pivot_per_param(group(records)["pkg.Bench.run"], PlotConfiguration(per_param="threads"))
        assert list(parts) == ["1", "2"]
        one = parts["1"]
        assert one.axis_key == "size"
        assert one.series_keys == ("impl",)
        assert one.series_labels == ["A", "B"]
        assert parts["2"].cells[("A", "10")].mean == 2.0

    def test_split_key_must_exist(self):
        with pytest.raises(ConfigurationError):
            pivot_per_param(scenario_group(), PlotConfiguration(per_param="threads"))

    def test_split_key_cannot_be_axis(self):
        with pytest.raises(ConfigurationError):
            pivot_per_param(scenario_group(), PlotConfiguration(per_param="size", axis_key="size"))


class TestArrays:

    def test_missing_cells_are_nan(self):
        records = [
            make_record("pkg.Bench.run", {"impl": "A", "size": "10"}, mean=1.0),
            make_record("pkg.Bench.run", {"impl": "B", "size": "100"}, mean=4.0),
        ]
        means, errors = pivot(group(records)["pkg.Bench.run"]).to_arrays()
        assert means.shape == (2, 2)
        assert means[0, 0] == 1.0
        assert means[1, 1] == 4.0
        assert math.isnan(means[0, 1])
        assert np.isnan(errors[1, 0])

    def test_series_view(self):
        dataset = pivot(scenario_group())
        assert list(dataset.series("B")) == ["10", "100"]
        assert dataset.series("B")["100"].mean == 4.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
