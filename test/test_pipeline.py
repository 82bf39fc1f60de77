"""
Tests for report preparation across groups and plot configurations.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.errors import ConfigurationError, ConsistencyError, DuplicateCellError
from core.pipeline import prepare_report
from core.plot_config import DefaultAxisPolicy, PlotConfiguration, PlotRegistry
from core.records import MeasurementRecord, Summary


def make_record(benchmark_id: str, params: dict, mean: float = 1.0, unit: str = "ns/op") -> MeasurementRecord:
    """Create a fixture record."""
    return MeasurementRecord(
        benchmark_id=benchmark_id,
        parameters=params,
        summary=Summary(mean=mean, error=0.0, confidence_low=mean,
                        confidence_high=mean, unit=unit),
    )


def mixed_records() -> list:
    return [
        make_record("pkg.Bench.run", {"impl": "A", "size": "10"}, 1.0),
        make_record("pkg.Other.go", {"n": "1"}, 5.0),
        make_record("pkg.Bench.run", {"impl": "B", "size": "10"}, 2.0),
        make_record("pkg.Broken.x", {"n": "1"}, unit="ns/op"),
        make_record("pkg.Broken.x", {"n": "2"}, unit="ms/op"),
    ]


class TestPrepareReport:

    def test_groups_in_first_seen_order(self):
        content = prepare_report(mixed_records())
        assert [r.group.benchmark_id for r in content.groups] == ["pkg.Bench.run", "pkg.Other.go"]

    def test_inconsistent_group_rejected(self):
        content = prepare_report(mixed_records())
        assert len(content.rejected) == 1
        assert isinstance(content.rejected[0], ConsistencyError)
        assert content.rejected[0].benchmark_id == "pkg.Broken.x"
        assert content.errors == content.rejected

    def test_strict_raises(self):
        with pytest.raises(ConsistencyError):
            prepare_report(mixed_records(), strict=True)

    def test_one_default_plot_per_group(self):
        content = prepare_report(mixed_records())
        for report in content.groups:
            assert len(report.plots) == 1
            assert report.plots[0].config == PlotConfiguration()
            assert report.plots[0].ok

        bench = content.groups[0].datasets[0]
        assert bench.axis_key == "size"
        assert bench.series_labels == ["A", "B"]

    def test_policy_passed_through(self):
        content = prepare_report(mixed_records(), policy=DefaultAxisPolicy.FIRST_KEY)
        assert content.groups[0].datasets[0].axis_key == "impl"

    def test_bad_configuration_only_fails_its_plot(self):
        registry = PlotRegistry()
        registry.register_class("pkg.Bench", [PlotConfiguration(axis_key="threads")])
        registry.register_method("pkg.Bench.run", [PlotConfiguration(axis_key="impl")])

        content = prepare_report(mixed_records(), registry=registry)
        bench = content.groups[0]
        assert len(bench.plots) == 2
        assert isinstance(bench.plots[0].error, ConfigurationError)
        assert bench.plots[1].ok
        assert bench.plots[1].dataset.axis_key == "impl"

        # Other groups are unaffected
        assert content.groups[1].plots[0].ok
        assert len(content.errors) == 2

    def test_duplicate_cell_only_fails_its_plot(self):
        records = [
            make_record("pkg.Bench.run", {"impl": "A"}, 1.0),
            make_record("pkg.Bench.run", {"impl": "A"}, 2.0),
            make_record("pkg.Other.go", {"n": "1"}, 5.0),
        ]
        content = prepare_report(records)
        assert isinstance(content.groups[0].plots[0].error, DuplicateCellError)
        assert content.groups[1].plots[0].ok

    def test_per_param_plots(self):
        records = [
            make_record("pkg.Bench.run", {"impl": "A", "size": "10", "threads": "1"}),
            make_record("pkg.Bench.run", {"impl": "A", "size": "10", "threads": "2"}),
        ]
        registry = PlotRegistry()
        registry.register_method("pkg.Bench.run", [PlotConfiguration(per_param="threads")])

        content = prepare_report(records, registry=registry)
        plots = content.groups[0].plots
        assert [p.part for p in plots] == ["1", "2"]
        assert all(len(p.dataset) == 1 for p in plots)

    def test_completeness_over_all_groups(self):
        content = prepare_report(mixed_records())
        for report in content.groups:
            assert sum(len(d) for d in report.datasets) == len(report.group)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
