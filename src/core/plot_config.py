"""
Plot configuration policy objects and their registry.

A PlotConfiguration says how one benchmark group is pivoted and drawn:
which records to keep, which parameter goes on the axis, and the chart
style. Configurations are declared per benchmark class or per benchmark
method in a PlotRegistry that the caller owns and passes in.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Pattern

from .errors import ConfigurationError
from .grouping import class_name_for


class ChartKind(Enum):
    BARS = "bars"
    LINES = "lines"


class Orientation(Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class DefaultAxisPolicy(Enum):
    """Which parameter key becomes the axis when none is configured."""
    FIRST_KEY = "first"
    SECOND_KEY = "second"

    @property
    def index(self) -> int:
        return 0 if self is DefaultAxisPolicy.FIRST_KEY else 1


def _parse_enum(enum_cls, value: Any, option: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(
            f"Invalid value {value!r} for '{option}' (expected one of: {choices})",
            key=option,
        )


def _compile_filters(filters: Optional[Mapping[str, Any]]) -> Mapping[str, Pattern]:
    compiled: Dict[str, Pattern] = {}
    for key, pattern in (filters or {}).items():
        if isinstance(pattern, re.Pattern):
            compiled[key] = pattern
            continue
        try:
            compiled[key] = re.compile(str(pattern))
        except re.error as e:
            raise ConfigurationError(
                f"Invalid filter pattern {pattern!r}: {e}", key=key
            )
    return MappingProxyType(compiled)


@dataclass(frozen=True)
class PlotConfiguration:
    """
    Immutable policy controlling one pivot.

    ``series_filter`` maps a parameter key to a regular expression; strings
    are compiled on construction. A record is kept only if every pattern
    matches (re.search) its value for that key.
    """
    series_filter: Mapping[str, Pattern] = field(default_factory=dict)
    axis_key: Optional[str] = None
    chart_kind: ChartKind = ChartKind.BARS
    orientation: Orientation = Orientation.VERTICAL
    log_scale: bool = False
    per_param: Optional[str] = None
    title: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "series_filter", _compile_filters(self.series_filter))
        object.__setattr__(self, "chart_kind", _parse_enum(ChartKind, self.chart_kind, "type"))
        object.__setattr__(
            self, "orientation", _parse_enum(Orientation, self.orientation, "orientation")
        )

    def __hash__(self):
        return hash((
            # Sorted: equality ignores filter order
            tuple(sorted((k, p.pattern) for k, p in self.series_filter.items())),
            self.axis_key,
            self.chart_kind,
            self.orientation,
            self.log_scale,
            self.per_param,
            self.title,
        ))

    def __eq__(self, other):
        if not isinstance(other, PlotConfiguration):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def accepts(self, parameters: Mapping[str, str]) -> bool:
        """True if the parameter values pass every series filter."""
        for key, pattern in self.series_filter.items():
            value = parameters.get(key)
            if value is None or pattern.search(value) is None:
                return False
        return True

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PlotConfiguration":
        """
        Create a configuration from declarative data.

        Recognized keys: axis, filters, type, orientation, log_scale,
        per_param, title. Missing keys keep their defaults.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Plot declaration must be a mapping, got {type(data).__name__}"
            )

        unknown = set(data) - _DECLARATION_KEYS
        if unknown:
            raise ConfigurationError(
                f"Unknown plot option(s): {', '.join(sorted(unknown))}",
                available=sorted(_DECLARATION_KEYS),
            )

        filters = data.get("filters") or {}
        if not isinstance(filters, dict):
            raise ConfigurationError("'filters' must map parameter keys to patterns", key="filters")

        return cls(
            series_filter=filters,
            axis_key=data.get("axis") or None,
            chart_kind=data.get("type", ChartKind.BARS),
            orientation=data.get("orientation", Orientation.VERTICAL),
            log_scale=bool(data.get("log_scale", False)),
            per_param=data.get("per_param") or None,
            title=data.get("title") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "axis": self.axis_key,
            "filters": {k: p.pattern for k, p in self.series_filter.items()},
            "type": self.chart_kind.value,
            "orientation": self.orientation.value,
            "log_scale": self.log_scale,
            "per_param": self.per_param,
            "title": self.title,
        }


_DECLARATION_KEYS = {"axis", "filters", "type", "orientation", "log_scale", "per_param", "title"}


class PlotRegistry:
    """
    Plot declarations per benchmark class and per benchmark method.

    The registry is built once by a configuration loader and read by
    resolve_configurations(); it holds no lookups of its own.
    """

    def __init__(self):
        self._per_class: Dict[str, List[PlotConfiguration]] = {}
        self._per_method: Dict[str, List[PlotConfiguration]] = {}

    def register_class(self, class_name: str, configurations: Iterable[PlotConfiguration]) -> None:
        self._per_class.setdefault(class_name, []).extend(configurations)

    def register_method(self, benchmark_id: str, configurations: Iterable[PlotConfiguration]) -> None:
        self._per_method.setdefault(benchmark_id, []).extend(configurations)

    def for_class(self, class_name: str) -> List[PlotConfiguration]:
        return list(self._per_class.get(class_name, []))

    def for_method(self, benchmark_id: str) -> List[PlotConfiguration]:
        return list(self._per_method.get(benchmark_id, []))

    def __len__(self) -> int:
        return sum(len(c) for c in self._per_class.values()) + sum(
            len(c) for c in self._per_method.values()
        )


def resolve_configurations(
    benchmark_id: str, registry: Optional[PlotRegistry] = None
) -> List[PlotConfiguration]:
    """
    Plot configurations for a benchmark.

    Class-level declarations come first, method-level ones after them, so a
    renderer that keeps only the last plot shows the most specific one.

    Args:
        benchmark_id: Fully-qualified benchmark id ("pkg.Class.method")
        registry: Declarations to read; None behaves like an empty registry

    Returns:
        Declared configurations, or a single default PlotConfiguration
    """
    configurations: List[PlotConfiguration] = []
    if registry is not None:
        configurations.extend(registry.for_class(class_name_for(benchmark_id)))
        configurations.extend(registry.for_method(benchmark_id))

    if not configurations:
        configurations.append(PlotConfiguration())
    return configurations
