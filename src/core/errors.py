"""
Error taxonomy for the report pipeline.

Every error carries the benchmark it concerns plus a ``context`` dictionary
with the offending keys and values, so callers can print a diagnostic
without re-deriving what went wrong:

- ConsistencyError: records of one benchmark disagree on keys or unit
- ConfigurationError: a plot configuration does not fit a benchmark group
- DuplicateCellError: two records collapse onto the same pivot cell
- ResultFormatError: a results file entry cannot be decoded
"""

from typing import Any, Dict, Optional


class ReportError(Exception):
    """Base class for all errors raised while preparing a report."""

    def __init__(
        self,
        message: str,
        benchmark_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.benchmark_id = benchmark_id
        self.context = dict(context or {})
        super().__init__(str(self))

    def __str__(self) -> str:
        prefix = f"[{self.benchmark_id}] " if self.benchmark_id else ""
        if not self.context:
            return f"{prefix}{self.message}"
        details = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"{prefix}{self.message} ({details})"

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form used by the JSON report."""
        return {
            "type": type(self).__name__,
            "benchmark_id": self.benchmark_id,
            "message": self.message,
            "context": {k: _jsonable(v) for k, v in self.context.items()},
        }


class ConsistencyError(ReportError):
    """
    Raised when records sharing a benchmark id disagree on their parameter
    key set or on their measurement unit.
    """

    def __init__(
        self,
        benchmark_id: str,
        field: str,
        expected: Any,
        actual: Any,
        record_index: int,
    ):
        self.field = field
        self.expected = expected
        self.actual = actual
        self.record_index = record_index
        super().__init__(
            f"Inconsistent {field} between records",
            benchmark_id=benchmark_id,
            context={
                "field": field,
                "expected": expected,
                "actual": actual,
                "record_index": record_index,
            },
        )


class ConfigurationError(ReportError):
    """Raised when a plot configuration names keys a group does not have."""

    def __init__(
        self,
        message: str,
        benchmark_id: Optional[str] = None,
        key: Optional[str] = None,
        available: Optional[Any] = None,
    ):
        self.key = key
        self.available = tuple(available) if available is not None else None
        context: Dict[str, Any] = {}
        if key is not None:
            context["key"] = key
        if self.available is not None:
            context["available"] = list(self.available)
        super().__init__(message, benchmark_id=benchmark_id, context=context)


class DuplicateCellError(ReportError):
    """
    Raised when two records of one pivot map to the same
    (series label, axis label) pair, meaning the axis/series split does not
    tell them apart.
    """

    def __init__(
        self,
        benchmark_id: str,
        series_label: str,
        axis_label: str,
        first_index: int,
        second_index: int,
    ):
        self.series_label = series_label
        self.axis_label = axis_label
        self.first_index = first_index
        self.second_index = second_index
        super().__init__(
            "Two records map to the same pivot cell",
            benchmark_id=benchmark_id,
            context={
                "series_label": series_label,
                "axis_label": axis_label,
                "first_index": first_index,
                "second_index": second_index,
            },
        )


class ResultFormatError(ReportError):
    """Raised when a results file entry is missing fields or has bad types."""

    def __init__(self, message: str, entry_index: Optional[int] = None, benchmark_id: Optional[str] = None):
        self.entry_index = entry_index
        context = {"entry_index": entry_index} if entry_index is not None else {}
        super().__init__(message, benchmark_id=benchmark_id, context=context)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (frozenset, set)):
        return sorted(value)
    if isinstance(value, tuple):
        return list(value)
    return value
