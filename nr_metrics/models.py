"""Metric data models: SDK-side descriptors and points, New Relic-side records"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


class InstrumentKind(Enum):
    """Instrument kinds the adapter knows how to convert"""
    MONOTONIC_LONG = "monotonic_long"
    MONOTONIC_DOUBLE = "monotonic_double"
    NON_MONOTONIC_LONG = "non_monotonic_long"
    NON_MONOTONIC_DOUBLE = "non_monotonic_double"
    SUMMARY = "summary"


@dataclass(frozen=True)
class MetricDescriptor:
    """Describes a metric stream as reported by the instrumentation SDK"""
    name: str
    description: str = ""
    unit: str = "1"
    instrument_kind: Optional[InstrumentKind] = None
    labels: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LongPoint:
    timestamp_nanos: int
    value: int
    labels: Dict[str, Any] = field(default_factory=dict)
    start_nanos: int = 0


@dataclass(frozen=True)
class DoublePoint:
    timestamp_nanos: int
    value: float
    labels: Dict[str, Any] = field(default_factory=dict)
    start_nanos: int = 0


@dataclass(frozen=True)
class ValueAtPercentile:
    percentile: float
    value: float


@dataclass(frozen=True)
class SummaryPoint:
    """Summary measurement; min/max are carried as the 0th/100th percentiles"""
    start_nanos: int
    end_nanos: int
    count: int
    sum: float
    percentile_values: Tuple[ValueAtPercentile, ...] = ()
    labels: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Accept any iterable of samples but keep the record immutable
        object.__setattr__(self, "percentile_values", tuple(self.percentile_values))


DataPoint = Union[LongPoint, DoublePoint, SummaryPoint]


def _freeze(attributes: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(attributes or {}))


@dataclass(frozen=True)
class Count:
    """Interval count, sent as a New Relic count metric"""
    name: str
    value: Union[int, float]
    start_time_ms: int
    end_time_ms: int
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "attributes", _freeze(self.attributes))


@dataclass(frozen=True)
class Gauge:
    """Point-in-time value, sent as a New Relic gauge metric"""
    name: str
    value: Union[int, float]
    timestamp_ms: int
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "attributes", _freeze(self.attributes))


@dataclass(frozen=True)
class Summary:
    """Pre-aggregated distribution, sent as a New Relic summary metric"""
    name: str
    count: int
    sum: float
    min: float
    max: float
    start_time_ms: int
    end_time_ms: int
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "attributes", _freeze(self.attributes))


Metric = Union[Count, Gauge, Summary]


@dataclass
class MetricStream:
    """One descriptor with the points collected for it during an export cycle"""
    descriptor: MetricDescriptor
    instrument_kind: InstrumentKind
    points: List[DataPoint]
    library_info: Optional[Any] = None

    def __post_init__(self):
        # Ensure points is never None
        if self.points is None:
            self.points = []
