"""Tests for converting data points into New Relic metrics"""
from unittest.mock import Mock

import pytest

from nr_metrics.adapter import (
    MetricPointAdapter,
    MissingPercentileBoundaryError,
    PointConversionError,
    UnsupportedInstrumentKindError,
    nanos_to_millis,
    stream_key,
)
from nr_metrics.attributes import SERVICE_NAME
from nr_metrics.models import (
    Count,
    DoublePoint,
    Gauge,
    InstrumentKind,
    LongPoint,
    MetricDescriptor,
    Summary,
    SummaryPoint,
    ValueAtPercentile,
)
from nr_metrics.time_tracker import TimeTracker


def millis_to_nanos(millis):
    return millis * 1_000_000


def descriptor(kind):
    return MetricDescriptor("metricName", "metricDescription", "units", kind, {"commonKey": "commonValue"})


class TestMetricPointAdapter:
    """Test point conversion for every instrument kind"""

    def setup_method(self):
        """Setup test fixtures"""
        self.time_tracker = Mock(spec=TimeTracker)
        self.time_tracker.get_previous_time.return_value = millis_to_nanos(9_000)
        self.adapter = MetricPointAdapter(self.time_tracker)
        self.common_attributes = {SERVICE_NAME: "fooService"}
        self.expected_attributes = {SERVICE_NAME: "fooService", "specificKey": "specificValue"}

    def test_long_point(self):
        point = LongPoint(millis_to_nanos(10_000), 123, {"specificKey": "specificValue"}, start_nanos=100)

        result = self.adapter.build_metrics_from_point(
            descriptor(InstrumentKind.MONOTONIC_LONG), InstrumentKind.MONOTONIC_LONG, self.common_attributes, point
        )

        assert result == [Count("metricName", 123, 9_000, 10_000, self.expected_attributes)]

    def test_long_point_non_monotonic(self):
        point = LongPoint(millis_to_nanos(10_000), 123, {"specificKey": "specificValue"})

        result = self.adapter.build_metrics_from_point(
            descriptor(InstrumentKind.NON_MONOTONIC_LONG), InstrumentKind.NON_MONOTONIC_LONG,
            self.common_attributes, point
        )

        assert result == [Gauge("metricName", 123, 10_000, self.expected_attributes)]
        self.time_tracker.get_previous_time.assert_not_called()

    def test_double_point(self):
        point = DoublePoint(millis_to_nanos(10_000), 123.55, {"specificKey": "specificValue"})

        result = self.adapter.build_metrics_from_point(
            descriptor(InstrumentKind.MONOTONIC_DOUBLE), InstrumentKind.MONOTONIC_DOUBLE, self.common_attributes, point
        )

        assert result == [Count("metricName", 123.55, 9_000, 10_000, self.expected_attributes)]

    def test_double_point_non_monotonic(self):
        point = DoublePoint(millis_to_nanos(10_000), 123.55, {"specificKey": "specificValue"})

        result = self.adapter.build_metrics_from_point(
            descriptor(InstrumentKind.NON_MONOTONIC_DOUBLE), InstrumentKind.NON_MONOTONIC_DOUBLE,
            self.common_attributes, point
        )

        assert result == [Gauge("metricName", 123.55, 10_000, self.expected_attributes)]

    def test_summary_point(self):
        point = SummaryPoint(
            start_nanos=millis_to_nanos(9_000),
            end_nanos=millis_to_nanos(10_000),
            count=200,
            sum=123.55,
            percentile_values=[ValueAtPercentile(0.0, 5.5), ValueAtPercentile(100.0, 100.01)],
            labels={"specificKey": "specificValue"},
        )

        result = self.adapter.build_metrics_from_point(
            descriptor(InstrumentKind.SUMMARY), InstrumentKind.SUMMARY, self.common_attributes, point
        )

        assert result == [Summary("metricName", 200, 123.55, 5.5, 100.01, 9_000, 10_000, self.expected_attributes)]
        self.time_tracker.get_previous_time.assert_not_called()

    def test_summary_boundaries_found_among_other_percentiles(self):
        point = SummaryPoint(
            start_nanos=0,
            end_nanos=millis_to_nanos(1),
            count=3,
            sum=6.0,
            percentile_values=[ValueAtPercentile(50.0, 2.0), ValueAtPercentile(100.0, 3.0), ValueAtPercentile(0.0, 1.0)],
        )

        [summary] = self.adapter.build_metrics_from_point(
            descriptor(InstrumentKind.SUMMARY), InstrumentKind.SUMMARY, {}, point
        )

        assert summary.min == 1.0
        assert summary.max == 3.0

    @pytest.mark.parametrize("samples, missing", [
        ([ValueAtPercentile(100.0, 3.0)], 0.0),
        ([ValueAtPercentile(0.0, 1.0), ValueAtPercentile(99.0, 3.0)], 100.0),
    ])
    def test_summary_missing_boundary(self, samples, missing):
        point = SummaryPoint(0, 1, 1, 1.0, samples)

        with pytest.raises(MissingPercentileBoundaryError) as excinfo:
            self.adapter.build_metrics_from_point(descriptor(InstrumentKind.SUMMARY), InstrumentKind.SUMMARY, {}, point)

        assert excinfo.value.percentile == missing
        assert "missing percentile boundary" in str(excinfo.value)

    def test_point_labels_override_common_attributes(self):
        point = LongPoint(millis_to_nanos(10_000), 1, {SERVICE_NAME: "pointService"})

        [gauge] = self.adapter.build_metrics_from_point(
            descriptor(InstrumentKind.NON_MONOTONIC_LONG), InstrumentKind.NON_MONOTONIC_LONG,
            self.common_attributes, point
        )

        assert gauge.attributes[SERVICE_NAME] == "pointService"
        assert self.common_attributes == {SERVICE_NAME: "fooService"}

    def test_descriptor_labels_are_not_exported(self):
        point = LongPoint(millis_to_nanos(10_000), 1)

        [gauge] = self.adapter.build_metrics_from_point(
            descriptor(InstrumentKind.NON_MONOTONIC_LONG), InstrumentKind.NON_MONOTONIC_LONG,
            self.common_attributes, point
        )

        assert "commonKey" not in gauge.attributes

    def test_output_attributes_are_independent(self):
        labels = {"specificKey": "specificValue"}
        point = LongPoint(millis_to_nanos(10_000), 1, labels)

        [gauge] = self.adapter.build_metrics_from_point(
            descriptor(InstrumentKind.NON_MONOTONIC_LONG), InstrumentKind.NON_MONOTONIC_LONG,
            self.common_attributes, point
        )
        labels["specificKey"] = "changed"
        self.common_attributes["late"] = "value"

        assert gauge.attributes == self.expected_attributes
        with pytest.raises(TypeError):
            gauge.attributes["new"] = "value"

    def test_unsupported_instrument_kind(self):
        point = LongPoint(1, 1)
        with pytest.raises(UnsupportedInstrumentKindError):
            self.adapter.build_metrics_from_point(descriptor(None), "histogram", {}, point)

    def test_every_instrument_kind_has_a_rule(self):
        assert set(self.adapter._builders) == set(InstrumentKind)

    def test_mismatched_point_type(self):
        point = SummaryPoint(0, 1, 1, 1.0, [ValueAtPercentile(0.0, 1.0), ValueAtPercentile(100.0, 1.0)])
        with pytest.raises(PointConversionError):
            self.adapter.build_metrics_from_point(
                descriptor(InstrumentKind.MONOTONIC_LONG), InstrumentKind.MONOTONIC_LONG, {}, point
            )

    def test_count_records_stream_boundary(self):
        point = LongPoint(millis_to_nanos(10_000), 5, {"route": "/a"})

        self.adapter.build_metrics_from_point(
            descriptor(InstrumentKind.MONOTONIC_LONG), InstrumentKind.MONOTONIC_LONG, {}, point
        )

        key = stream_key("metricName", {"route": "/a"})
        self.time_tracker.get_previous_time.assert_called_once_with(key)
        self.time_tracker.record_stream.assert_called_once_with(key, millis_to_nanos(10_000))


class TestCountIntervals:
    """Test interval start values with a real tracker"""

    def test_streams_get_their_own_interval_start(self):
        tracker = TimeTracker(clock=Mock(side_effect=[millis_to_nanos(1_000), millis_to_nanos(5_000)]))
        adapter = MetricPointAdapter(tracker)
        kind = InstrumentKind.MONOTONIC_LONG
        counter_a = MetricDescriptor("a", instrument_kind=kind)
        counter_b = MetricDescriptor("b", instrument_kind=kind)

        [first_a] = adapter.build_metrics_from_point(counter_a, kind, {}, LongPoint(millis_to_nanos(2_000), 1))
        [first_b] = adapter.build_metrics_from_point(counter_b, kind, {}, LongPoint(millis_to_nanos(3_000), 1))
        tracker.tick()
        [second_a] = adapter.build_metrics_from_point(counter_a, kind, {}, LongPoint(millis_to_nanos(6_000), 1))
        [second_b] = adapter.build_metrics_from_point(counter_b, kind, {}, LongPoint(millis_to_nanos(6_500), 1))

        assert (first_a.start_time_ms, first_b.start_time_ms) == (1_000, 1_000)
        assert (second_a.start_time_ms, second_a.end_time_ms) == (2_000, 6_000)
        assert (second_b.start_time_ms, second_b.end_time_ms) == (3_000, 6_500)

    def test_same_name_different_labels_are_separate_streams(self):
        assert stream_key("m", {"a": 1}) != stream_key("m", {"a": 2})
        assert stream_key("m", {"a": 1, "b": 2}) == stream_key("m", {"b": 2, "a": 1})

    def test_nanos_to_millis_floors(self):
        assert nanos_to_millis(1_999_999) == 1
