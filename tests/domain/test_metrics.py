"""
Tests for metrics domain models
"""

from datetime import UTC, datetime, timedelta

import pytest

from pulse.domain.metrics import MetricSnapshot, MetricsSnapshot, TrendData, percent_delta


class TestMetricSnapshot:
    """Test MetricSnapshot base class"""

    def test_naive_timestamp_becomes_utc(self):
        snapshot = MetricSnapshot(timestamp=datetime(2026, 2, 7, 10, 0, 0))
        assert snapshot.timestamp == datetime(2026, 2, 7, 10, 0, 0, tzinfo=UTC)

    def test_invalid_timestamp(self):
        """Test MetricSnapshot raises error for invalid timestamp"""
        with pytest.raises(TypeError, match="timestamp must be datetime"):
            MetricSnapshot(timestamp="2026-02-07")  # type: ignore[arg-type]


class TestMetricsSnapshotFromDict:
    """Test building snapshots from stored documents"""

    def test_full_document(self):
        snapshot = MetricsSnapshot.from_dict(
            {
                "timestamp": "2026-03-01T09:00:00.000Z",
                "overallScore": 72,
                "citations": {
                    "total": 14,
                    "byEngine": [{"engine": "ChatGPT", "citations": 9}, {"engine": "Gemini", "citations": 0}],
                },
                "prompts": {"total": 30, "byCategory": {"brand": 12, "product": 18}},
            }
        )

        assert snapshot.timestamp == datetime(2026, 3, 1, 9, 0, tzinfo=UTC)
        assert snapshot.overall_score == 72
        assert snapshot.citations.total == 14
        assert snapshot.citing_engines == 1
        assert snapshot.prompts.by_category == {"brand": 12, "product": 18}

    def test_missing_fields_fall_back(self):
        snapshot = MetricsSnapshot.from_dict({"date": "2026-03-01"})
        assert snapshot.overall_score == 0
        assert snapshot.citations.by_engine == ()
        assert snapshot.prompts.total == 0

    def test_non_numeric_score_falls_back_to_zero(self):
        snapshot = MetricsSnapshot.from_dict({"timestamp": "2026-03-01", "overallScore": "n/a"})
        assert snapshot.overall_score == 0

    def test_top_prompts_are_counted_per_category(self):
        snapshot = MetricsSnapshot.from_dict(
            {
                "timestamp": "2026-03-01",
                "prompts": {"topPrompts": [{"category": "brand"}, {"category": "brand"}, {"text": "x"}]},
            }
        )
        assert snapshot.prompts.by_category == {"brand": 2, "general": 1}

    def test_missing_timestamp_rejected(self):
        with pytest.raises(ValueError, match="missing a timestamp"):
            MetricsSnapshot.from_dict({"overallScore": 50})


class TestTrendData:
    """Test TrendData time series model"""

    @pytest.fixture
    def days(self):
        start = datetime(2026, 1, 1, tzinfo=UTC)
        return [start + timedelta(days=i) for i in range(4)]

    def test_mismatched_lengths(self, days):
        with pytest.raises(ValueError, match="must have same length"):
            TrendData(values=[1.0, 2.0], timestamps=days)

    def test_latest_previous_change(self, days):
        trend = TrendData(values=[50, 55, 61, 60], timestamps=days)
        assert trend.latest() == 60
        assert trend.previous() == 61
        assert trend.change() == -1

    def test_percent_change(self, days):
        trend = TrendData(values=[40, 50], timestamps=days[:2])
        assert trend.percent_change() == 25.0

    def test_get_range(self, days):
        trend = TrendData(values=[1, 2, 3, 4], timestamps=days, label="Score")
        assert trend.get_range(2).values == [3, 4]
        assert trend.get_range(10) is trend
        assert trend.get_range(0).values == []

    def test_slope_per_day(self, days):
        trend = TrendData(values=[10, 12, 14, 16], timestamps=days)
        assert trend.slope_per_day() == pytest.approx(2.0)

    def test_slope_needs_two_distinct_times(self, days):
        assert TrendData(values=[10], timestamps=days[:1]).slope_per_day() is None
        assert TrendData(values=[10, 20], timestamps=[days[0], days[0]]).slope_per_day() is None

    def test_direction(self, days):
        assert TrendData(values=[10, 12, 14, 16], timestamps=days).direction() == "improving"
        assert TrendData(values=[16, 14, 12, 10], timestamps=days).direction() == "worsening"
        assert TrendData(values=[50, 50, 50, 50], timestamps=days).direction() == "stable"
        assert TrendData(values=[16, 14, 12, 10], timestamps=days).direction(higher_is_better=False) == "improving"


class TestPercentDelta:
    def test_no_previous_is_no_trend(self):
        assert percent_delta(50, None) is None

    def test_zero_previous_is_no_trend(self):
        assert percent_delta(50, 0) is None

    @pytest.mark.parametrize("value", [1, 37, 99.5])
    def test_unchanged_is_zero(self, value):
        assert percent_delta(value, value) == 0.0

    def test_rounds_to_one_decimal(self):
        assert percent_delta(2, 3) == -33.3
