"""
Unit tests for Prometheus metrics.
"""

import asyncio

import pytest

from src.common.metrics import (
    collections_generated_total,
    conversion_duration_seconds,
    conversions_total,
    files_stored_total,
    get_metrics,
    get_metrics_content_type,
    tables_generated_total,
    track_conversion_time,
)


class TestMetricsCounters:
    """Tests for Prometheus counter metrics."""

    def test_conversions_total_increments(self):
        """Conversions counter should increment."""
        initial = conversions_total.labels(target="sql", status="success")._value.get()

        conversions_total.labels(target="sql", status="success").inc()

        final = conversions_total.labels(target="sql", status="success")._value.get()
        assert final > initial

    def test_generated_counters_increment(self):
        tables = tables_generated_total._value.get()
        collections = collections_generated_total._value.get()

        tables_generated_total.inc(3)
        collections_generated_total.inc()

        assert tables_generated_total._value.get() == tables + 3
        assert collections_generated_total._value.get() == collections + 1

    def test_files_stored_total_increments(self):
        initial = files_stored_total.labels(category="conversion")._value.get()

        files_stored_total.labels(category="conversion").inc()

        assert files_stored_total.labels(category="conversion")._value.get() == initial + 1


class TestTrackConversionTime:
    """Tests for the timing decorator."""

    def test_sync_success(self):
        counter = conversions_total.labels(target="unit_sync", status="success")
        initial = counter._value.get()

        @track_conversion_time("unit_sync")
        def work(x):
            return x * 2

        assert work(21) == 42
        assert counter._value.get() == initial + 1

    def test_sync_failure(self):
        counter = conversions_total.labels(target="unit_fail", status="failure")
        initial = counter._value.get()

        @track_conversion_time("unit_fail")
        def work():
            raise ValueError("nope")

        with pytest.raises(ValueError):
            work()

        assert counter._value.get() == initial + 1

    def test_async_success(self):
        counter = conversions_total.labels(target="unit_async", status="success")
        initial = counter._value.get()

        @track_conversion_time("unit_async")
        async def work():
            return "done"

        assert asyncio.run(work()) == "done"
        assert counter._value.get() == initial + 1

    def test_duration_observed(self):
        @track_conversion_time("unit_hist")
        def work():
            return None

        work()

        output = get_metrics().decode("utf-8")
        assert 'conversion_duration_seconds_count{target="unit_hist"} 1.0' in output
        assert conversion_duration_seconds.labels(target="unit_hist") is not None


class TestMetricsExport:
    """Tests for metrics export."""

    def test_get_metrics_returns_prometheus_text(self):
        output = get_metrics()

        assert isinstance(output, bytes)
        assert b"conversions_total" in output
        assert b"tables_generated_total" in output

    def test_content_type(self):
        assert "text/plain" in get_metrics_content_type()
