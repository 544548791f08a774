"""Tests for the monitoring module."""

import io
import json

from tts_switchboard.monitoring import (
    Counter,
    Histogram,
    LogLevel,
    MetricsCollector,
    StructuredLogger,
    configure_logging,
    get_logger,
)


class TestCounter:
    """Tests for Counter metric."""

    def test_increment(self):
        counter = Counter("test_counter")
        counter.inc()
        counter.inc(2)
        assert counter.get() == 3

    def test_labels(self):
        counter = Counter("calls", labels=["engine"])
        counter.inc(engine="azure")
        counter.inc(engine="azure")
        counter.inc(engine="mock")

        assert counter.get(engine="azure") == 2
        assert counter.get(engine="openai") == 0
        assert counter.total() == 3
        assert sorted(labels["engine"] for labels, _ in counter.values()) == ["azure", "mock"]


class TestHistogram:
    """Tests for Histogram metric."""

    def test_stats(self):
        histogram = Histogram("latency", buckets=[10, 100])
        for value in (5, 50, 500):
            histogram.observe(value, path="remote")

        stats = histogram.get_stats(path="remote")
        assert stats["count"] == 3
        assert stats["sum"] == 555
        assert stats["p50"] == 50

    def test_empty_stats(self):
        assert Histogram("latency").get_stats()["count"] == 0


class TestMetricsCollector:
    """Tests for MetricsCollector."""

    def test_snapshot(self):
        metrics = MetricsCollector()
        metrics.record_remote_call("tts", engine="azure")
        metrics.record_in_process_call("voices", engine="mock")
        metrics.record_fallback("mock", "server")
        metrics.record_mode_fallback("browser", "server")
        metrics.record_error("RemoteCallFailed")
        metrics.record_synthesis(42.0, "remote")

        snapshot = metrics.snapshot()
        assert snapshot["remote_calls"] == 1
        assert snapshot["in_process_calls"] == 1
        assert snapshot["fallbacks"] == 1
        assert snapshot["mode_fallbacks"] == 1
        assert snapshot["errors"] == {"total": 1, "by_type": {"RemoteCallFailed": 1}}
        assert snapshot["latency"]["remote"]["count"] == 1


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_json_output(self):
        output = io.StringIO()
        events = StructuredLogger("test", output=output)

        events.synthesis_retry("mock", "server", previous_mode="browser")

        record = json.loads(output.getvalue())
        assert record["event"] == "synthesis_retry"
        assert record["level"] == "info"
        assert record["mode"] == "server"
        assert record["previous_mode"] == "browser"

    def test_level_filter(self):
        output = io.StringIO()
        events = StructuredLogger("test", level=LogLevel.WARNING, output=output)

        events.synthesis_start("Hello")
        assert output.getvalue() == ""

        events.mode_fallback("browser", "server", environment="server")
        assert "mode_fallback" in output.getvalue()

    def test_bind_adds_context(self):
        output = io.StringIO()
        events = StructuredLogger("test", output=output).bind(engine="azure")

        events.info("custom", "hello", extra=1)

        record = json.loads(output.getvalue())
        assert record["engine"] == "azure"
        assert record["extra"] == 1

    def test_synthesis_error_records_type(self):
        output = io.StringIO()
        StructuredLogger("test", output=output).synthesis_error(ValueError("bad"))

        record = json.loads(output.getvalue())
        assert record["error_type"] == "ValueError"
        assert record["message"] == "bad"

    def test_human_format(self):
        output = io.StringIO()
        events = StructuredLogger("test", output=output, json_format=False)

        events.warning("slow", "took a while", ms=900)

        line = output.getvalue()
        assert "[WARNING] [slow] took a while" in line
        assert "(ms=900)" in line

    def test_configure_logging(self):
        output = io.StringIO()
        events = configure_logging("error", output=output)
        assert get_logger() is events
        assert events.level == LogLevel.ERROR
