import pytest

from ai_client.telemetry import SimpleReporter, TelemetryContext

pytestmark = pytest.mark.unit


class TestTelemetryContext:
    def test_disabled_by_default(self):
        reporter = SimpleReporter()
        tele = TelemetryContext(reporter)
        with tele("scope"):
            tele.metric("value", 1)
        assert reporter.timings == {}
        assert reporter.metrics == {}

    def test_no_reporters_means_no_op(self, monkeypatch):
        monkeypatch.setenv("AI_CLIENT_TELEMETRY", "1")
        assert TelemetryContext() is TelemetryContext()

    def test_nested_scopes(self, monkeypatch):
        monkeypatch.setenv("AI_CLIENT_TELEMETRY", "1")
        reporter = SimpleReporter()
        tele = TelemetryContext(reporter)

        with tele("client.generate_text", model="m"), tele("offload.upload"):
            tele.count("offloaded_parts", 2)

        assert "client.generate_text.offload.upload" in reporter.timings
        (_, meta), = reporter.timings["client.generate_text"]
        assert meta["model"] == "m"
        assert meta["failed"] is False
        (value, _), = reporter.metrics["client.generate_text.offload.upload.offloaded_parts"]
        assert value == 2

    def test_failed_scope_is_flagged(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "1")
        reporter = SimpleReporter()
        tele = TelemetryContext(reporter)

        with pytest.raises(RuntimeError), tele("boom"):
            raise RuntimeError("x")

        (_, meta), = reporter.timings["boom"]
        assert meta["failed"] is True

    def test_broken_reporter_does_not_break_caller(self, monkeypatch):
        monkeypatch.setenv("AI_CLIENT_TELEMETRY", "1")

        class Broken:
            def record_timing(self, *args, **kwargs):
                raise ValueError("nope")

            def record_metric(self, *args, **kwargs):
                raise ValueError("nope")

        tele = TelemetryContext(Broken())
        with tele("scope"):
            tele.metric("m", 1)

    def test_report_lists_scopes(self, monkeypatch):
        monkeypatch.setenv("AI_CLIENT_TELEMETRY", "1")
        reporter = SimpleReporter()
        tele = TelemetryContext(reporter)
        with tele("a"):
            tele.count("hits")
        report = reporter.get_report()
        assert "a" in report
        assert "a.hits" in report
