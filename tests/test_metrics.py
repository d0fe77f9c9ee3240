"""Tests for the CloudWatch metrics client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from gong_mcp.services.metrics import MetricsClient


class TestMetricsRecording:
    """Verify that record_success / record_failure buffer the right data."""

    @patch.object(MetricsClient, "_start_flush_thread")
    def _make_client(self, _mock_thread, *, enabled: bool = True) -> MetricsClient:
        with patch.dict("os.environ", {"METRICS_ENABLED": str(enabled).lower()}):
            return MetricsClient()

    def test_record_success_appends_two_data_points(self):
        client = self._make_client()
        client.record_success("gong", "GET /v2/users", latency_ms=123.4)
        assert len(client._buffer) == 2
        names = {m["MetricName"] for m in client._buffer}
        assert names == {"ExternalAPI/RequestCount", "ExternalAPI/Latency"}

    def test_record_failure_appends_count_and_error(self):
        client = self._make_client()
        client.record_failure("gong", "POST /v2/calls/extensive", error_type="ConnectError")
        # no latency data point when latency is unknown
        assert len(client._buffer) == 2
        names = {m["MetricName"] for m in client._buffer}
        assert names == {"ExternalAPI/RequestCount", "ExternalAPI/ErrorCount"}

    def test_record_failure_with_latency_appends_three_data_points(self):
        client = self._make_client()
        client.record_failure(
            "gong", "POST /v2/calls/transcript",
            error_type="4xx", latency_ms=500.0,
        )
        assert len(client._buffer) == 3
        names = {m["MetricName"] for m in client._buffer}
        assert names == {
            "ExternalAPI/RequestCount",
            "ExternalAPI/ErrorCount",
            "ExternalAPI/Latency",
        }

    def test_success_dimensions_include_service_and_status(self):
        client = self._make_client()
        client.record_success("gong", "GET /v2/users", latency_ms=50.0)
        count_metric = next(
            m for m in client._buffer
            if m["MetricName"] == "ExternalAPI/RequestCount"
        )
        dim_map = {d["Name"]: d["Value"] for d in count_metric["Dimensions"]}
        assert dim_map["Service"] == "gong"
        assert dim_map["Status"] == "success"

    def test_latency_dimensions_include_operation(self):
        client = self._make_client()
        client.record_success("gong", "GET /v2/users", latency_ms=50.0)
        latency = next(m for m in client._buffer if m["MetricName"] == "ExternalAPI/Latency")
        dim_map = {d["Name"]: d["Value"] for d in latency["Dimensions"]}
        assert dim_map["Operation"] == "GET /v2/users"
        assert latency["Unit"] == "Milliseconds"

    def test_failure_dimensions_include_error_type(self):
        client = self._make_client()
        client.record_failure("gong", "GET /v2/users", error_type="5xx")
        error_metric = next(
            m for m in client._buffer
            if m["MetricName"] == "ExternalAPI/ErrorCount"
        )
        dim_map = {d["Name"]: d["Value"] for d in error_metric["Dimensions"]}
        assert dim_map["ErrorType"] == "5xx"

    def test_disabled_client_does_not_buffer(self):
        with patch.dict("os.environ", {"METRICS_ENABLED": "false"}):
            client = MetricsClient()
        for _ in range(1_000):
            client.record_success("gong", "GET /v2/users", latency_ms=10.0)
            client.record_failure("gong", "GET /v2/users", error_type="5xx", latency_ms=10.0)
        assert client._buffer == []


class TestMetricsFlush:
    """Verify flush behaviour with and without CloudWatch enabled."""

    def test_flush_when_disabled_does_not_call_boto3(self):
        with patch.dict("os.environ", {"METRICS_ENABLED": "false"}):
            client = MetricsClient()
        client.record_success("gong", "GET /v2/users", latency_ms=100.0)
        assert client.flush() == 0

    @patch.object(MetricsClient, "_start_flush_thread")
    def test_flush_clears_buffer(self, _mock_thread):
        with patch.dict("os.environ", {"METRICS_ENABLED": "true"}):
            client = MetricsClient()
        client._cw_client = MagicMock()
        client.record_success("gong", "GET /v2/users", latency_ms=100.0)
        assert len(client._buffer) == 2
        client.flush()
        assert len(client._buffer) == 0

    @patch.object(MetricsClient, "_start_flush_thread")
    def test_flush_when_enabled_calls_put_metric_data(self, _mock_thread):
        with patch.dict("os.environ", {"METRICS_ENABLED": "true"}):
            client = MetricsClient()

        mock_cw = MagicMock()
        client._cw_client = mock_cw

        client.record_success("gong", "GET /v2/users", latency_ms=100.0)
        sent = client.flush()

        assert sent == 2
        mock_cw.put_metric_data.assert_called_once()
        call_args = mock_cw.put_metric_data.call_args
        assert call_args[1]["Namespace"] == "GongMCP"
        assert len(call_args[1]["MetricData"]) == 2

    @patch.object(MetricsClient, "_start_flush_thread")
    def test_flush_empty_buffer_returns_zero(self, _mock_thread):
        with patch.dict("os.environ", {"METRICS_ENABLED": "true"}):
            client = MetricsClient()
        assert client.flush() == 0
