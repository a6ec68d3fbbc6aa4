import json
import logging

from wealth_mcp.runtime.monitoring import ServerMetrics, log_tool_event


def test_metrics_snapshot_aggregates_calls() -> None:
    metrics = ServerMetrics(started_at=1.0)
    metrics.record("calculate_xirr", latency_ms=10.0, success=True)
    metrics.record("calculate_xirr", latency_ms=30.0, success=False)
    metrics.record("evaluate_goal", latency_ms=-5.0, success=True)
    snapshot = metrics.snapshot()
    assert snapshot.total_requests == 3
    assert abs(snapshot.error_rate - 1 / 3) < 1e-12
    assert abs(snapshot.avg_latency_ms - 40.0 / 3) < 1e-12
    assert snapshot.calls_by_tool == {"calculate_xirr": 2, "evaluate_goal": 1}
    assert snapshot.uptime_seconds > 0


def test_empty_metrics_snapshot() -> None:
    snapshot = ServerMetrics().snapshot()
    assert snapshot.total_requests == 0
    assert snapshot.error_rate == 0.0
    assert snapshot.avg_latency_ms == 0.0


def test_log_tool_event_emits_json(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="wealth_mcp.tools"):
        log_tool_event("diversification_score", latency_ms=2500.12345, success=True, warning="slow_response")
    record = next(record for record in caplog.records if record.name == "wealth_mcp.tools")
    event = json.loads(record.getMessage())
    assert event["tool"] == "diversification_score"
    assert event["latency_ms"] == 2500.123
    assert event["warning"] == "slow_response"
