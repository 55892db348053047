"""Metrics collector tests."""

import pytest
from prometheus_client import CollectorRegistry

from appforge.monitoring import MetricsCollector


@pytest.fixture
def collector():
    return MetricsCollector(registry=CollectorRegistry())


def sample(collector, name, **labels):
    return collector.registry.get_sample_value(name, labels or None)


@pytest.mark.unit
def test_generation_counters(collector):
    collector.record_generation("success", 1.5)
    collector.record_generation("partial", 0.5)
    collector.record_generation("success", 2.0)

    assert sample(collector, "appforge_generation_requests_total", status="success") == 2
    assert sample(collector, "appforge_generation_requests_total", status="partial") == 1
    assert sample(collector, "appforge_generation_duration_seconds_count") == 3


@pytest.mark.unit
def test_target_and_fallback_counters(collector):
    collector.record_target("ios", "success")
    collector.record_target("android", "failure")
    collector.record_fallback("app_model")

    assert sample(collector, "appforge_target_outcomes_total", target="android", status="failure") == 1
    assert sample(collector, "appforge_fallbacks_total", stage="app_model") == 1


@pytest.mark.unit
def test_backend_metrics(collector):
    collector.record_backend_call("claude", "success", 0.2)
    collector.record_backend_tokens("claude", 100, 40)

    assert sample(collector, "appforge_backend_calls_total", backend="claude", status="success") == 1
    assert sample(collector, "appforge_backend_tokens_sum", backend="claude", type="input") == 100
    assert sample(collector, "appforge_backend_tokens_sum", backend="claude", type="output") == 40


@pytest.mark.unit
def test_measure_duration(collector):
    seen = []
    with collector.measure_duration(seen.append):
        pass
    assert len(seen) == 1 and seen[0] >= 0


@pytest.mark.unit
def test_exposition(collector):
    collector.record_error("BackendTransportError", "emitter.ios")
    text = collector.get_metrics().decode("utf-8")

    assert "appforge_errors_total" in text
    assert "appforge_uptime_seconds" in text
