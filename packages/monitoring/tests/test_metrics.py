from typing import Dict, List
from unittest.mock import patch

import pytest
from prometheus_client import CollectorRegistry

from monitoring.metrics import ThreatMetricsRegistry

THREAT_METRIC = "google_safebrowsing_threat_matches"


@pytest.fixture
def metrics() -> ThreatMetricsRegistry:
    return ThreatMetricsRegistry(registry=CollectorRegistry())


def gather_samples(registry: CollectorRegistry, name: str) -> Dict[str, float]:
    samples = {}
    for metric in registry.collect():
        for sample in metric.samples:
            if sample.name == name:
                samples[sample.labels["domain"]] = sample.value
    return samples


def test_gauge_for_is_idempotent(metrics: ThreatMetricsRegistry) -> None:
    first = metrics.gauge_for("a.example.com")
    second = metrics.gauge_for("a.example.com")

    assert first is second
    assert metrics.registered_domains() == ["a.example.com"]
    assert metrics.value_for("a.example.com") == pytest.approx(0.0)


def test_value_for_unknown_domain(metrics: ThreatMetricsRegistry) -> None:
    assert metrics.value_for("never-seen.com") is None


def test_set_all_publishes_status(metrics: ThreatMetricsRegistry) -> None:
    metrics.set_all({"a.example.com": False, "b.example.com": True})

    assert gather_samples(metrics.registry, THREAT_METRIC) == {
        "a.example.com": pytest.approx(0.0),
        "b.example.com": pytest.approx(1.0),
    }


def test_set_all_shrinking_zeroes_missing_domains(metrics: ThreatMetricsRegistry) -> None:
    metrics.set_all({"a.com": True, "b.com": True, "c.com": True})
    metrics.set_all({"b.com": True, "d.com": False})

    assert metrics.value_for("a.com") == pytest.approx(0.0)
    assert metrics.value_for("b.com") == pytest.approx(1.0)
    assert metrics.value_for("c.com") == pytest.approx(0.0)
    assert metrics.value_for("d.com") == pytest.approx(0.0)
    assert metrics.registered_domains() == ["a.com", "b.com", "c.com", "d.com"]


def test_registered_domains_never_shrink(metrics: ThreatMetricsRegistry) -> None:
    seen: List[int] = []
    for status in ({"a.com": True}, {}, {"b.com": False}, {}):
        metrics.set_all(status)
        seen.append(len(metrics.registered_domains()))

    assert seen == [1, 1, 2, 2]
    assert set(gather_samples(metrics.registry, THREAT_METRIC)) == {"a.com", "b.com"}


def test_set_all_empty_clears_everything(metrics: ThreatMetricsRegistry) -> None:
    metrics.set_all({"a.com": True, "b.com": True})
    metrics.set_all({})

    assert gather_samples(metrics.registry, THREAT_METRIC) == {
        "a.com": pytest.approx(0.0),
        "b.com": pytest.approx(0.0),
    }


def test_mark_success_and_failure(metrics: ThreatMetricsRegistry) -> None:
    metrics.mark_success("threat_matches", timestamp=1_700_000_000.0)
    metrics.mark_failure("ingresses")
    metrics.mark_failure("ingresses")

    registry = metrics.registry
    assert registry.get_sample_value(
        "google_safebrowsing_last_refresh_success_timestamp_seconds",
        {"loop": "threat_matches"},
    ) == pytest.approx(1_700_000_000.0)
    assert registry.get_sample_value(
        "google_safebrowsing_refresh_failures_total", {"loop": "ingresses"}
    ) == pytest.approx(2.0)


def test_separate_registries_are_isolated() -> None:
    first = ThreatMetricsRegistry(registry=CollectorRegistry())
    second = ThreatMetricsRegistry(registry=CollectorRegistry())

    first.set_all({"a.com": True})

    assert second.value_for("a.com") is None
    assert second.registered_domains() == []


def test_serve_uses_own_registry(metrics: ThreatMetricsRegistry) -> None:
    with patch("monitoring.metrics.start_http_server") as server_mock:
        server_mock.return_value = (object(), object())
        metrics.serve(1024)

    server_mock.assert_called_once()
    assert server_mock.call_args.args == (1024,)
    assert server_mock.call_args.kwargs["registry"] is metrics.registry
