"""Pytest configuration and fixtures for integration tests."""

from unittest.mock import MagicMock

import pytest
from kubernetes import client
from prometheus_client import CollectorRegistry

from monitoring import ThreatMetricsRegistry

# Import all fixtures to make them available to tests
from fixtures.sample_data import (
    sample_cluster_ingresses,
    sample_threat_matches_response,
    sample_additional_domains,
)


@pytest.fixture
def cluster_apis(sample_cluster_ingresses):
    """CoreV1Api/NetworkingV1Api doubles backed by ``sample_cluster_ingresses``."""
    core_api = MagicMock()
    core_api.list_namespace.return_value = client.V1NamespaceList(
        items=[
            client.V1Namespace(metadata=client.V1ObjectMeta(name=name))
            for name in sample_cluster_ingresses
        ]
    )
    networking_api = MagicMock()
    networking_api.list_namespaced_ingress.side_effect = (
        lambda namespace, **kwargs: client.V1IngressList(
            items=sample_cluster_ingresses[namespace]
        )
    )
    return core_api, networking_api


@pytest.fixture
def served_metrics():
    """Threat metrics exposed on an ephemeral local port."""
    metrics = ThreatMetricsRegistry(registry=CollectorRegistry())
    server, thread = metrics.serve(0, addr="127.0.0.1")
    yield metrics, f"http://127.0.0.1:{server.server_port}/metrics"
    server.shutdown()
    server.server_close()
    thread.join(timeout=5)


__all__ = [
    "sample_cluster_ingresses",
    "sample_threat_matches_response",
    "sample_additional_domains",
    "cluster_apis",
    "served_metrics",
]
