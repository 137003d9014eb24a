"""Shared fixtures for exporter tests."""

from typing import Dict, List
from unittest.mock import MagicMock

import pytest
from kubernetes import client
from prometheus_client import CollectorRegistry

from common import TransientLookupError
from monitoring import ThreatMetricsRegistry
from stubs import make_ingress, make_namespaces


@pytest.fixture
def sample_ingresses() -> Dict[str, List[client.V1Ingress]]:
    return {
        "default": [
            make_ingress("default", "ingress-1", ["ingress-1.example.com"]),
            make_ingress("default", "ingress-2", ["www.example.org", "api.example.org"]),
            make_ingress("default", "ingress-3", ["*.shop.example.net", None]),
        ],
        "kube-system": [],
    }


@pytest.fixture
def kube_apis(sample_ingresses):
    core_api = MagicMock()
    core_api.list_namespace.return_value = make_namespaces(*sample_ingresses)

    networking_api = MagicMock()
    networking_api.list_namespaced_ingress.side_effect = (
        lambda namespace, **kwargs: client.V1IngressList(items=sample_ingresses[namespace])
    )
    return core_api, networking_api


@pytest.fixture
def metrics() -> ThreatMetricsRegistry:
    return ThreatMetricsRegistry(registry=CollectorRegistry())


@pytest.fixture
def lookup_error() -> TransientLookupError:
    return TransientLookupError(
        "Retrieving google safebrowsing threat matches failed",
        context={"status_code": 503},
    )
