"""Tests for the exporter entry point."""

import os
from unittest.mock import MagicMock, patch

import pytest

from common import FatalStartupError
from exporter.config import ExporterSettings
from exporter import main as exporter_main

ENV = {"GOOGLE_SAFEBROWSING_API_KEY": "secret"}


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("exporter.main.setup_logging", return_value=MagicMock()):
        yield


def test_main_missing_api_key_exits_non_zero():
    """Test a missing API key aborts startup."""
    with patch.dict(os.environ, {}, clear=True):
        assert exporter_main.main([]) == 1


def test_main_cluster_config_failure_exits_non_zero():
    """Test unusable cluster credentials abort startup."""
    error = FatalStartupError("Unable to create kubernetes rest config")
    with patch.dict(os.environ, ENV), patch(
        "exporter.main.load_kubernetes_config", side_effect=error
    ):
        assert exporter_main.main(["--kube-config"]) == 1


def test_main_initial_reconciliation_failure_exits_non_zero():
    """Test a failed first reconciliation aborts startup."""
    with patch.dict(os.environ, ENV), patch(
        "exporter.main.build_reconciler"
    ) as build_mock, patch(
        "exporter.main.run_service",
        side_effect=FatalStartupError("Initial reconciliation failed"),
    ):
        assert exporter_main.main([]) == 1

    build_mock.assert_called_once()


def test_main_graceful_exit():
    """Test the exporter exits 0 once the service returns."""
    with patch.dict(os.environ, ENV), patch(
        "exporter.main.build_reconciler"
    ), patch("exporter.main.asyncio.run") as run_mock:
        assert exporter_main.main(["--metrics-port", "9100"]) == 0

    run_mock.assert_called_once()
    run_mock.call_args.args[0].close()


def test_main_invalid_port_exits_with_usage_code():
    """Test an invalid port is a configuration error."""
    with patch.dict(os.environ, ENV):
        assert exporter_main.main(["--metrics-port", "0"]) == 2


def test_serve_metrics_bind_failure_is_fatal():
    """Test an unbindable port is a fatal startup error."""
    metrics = MagicMock()
    metrics.serve.side_effect = OSError("Address already in use")

    with pytest.raises(FatalStartupError) as exc_info:
        exporter_main.serve_metrics(metrics, 1024)

    assert exc_info.value.context["port"] == 1024


def test_build_reconciler_wires_settings():
    """Test settings flow into the reconciler."""
    settings = ExporterSettings(
        api_key="secret",
        interval=120.0,
        ingress_interval=30.0,
        additional_domains=["extra.com"],
    )
    with patch("exporter.main.load_kubernetes_config") as load_mock, patch(
        "exporter.main.IngressWatcher"
    ) as watcher_mock:
        reconciler = exporter_main.build_reconciler(settings, MagicMock())

    load_mock.assert_called_once_with(False)
    watcher_mock.assert_called_once_with(load_mock.return_value)
    assert reconciler.interval == 120.0
    assert reconciler.ingress_interval == 30.0
    assert reconciler.additional_domains == ["extra.com"]
    assert reconciler.lookup.api_key == "secret"
