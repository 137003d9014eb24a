#!/usr/bin/env python3
"""Main entry point for the Safe Browsing exporter.

Discovers ingress domains in the cluster, checks them against Google Safe
Browsing and serves the result as Prometheus gauges on ``/metrics``.
"""

import argparse
import asyncio
import signal
import sys
from typing import List, Optional

import structlog

from common import (
    ConfigurationError,
    ExporterException,
    FatalStartupError,
    parse_duration,
    setup_logging,
)
from common.constants import (
    DEFAULT_INGRESS_INTERVAL,
    DEFAULT_METRICS_PORT,
    DEFAULT_THREAT_INTERVAL,
    SERVICE_NAME,
)
from monitoring import ThreatMetricsRegistry
from . import __version__
from .config import ExporterSettings
from .lookups import SafeBrowsingLookup
from .reconciler import Reconciler
from .watchers import IngressWatcher, load_kubernetes_config

logger = structlog.get_logger()


def _duration(value: str) -> float:
    try:
        return parse_duration(value)
    except ConfigurationError as e:
        raise argparse.ArgumentTypeError(str(e))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog=SERVICE_NAME,
        description="Export Google Safe Browsing threat matches for Kubernetes ingress domains",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--kube-config",
        action="store_true",
        help="Use the local kubeconfig instead of in-cluster credentials",
    )
    parser.add_argument(
        "--interval",
        type=_duration,
        default=DEFAULT_THREAT_INTERVAL,
        help="Threat match refresh interval, e.g. 5m or 90s (default: 5m)",
    )
    parser.add_argument(
        "--ingress-interval",
        type=_duration,
        default=DEFAULT_INGRESS_INTERVAL,
        help="Ingress refresh interval (default: 1m)",
    )
    parser.add_argument(
        "--additional-domains",
        action="append",
        default=[],
        metavar="DOMAIN",
        help="Extra domain to check; may be repeated",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=DEFAULT_METRICS_PORT,
        help=f"Port serving /metrics (default: {DEFAULT_METRICS_PORT})",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs in JSON format",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args(argv)


def build_reconciler(
    settings: ExporterSettings, metrics: ThreatMetricsRegistry
) -> Reconciler:
    """Wire the cluster watcher and the threat lookup into a reconciler.

    Raises:
        FatalStartupError: If cluster credentials cannot be loaded
    """
    api_client = load_kubernetes_config(settings.kube_config)
    return Reconciler(
        watcher=IngressWatcher(api_client),
        lookup=SafeBrowsingLookup(settings.api_key, client_version=__version__),
        metrics=metrics,
        additional_domains=settings.additional_domains,
        interval=settings.interval,
        ingress_interval=settings.ingress_interval,
    )


def serve_metrics(metrics: ThreatMetricsRegistry, port: int) -> None:
    """Start the exposition server, treating a bind failure as fatal."""
    try:
        metrics.serve(port)
    except OSError as e:
        raise FatalStartupError(
            message="Unable to start metrics server",
            context={"stage": "metrics_server", "port": port},
            original_error=e,
        )


async def run_service(
    reconciler: Reconciler, metrics: ThreatMetricsRegistry, port: int
) -> None:
    """Run until SIGINT or SIGTERM."""
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    await reconciler.run(
        stop_event, on_initialized=lambda: serve_metrics(metrics, port)
    )
    logger.info("Shutdown signal received")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    global logger
    logger = setup_logging(
        level="DEBUG" if args.verbose else "INFO",
        service_name=SERVICE_NAME,
        json_format=args.json_logs,
    )

    try:
        settings = ExporterSettings.from_args(args)
        logger.info(
            "Starting exporter",
            kube_config=settings.kube_config,
            interval=settings.interval,
            ingress_interval=settings.ingress_interval,
            additional_domains=settings.additional_domains,
            metrics_port=settings.metrics_port,
        )

        metrics = ThreatMetricsRegistry()
        reconciler = build_reconciler(settings, metrics)
        asyncio.run(run_service(reconciler, metrics, settings.metrics_port))

    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        return 2
    except ExporterException as e:
        logger.error("Exporter failed to start", error=str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Exporter interrupted by user")

    return 0


if __name__ == "__main__":
    sys.exit(main())
