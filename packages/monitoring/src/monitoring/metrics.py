"""Prometheus metrics for per-domain threat status."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

import structlog
from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

from common.constants import METRICS_NAMESPACE

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class ThreatMetricsRegistry:
    """Append-only registry of per-domain threat gauges.

    A domain's gauge is created the first time it is seen and stays exported
    for the lifetime of the process. Domains that disappear are cleared to 0
    instead of being removed so that the exported series set only grows.
    """

    namespace: str = METRICS_NAMESPACE
    registry: CollectorRegistry = field(default_factory=CollectorRegistry)
    _threat_matches: Gauge = field(init=False, repr=False)
    _last_success: Gauge = field(init=False, repr=False)
    _failures: Counter = field(init=False, repr=False)
    _gauges: Dict[str, Gauge] = field(init=False, repr=False, default_factory=dict)
    _lock: threading.RLock = field(init=False, repr=False, default_factory=threading.RLock)

    def __post_init__(self) -> None:
        self._threat_matches = Gauge(
            "threat_matches",
            "Whether Google Safe Browsing reports a threat for the domain (1=match, 0=no match)",
            labelnames=["domain"],
            namespace=self.namespace,
            registry=self.registry,
        )
        self._last_success = Gauge(
            "last_refresh_success_timestamp_seconds",
            "Unix timestamp of the latest successful refresh per loop",
            labelnames=["loop"],
            namespace=self.namespace,
            registry=self.registry,
        )
        self._failures = Counter(
            "refresh_failures",
            "Number of failed refreshes per loop",
            labelnames=["loop"],
            namespace=self.namespace,
            registry=self.registry,
        )

    def gauge_for(self, domain: str) -> Gauge:
        """Return the gauge for ``domain``, registering it on first use."""
        with self._lock:
            gauge = self._gauges.get(domain)
            if gauge is None:
                gauge = self._threat_matches.labels(domain=domain)
                self._gauges[domain] = gauge
                logger.debug("Registered threat gauge", domain=domain)
            return gauge

    def set_all(self, status: Mapping[str, bool]) -> None:
        """Publish a full threat status snapshot.

        Domains in ``status`` are set to 1.0 or 0.0. Every other registered
        domain is forced to 0.0.
        """
        with self._lock:
            for domain, matched in status.items():
                self.gauge_for(domain).set(1.0 if matched else 0.0)

            cleared = [domain for domain in self._gauges if domain not in status]
            for domain in cleared:
                self._gauges[domain].set(0.0)

        logger.debug(
            "Threat gauges updated",
            domains=len(status),
            matches=sum(1 for matched in status.values() if matched),
            cleared=len(cleared),
        )

    def registered_domains(self) -> List[str]:
        """Domains with an exported gauge, in registration order."""
        with self._lock:
            return list(self._gauges)

    def value_for(self, domain: str) -> Optional[float]:
        """Current exported value for ``domain``, or None if never registered."""
        return self.registry.get_sample_value(
            f"{self.namespace}_threat_matches", {"domain": domain}
        )

    def mark_success(self, loop: str, timestamp: Optional[float] = None) -> None:
        """Record a successful refresh of ``loop``."""
        self._last_success.labels(loop=loop).set(
            time.time() if timestamp is None else timestamp
        )

    def mark_failure(self, loop: str) -> None:
        """Record a failed refresh of ``loop``."""
        self._failures.labels(loop=loop).inc()

    def serve(self, port: int, addr: str = "0.0.0.0") -> Tuple[object, threading.Thread]:
        """Expose the registry at ``/metrics`` on a background thread."""
        server, thread = start_http_server(port, addr=addr, registry=self.registry)
        logger.info("Metrics server started", port=port, addr=addr)
        return server, thread
