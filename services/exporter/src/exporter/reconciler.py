"""Reconciliation of ingress domains into threat match metrics."""

import asyncio
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

import structlog

from common import FatalStartupError, TransientLookupError
from common.constants import (
    DEFAULT_INGRESS_INTERVAL,
    DEFAULT_THREAT_INTERVAL,
    LOOP_INGRESSES,
    LOOP_THREAT_MATCHES,
)
from monitoring import ThreatMetricsRegistry
from schemas import RoutingRule, unique_domains
from .lookups import BaseLookup
from .watchers import BaseWatcher

logger = structlog.get_logger(__name__)


class Reconciler:
    """Keeps the routing rule snapshot and the threat gauges converged.

    The snapshot is the only mutable state shared between the two refresh
    loops; it is read and replaced under one lock so that a threat refresh
    always sees a complete snapshot.
    """

    def __init__(
        self,
        watcher: BaseWatcher,
        lookup: BaseLookup,
        metrics: ThreatMetricsRegistry,
        additional_domains: Sequence[str] = (),
        interval: float = DEFAULT_THREAT_INTERVAL,
        ingress_interval: float = DEFAULT_INGRESS_INTERVAL,
    ):
        """
        Initialize the reconciler.

        Args:
            watcher: Source of routing rules
            lookup: Threat provider client
            metrics: Registry the threat status is published to
            additional_domains: Domains checked regardless of the cluster
            interval: Seconds between threat refreshes
            ingress_interval: Seconds between routing rule refreshes
        """
        self.watcher = watcher
        self.lookup = lookup
        self.metrics = metrics
        self.additional_domains = list(additional_domains)
        self.interval = interval
        self.ingress_interval = ingress_interval

        self._lock = asyncio.Lock()
        self._routing_rules: List[RoutingRule] = []
        self._tasks: List[asyncio.Task] = []

    async def routing_rules(self) -> List[RoutingRule]:
        """Copy of the current snapshot."""
        async with self._lock:
            return list(self._routing_rules)

    async def refresh_routing_rules(self) -> List[RoutingRule]:
        """
        Re-list routing rules and replace the snapshot.

        Raises:
            TransientLookupError: If listing fails; the snapshot is kept
        """
        rules = await self.watcher.list_routing_rules()
        async with self._lock:
            self._routing_rules = list(rules)

        logger.info("Routing rules refreshed", ingresses=len(rules))
        return rules

    async def domain_set(self) -> List[str]:
        """Snapshot domains followed by additional domains, de-duplicated."""
        async with self._lock:
            discovered = [
                domain for rule in self._routing_rules for domain in rule.domains
            ]
        return unique_domains([*discovered, *self.additional_domains])

    async def refresh_threat_matches(self) -> Dict[str, bool]:
        """
        Look up the current domain set and publish the result.

        Raises:
            TransientLookupError: If the lookup fails; no gauge is changed
        """
        domains = await self.domain_set()
        status = await self.lookup.lookup(domains)
        self.metrics.set_all(status)

        logger.info(
            "Threat matches refreshed",
            domains=len(status),
            matches=[domain for domain, matched in status.items() if matched],
        )
        return status

    async def initialize(self) -> None:
        """
        Run one full reconciliation before going live.

        Raises:
            FatalStartupError: If either refresh fails
        """
        logger.info("Initializing")
        for loop_name, refresh in (
            (LOOP_INGRESSES, self.refresh_routing_rules),
            (LOOP_THREAT_MATCHES, self.refresh_threat_matches),
        ):
            try:
                await refresh()
            except Exception as e:  # noqa: BLE001
                self.metrics.mark_failure(loop_name)
                raise FatalStartupError(
                    message="Initial reconciliation failed",
                    context={"stage": loop_name},
                    original_error=e,
                ) from e
            self.metrics.mark_success(loop_name)

    def start(self) -> None:
        """Start both refresh loops."""
        if self._tasks:
            logger.warning("Reconciler already running")
            return

        self._tasks = [
            asyncio.create_task(
                self._run_periodically(
                    LOOP_INGRESSES, self.ingress_interval, self.refresh_routing_rules
                ),
                name=LOOP_INGRESSES,
            ),
            asyncio.create_task(
                self._run_periodically(
                    LOOP_THREAT_MATCHES, self.interval, self.refresh_threat_matches
                ),
                name=LOOP_THREAT_MATCHES,
            ),
        ]
        logger.info(
            "Reconciler started",
            interval=self.interval,
            ingress_interval=self.ingress_interval,
        )

    async def stop(self) -> None:
        """Cancel both refresh loops and wait for them to finish."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            logger.info("Reconciler stopped")

    @property
    def running(self) -> bool:
        """True while either refresh loop is still active."""
        return any(not task.done() for task in self._tasks)

    async def run(
        self,
        stop_event: Optional[asyncio.Event] = None,
        on_initialized: Optional[Callable[[], object]] = None,
    ) -> None:
        """
        Initialize, then reconcile until ``stop_event`` is set.

        Args:
            stop_event: Set to stop both loops
            on_initialized: Called once the initial reconciliation succeeded

        Raises:
            FatalStartupError: If initialization or ``on_initialized`` fails
        """
        await self.initialize()
        if on_initialized is not None:
            on_initialized()
        self.start()
        try:
            await (stop_event or asyncio.Event()).wait()
        finally:
            await self.stop()

    async def _run_periodically(
        self,
        loop_name: str,
        interval: float,
        refresh: Callable[[], Awaitable[object]],
    ) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await refresh()
            except TransientLookupError as e:
                self.metrics.mark_failure(loop_name)
                logger.error("Refresh failed", loop=loop_name, error=str(e))
                continue
            except Exception as e:  # noqa: BLE001
                self.metrics.mark_failure(loop_name)
                logger.exception(
                    "Unexpected refresh error",
                    loop=loop_name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue
            self.metrics.mark_success(loop_name)
