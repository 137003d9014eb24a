"""Monitoring package."""

from monitoring.metrics import ThreatMetricsRegistry

__all__ = ["ThreatMetricsRegistry"]
