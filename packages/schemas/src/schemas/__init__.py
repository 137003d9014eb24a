"""Schemas package."""

from schemas.routing_rule import RoutingRule
from schemas.domain_rules import extract_domain, normalize_host, unique_domains

__all__ = [
    "RoutingRule",
    "extract_domain",
    "normalize_host",
    "unique_domains",
]
