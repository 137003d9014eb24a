"""Runtime settings for the exporter."""

import argparse
from dataclasses import dataclass, field
from typing import List

from common import ConfigurationError, FatalStartupError, get_env
from common.constants import (
    DEFAULT_INGRESS_INTERVAL,
    DEFAULT_METRICS_PORT,
    DEFAULT_THREAT_INTERVAL,
    SAFEBROWSING_API_KEY_ENV,
)
from schemas import normalize_host, unique_domains


@dataclass(slots=True)
class ExporterSettings:
    """Settings resolved from command-line flags and the environment."""

    api_key: str = field(repr=False)
    kube_config: bool = False
    interval: float = DEFAULT_THREAT_INTERVAL
    ingress_interval: float = DEFAULT_INGRESS_INTERVAL
    additional_domains: List[str] = field(default_factory=list)
    metrics_port: int = DEFAULT_METRICS_PORT
    verbose: bool = False
    json_logs: bool = False

    def __post_init__(self) -> None:
        self.additional_domains = unique_domains(
            normalize_host(domain) for domain in self.additional_domains
        )
        if not 0 < self.metrics_port < 65536:
            raise ConfigurationError(
                "Metrics port out of range",
                context={"field": "metrics_port", "value": self.metrics_port},
            )

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.verbose else "INFO"

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ExporterSettings":
        """
        Build settings from parsed arguments and the environment.

        Raises:
            FatalStartupError: If the Safe Browsing API key is missing
            ConfigurationError: If a flag value is invalid
        """
        try:
            api_key = get_env(SAFEBROWSING_API_KEY_ENV, required=True)
        except ConfigurationError as e:
            raise FatalStartupError(
                message=f"Environment variable {SAFEBROWSING_API_KEY_ENV} is missing",
                context={"stage": "configuration"},
            ) from e

        return cls(
            api_key=api_key,
            kube_config=args.kube_config,
            interval=args.interval,
            ingress_interval=args.ingress_interval,
            additional_domains=list(args.additional_domains or []),
            metrics_port=args.metrics_port,
            verbose=args.verbose,
            json_logs=args.json_logs,
        )
