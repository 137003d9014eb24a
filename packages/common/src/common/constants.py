"""Configuration constants for the exporter."""

from typing import Final, Tuple

# External call timeouts (in seconds)
DEFAULT_HTTP_TIMEOUT: Final[int] = 30
DEFAULT_KUBERNETES_TIMEOUT: Final[int] = 30

# Refresh cadence (in seconds)
DEFAULT_THREAT_INTERVAL: Final[float] = 300.0  # 5 minutes
DEFAULT_INGRESS_INTERVAL: Final[float] = 60.0

# Metrics exposition
DEFAULT_METRICS_PORT: Final[int] = 1024
METRICS_NAMESPACE: Final[str] = "google_safebrowsing"
LOOP_INGRESSES: Final[str] = "ingresses"
LOOP_THREAT_MATCHES: Final[str] = "threat_matches"

# Google Safe Browsing v4 Lookup API
SAFEBROWSING_API_KEY_ENV: Final[str] = "GOOGLE_SAFEBROWSING_API_KEY"
SAFEBROWSING_API_URL: Final[str] = (
    "https://safebrowsing.googleapis.com/v4/threatMatches:find"
)
SAFEBROWSING_CLIENT_ID: Final[str] = "safebrowsing-exporter"
SAFEBROWSING_THREAT_TYPES: Final[Tuple[str, ...]] = (
    "MALWARE",
    "SOCIAL_ENGINEERING",
    "UNWANTED_SOFTWARE",
    "POTENTIALLY_HARMFUL_APPLICATION",
)
SAFEBROWSING_PLATFORM_TYPES: Final[Tuple[str, ...]] = ("ANY_PLATFORM",)
SAFEBROWSING_THREAT_ENTRY_TYPES: Final[Tuple[str, ...]] = ("URL",)

# Service Defaults
DEFAULT_LOG_LEVEL: Final[str] = "INFO"
SERVICE_NAME: Final[str] = "safebrowsing-exporter"
