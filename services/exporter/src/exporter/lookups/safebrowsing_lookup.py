"""Google Safe Browsing v4 Lookup API client."""

import asyncio
from typing import Any, Dict, Iterable, List, Optional

import aiohttp
import structlog
from pydantic import BaseModel, ValidationError

from common import TransientLookupError
from common.constants import (
    DEFAULT_HTTP_TIMEOUT,
    SAFEBROWSING_API_URL,
    SAFEBROWSING_CLIENT_ID,
    SAFEBROWSING_PLATFORM_TYPES,
    SAFEBROWSING_THREAT_ENTRY_TYPES,
    SAFEBROWSING_THREAT_TYPES,
)
from schemas import unique_domains
from .base_lookup import BaseLookup

logger = structlog.get_logger(__name__)


class ThreatEntry(BaseModel):
    """Entry a match was reported against."""

    url: Optional[str] = None


class ThreatMatch(BaseModel):
    """One element of ``matches``; unused fields are ignored."""

    threatType: Optional[str] = None
    threat: Optional[ThreatEntry] = None


class ThreatMatchesResponse(BaseModel):
    """threatMatches:find response body. An empty body means no matches."""

    matches: Optional[List[ThreatMatch]] = None


def url_pattern(url: str) -> str:
    """
    Reduce a URL to its host/path pattern.

    Examples:
        >>> url_pattern("http://Example.com/")
        'example.com/'
        >>> url_pattern("example.com")
        'example.com/'
    """
    pattern = url.strip().lower()
    if "://" in pattern:
        pattern = pattern.split("://", 1)[1]
    if "/" not in pattern:
        pattern = f"{pattern}/"
    return pattern


class SafeBrowsingLookup(BaseLookup):
    """Checks domains against Google Safe Browsing in a single request.

    Only matches whose pattern is exactly ``domain + "/"`` count; matches
    reported against a sub-path of the domain are ignored.
    """

    def __init__(
        self,
        api_key: str,
        timeout: int = DEFAULT_HTTP_TIMEOUT,
        api_url: str = SAFEBROWSING_API_URL,
        client_version: str = "0.0.0",
    ):
        """
        Initialize the lookup client.

        Args:
            api_key: Google Safe Browsing API key
            timeout: Request timeout in seconds
            api_url: threatMatches:find endpoint
            client_version: Reported to the API alongside the client id
        """
        self.api_key = api_key
        self.timeout = timeout
        self.api_url = api_url
        self.client_version = client_version

    def build_request(self, domains: List[str]) -> Dict[str, Any]:
        """Build the threatMatches:find request body."""
        return {
            "client": {
                "clientId": SAFEBROWSING_CLIENT_ID,
                "clientVersion": self.client_version,
            },
            "threatInfo": {
                "threatTypes": list(SAFEBROWSING_THREAT_TYPES),
                "platformTypes": list(SAFEBROWSING_PLATFORM_TYPES),
                "threatEntryTypes": list(SAFEBROWSING_THREAT_ENTRY_TYPES),
                "threatEntries": [{"url": f"http://{domain}/"} for domain in domains],
            },
        }

    async def lookup(self, domains: Iterable[str]) -> Dict[str, bool]:
        """
        Retrieve threat matches for the given domains.

        Returns:
            Mapping of every requested domain to its match status

        Raises:
            TransientLookupError: On HTTP, auth, timeout or payload errors
        """
        domains = unique_domains(domains)
        if not domains:
            return {}

        logger.debug("Retrieving google safebrowsing threat matches", domains=len(domains))

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.api_url,
                    params={"key": self.api_key},
                    json=self.build_request(domains),
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    response.raise_for_status()
                    payload = await response.json()

        except aiohttp.ClientResponseError as e:
            raise TransientLookupError(
                message="Retrieving google safebrowsing threat matches failed",
                context={"domain_count": len(domains), "status_code": e.status},
                original_error=e,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise TransientLookupError(
                message="Retrieving google safebrowsing threat matches failed",
                context={"domain_count": len(domains)},
                original_error=e,
            )

        patterns = self._match_patterns(payload)
        result = {domain: f"{domain}/" in patterns for domain in domains}

        logger.debug(
            "Retrieved google safebrowsing threat matches",
            domains=len(result),
            matches=[domain for domain, matched in result.items() if matched],
        )
        return result

    @staticmethod
    def _match_patterns(payload: Any) -> set:
        try:
            response = ThreatMatchesResponse.model_validate(payload)
        except ValidationError as e:
            raise TransientLookupError(
                message="Unexpected google safebrowsing response",
                context={"payload_type": type(payload).__name__},
                original_error=e,
            )
        return {
            url_pattern(match.threat.url)
            for match in response.matches or []
            if match.threat is not None and match.threat.url
        }
