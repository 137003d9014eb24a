"""Base threat lookup abstract class."""

from abc import ABC, abstractmethod
from typing import Dict, Iterable


class BaseLookup(ABC):
    """Abstract base class for domain reputation providers."""

    @abstractmethod
    async def lookup(self, domains: Iterable[str]) -> Dict[str, bool]:
        """
        Check domains against the provider.

        Args:
            domains: Domains to check

        Returns:
            Mapping of every requested domain to True if it has a threat match

        Raises:
            TransientLookupError: If the provider call fails
        """
        pass
