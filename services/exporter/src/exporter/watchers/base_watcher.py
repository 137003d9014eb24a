"""Base watcher abstract class."""

from abc import ABC, abstractmethod
from typing import List

from schemas import RoutingRule


class BaseWatcher(ABC):
    """Abstract base class for routing rule sources."""

    @abstractmethod
    async def list_routing_rules(self) -> List[RoutingRule]:
        """
        List every routing rule currently declared in the cluster.

        Returns:
            Routing rules in discovery order

        Raises:
            TransientLookupError: If the cluster cannot be listed
        """
        pass
