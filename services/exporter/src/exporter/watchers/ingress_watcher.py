"""Ingress watcher backed by the Kubernetes API."""

import asyncio
from typing import Any, List, Optional

import structlog
import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from common import FatalStartupError, TransientLookupError
from common.constants import DEFAULT_KUBERNETES_TIMEOUT
from schemas import RoutingRule, extract_domain, unique_domains
from .base_watcher import BaseWatcher

logger = structlog.get_logger(__name__)


def load_kubernetes_config(kube_config: bool = False) -> client.ApiClient:
    """
    Load cluster credentials and return an API client.

    Args:
        kube_config: If True, use the local kubeconfig; otherwise in-cluster config

    Raises:
        FatalStartupError: If no usable configuration is found
    """
    try:
        if kube_config:
            config.load_kube_config()
            logger.info("Loaded kubeconfig")
        else:
            config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes config")
    except config.ConfigException as e:
        raise FatalStartupError(
            message="Unable to create kubernetes rest config",
            context={"kube_config": kube_config},
            original_error=e,
        )
    return client.ApiClient()


class IngressWatcher(BaseWatcher):
    """Lists ingresses across all namespaces and extracts their domains."""

    def __init__(
        self,
        api_client: Optional[client.ApiClient] = None,
        timeout: int = DEFAULT_KUBERNETES_TIMEOUT,
        core_api: Optional[Any] = None,
        networking_api: Optional[Any] = None,
    ):
        """
        Initialize the watcher.

        Args:
            api_client: Configured Kubernetes API client
            timeout: Per-request timeout in seconds
            core_api: CoreV1Api override (for tests)
            networking_api: NetworkingV1Api override (for tests)
        """
        self.timeout = timeout
        self._core_api = core_api or client.CoreV1Api(api_client)
        self._networking_api = networking_api or client.NetworkingV1Api(api_client)

    async def list_routing_rules(self) -> List[RoutingRule]:
        """
        List routing rules without blocking the event loop.

        Raises:
            TransientLookupError: On any cluster API failure
        """
        logger.debug("Updating ingresses")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._list_routing_rules)

    def _list_routing_rules(self) -> List[RoutingRule]:
        namespace: Optional[str] = None
        try:
            namespaces = self._core_api.list_namespace(_request_timeout=self.timeout)

            rules = []
            for ns in namespaces.items:
                namespace = ns.metadata.name
                ingresses = self._networking_api.list_namespaced_ingress(
                    namespace, _request_timeout=self.timeout
                )
                for ingress in ingresses.items:
                    rule = self._to_routing_rule(ingress)
                    logger.debug(
                        "Found ingress",
                        namespace=rule.namespace,
                        ingress=rule.name,
                        domains=list(rule.domains),
                    )
                    rules.append(rule)

        except (ApiException, urllib3.exceptions.HTTPError) as e:
            context = {"namespace": namespace} if namespace else {}
            raise TransientLookupError(
                message="Updating ingresses failed",
                context=context,
                original_error=e,
            )

        logger.debug("Ingresses updated", ingresses=len(rules))
        return rules

    @staticmethod
    def _to_routing_rule(ingress: Any) -> RoutingRule:
        spec_rules = (ingress.spec.rules if ingress.spec else None) or []
        domains = unique_domains(
            extract_domain(rule.host) for rule in spec_rules if rule.host
        )
        return RoutingRule(
            namespace=ingress.metadata.namespace,
            name=ingress.metadata.name,
            domains=domains,
        )
