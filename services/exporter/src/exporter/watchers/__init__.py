"""Watchers package."""

from .base_watcher import BaseWatcher
from .ingress_watcher import IngressWatcher, load_kubernetes_config

__all__ = ["BaseWatcher", "IngressWatcher", "load_kubernetes_config"]
