"""Kubernetes ingress threat exporter for Google Safe Browsing."""

__version__ = "0.1.0"
