"""Configuration module for exporter settings."""

from .settings import ExporterSettings

__all__ = ["ExporterSettings"]
