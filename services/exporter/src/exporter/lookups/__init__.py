"""Threat lookup package."""

from .base_lookup import BaseLookup
from .safebrowsing_lookup import SafeBrowsingLookup, url_pattern

__all__ = ["BaseLookup", "SafeBrowsingLookup", "url_pattern"]
