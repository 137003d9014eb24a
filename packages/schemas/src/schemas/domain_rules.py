"""Domain extraction rules."""

from typing import Iterable, List


def normalize_host(hostname: str) -> str:
    """
    Normalize a hostname for comparison.

    Strips surrounding whitespace, lower-cases and removes a single
    trailing dot (fully-qualified form).

    Examples:
        >>> normalize_host("  Example.COM.  ")
        'example.com'
    """
    host = (hostname or "").strip().lower()
    if host.endswith("."):
        host = host[:-1]
    return host


def extract_domain(hostname: str) -> str:
    """
    Collapse a hostname to its last two labels.

    Wildcard and subdomain labels fall away with everything else to the
    left of the registrable pair. Hostnames with fewer than two labels have
    no domain and yield an empty string.

    Args:
        hostname: Host as declared on an ingress rule

    Returns:
        The two-label domain, or "" if there is none

    Examples:
        >>> extract_domain("sub.sub.domain.com")
        'domain.com'
        >>> extract_domain("*.domain.com")
        'domain.com'
        >>> extract_domain("com")
        ''
    """
    labels = normalize_host(hostname).split(".")
    if len(labels) < 2 or not all(labels[-2:]):
        return ""
    return ".".join(labels[-2:])


def unique_domains(domains: Iterable[str]) -> List[str]:
    """
    De-duplicate domains, keeping first-seen order and dropping empty entries.

    Examples:
        >>> unique_domains(["b.com", "a.com", "b.com", ""])
        ['b.com', 'a.com']
    """
    seen = set()
    result = []
    for domain in domains:
        if not domain or domain in seen:
            continue
        seen.add(domain)
        result.append(domain)
    return result
