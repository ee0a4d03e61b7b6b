"""Helpers for turning user input into hostnames."""
from urllib.parse import urlparse

import dns.exception
import dns.name

from core.exceptions import InvalidDomainError

WWW_PREFIX = "www."


def normalize_domain(raw: str) -> str:
    """Reduce user input (bare domain or URL) to a lower-case hostname.

    Raises InvalidDomainError when nothing usable remains.
    """
    value = (raw or "").strip()
    if not value:
        raise InvalidDomainError(raw or "", "Empty domain")

    if "://" not in value:
        value = "https://" + value

    try:
        hostname = urlparse(value).hostname
    except ValueError as e:
        raise InvalidDomainError(raw, f"Could not parse domain ({e})") from e

    if not hostname:
        raise InvalidDomainError(raw)

    hostname = hostname.rstrip(".")
    if not hostname or any(c.isspace() for c in hostname):
        raise InvalidDomainError(raw)
    try:
        dns.name.from_text(hostname)
    except dns.exception.DNSException as e:
        raise InvalidDomainError(raw, f"Not a valid DNS name ({type(e).__name__})") from e
    return hostname


def www_counterpart(domain: str) -> str:
    """Strip a leading www. or add one when absent."""
    if domain.startswith(WWW_PREFIX):
        return domain[len(WWW_PREFIX):]
    return WWW_PREFIX + domain
