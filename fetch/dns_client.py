import dns.exception
import dns.reversename
import logging
from typing import List, Optional

from core.exceptions import LookupFailure, ResolverError
from fetch.http_client import fetch_json
from models.network import DnsAnswer, RECORD_PTR

# Default DNS-over-HTTPS JSON endpoint
DEFAULT_DOH_URL = "https://dns.google/resolve"

def normalize_hostname(name: str) -> str:
    """Drop the trailing root dot and lower-case a DNS name."""
    return name.strip().rstrip(".").lower()

async def query_dns(
    hostname: str,
    record_type: str = "A",
    timeout: Optional[float] = None,
    doh_url: str = DEFAULT_DOH_URL,
) -> List[DnsAnswer]:
    """
    Issues one DNS-over-HTTPS query for a hostname.

    An A query returns every record the resolver followed, so CNAME answers
    come back alongside the addresses.

    Args:
        hostname: The hostname to query
        record_type: DNS record type to request (A, PTR, ...)
        timeout: Query timeout in seconds (default: 5s)
        doh_url: DoH JSON endpoint

    Returns:
        List of answers; empty if the name has no records

    Raises:
        ResolverTimeout, LookupFailure
    """
    logger = logging.getLogger(__name__)
    logger.debug(f"DNS query for {hostname}: {record_type}")

    data = await fetch_json(
        doh_url,
        timeout=timeout,
        headers={"Accept": "application/dns-json"},
        params={"name": hostname, "type": record_type},
    )

    answers_raw = data.get("Answer") or []
    if not isinstance(answers_raw, list):
        raise LookupFailure("Malformed DNS response", doh_url)

    answers: List[DnsAnswer] = []
    for item in answers_raw:
        try:
            answers.append(DnsAnswer(type=int(item["type"]), data=str(item["data"])))
        except (KeyError, TypeError, ValueError) as e:
            raise LookupFailure(f"Malformed DNS answer {item!r}", doh_url) from e

    logger.debug(f"DNS {record_type} {hostname}: {len(answers)} answers")
    return answers

def reverse_pointer(ip: str) -> str:
    """Return the in-addr.arpa name for an IPv4 address."""
    return dns.reversename.from_address(ip).to_text(omit_final_dot=True)

async def reverse_lookup(
    ip: str,
    timeout: Optional[float] = None,
    doh_url: str = DEFAULT_DOH_URL,
) -> Optional[str]:
    """
    Resolves the PTR hostname of an IP address.

    Returns None when the address has no PTR record or the lookup fails.
    """
    logger = logging.getLogger(__name__)
    try:
        name = reverse_pointer(ip)
    except (dns.exception.SyntaxError, ValueError):
        logger.debug(f"Cannot build reverse name for {ip!r}")
        return None

    try:
        answers = await query_dns(name, "PTR", timeout=timeout, doh_url=doh_url)
    except ResolverError as e:
        logger.warning(f"Reverse DNS lookup failed for {ip}: {e}")
        return None

    if not answers:
        return None
    pointers = [a for a in answers if a.type == RECORD_PTR] or answers
    hostname = normalize_hostname(pointers[0].data)
    logger.debug(f"PTR {ip}: {hostname}")
    return hostname or None
