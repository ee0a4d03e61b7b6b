"""Breadth-first CNAME chain traversal collecting IPv4 addresses."""
import logging
from collections import deque
from typing import Awaitable, Callable, Deque, List, Set

from core.domain_utils import www_counterpart
from core.exceptions import ResolverError
from fetch.dns_client import normalize_hostname
from models.network import DiscoveryResult, DnsAnswer, RECORD_A, RECORD_CNAME

logger = logging.getLogger(__name__)

# Upper bound on DNS requests issued per discovery
MAX_DNS_REQUESTS = 10

DnsLookup = Callable[[str], Awaitable[List[DnsAnswer]]]


async def discover(domain: str, lookup: DnsLookup, max_requests: int = MAX_DNS_REQUESTS) -> DiscoveryResult:
    """Follow the alias chain of a domain and its www. counterpart.

    Each queued hostname is queried once. CNAME targets are queued unless
    already visited or queued, and traversal stops when the queue drains or
    `max_requests` lookups have been made. A failed lookup still consumes
    budget and marks the hostname visited.
    """
    queue: Deque[str] = deque([domain])
    queued: Set[str] = {domain}
    counterpart = www_counterpart(domain)
    if counterpart and counterpart not in queued:
        queue.append(counterpart)
        queued.add(counterpart)

    visited: List[str] = []
    visited_set: Set[str] = set()
    ips: Set[str] = set()
    requests = 0

    while queue and requests < max_requests:
        hostname = queue.popleft()
        queued.discard(hostname)
        requests += 1
        try:
            answers = await lookup(hostname)
        except ResolverError as e:
            logger.warning(f"DNS lookup failed for {hostname}: {e}")
            answers = []

        if hostname not in visited_set:
            visited.append(hostname)
            visited_set.add(hostname)

        for answer in answers:
            if answer.type == RECORD_A:
                ips.add(answer.data.strip())
            elif answer.type == RECORD_CNAME:
                target = normalize_hostname(answer.data)
                if target and target not in visited_set and target not in queued:
                    logger.debug(f"CNAME {hostname} -> {target}")
                    queue.append(target)
                    queued.add(target)

    if queue:
        logger.debug(f"Discovery budget of {max_requests} requests exhausted, {len(queue)} hostnames left unvisited")

    logger.debug(f"Discovered {len(ips)} IPs across {len(visited)} hostnames for {domain}")
    return DiscoveryResult(ips=frozenset(ips), hostnames_visited=tuple(visited), requests_made=requests)
