from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple

import dns.rdatatype

# DNS record type codes as they appear in DoH JSON answers
RECORD_A = int(dns.rdatatype.A)
RECORD_CNAME = int(dns.rdatatype.CNAME)
RECORD_PTR = int(dns.rdatatype.PTR)


@dataclass(frozen=True)
class DnsAnswer:
    """A single answer record from a DNS-over-HTTPS response."""
    type: int
    data: str


@dataclass(frozen=True)
class DiscoveryResult:
    """IPv4 addresses and hostnames reached while following a CNAME chain."""
    ips: FrozenSet[str] = frozenset()
    hostnames_visited: Tuple[str, ...] = () # Traversal order
    requests_made: int = 0


class AsnStatus(Enum):
    FOUND = "found"
    MISSING = "missing" # No organization field in the lookup response
    UNPARSEABLE = "unparseable" # Organization present but no leading AS<number> token


@dataclass(frozen=True)
class EnrichmentRecord:
    """Organization data for one IP address."""
    ip: str
    asn: Optional[int] = None
    asn_status: AsnStatus = AsnStatus.MISSING
    organization: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None


@dataclass(frozen=True)
class BatchOutcome:
    """Whether one enrichment batch (or the header fetch) completed."""
    name: str
    ok: bool = True
    error: Optional[str] = None
