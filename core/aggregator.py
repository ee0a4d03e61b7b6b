"""Concurrent enrichment of discovered IP addresses.

ASN and reverse-DNS lookups run as two independent batches. A batch that
fails as a whole is reported through its BatchOutcome and does not discard
the results of the other batch.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, List, Optional, Set, Tuple

from models.network import BatchOutcome, EnrichmentRecord

logger = logging.getLogger(__name__)

AsnLookup = Callable[[str], Awaitable[Optional[EnrichmentRecord]]]
ReverseLookup = Callable[[str], Awaitable[Optional[str]]]


@dataclass(frozen=True)
class Enrichment:
    """Merged output of both enrichment batches."""
    asns: Tuple[EnrichmentRecord, ...]
    reverse_dns: Tuple[str, ...]
    outcomes: Tuple[BatchOutcome, ...]


class EvidenceAggregator:
    """Runs per-IP enrichment lookups and deduplicates their results."""

    ASN_BATCH = "asn"
    REVERSE_DNS_BATCH = "reverse_dns"

    def __init__(self, asn_lookup: AsnLookup, reverse_lookup: ReverseLookup):
        self.asn_lookup = asn_lookup
        self.reverse_lookup = reverse_lookup

    async def enrich(self, ips: Iterable[str]) -> Enrichment:
        """Enrich every distinct IP once with ASN and PTR data."""
        unique_ips = sorted(set(ips))
        if not unique_ips:
            return Enrichment(
                asns=(),
                reverse_dns=(),
                outcomes=(
                    BatchOutcome(name=self.ASN_BATCH),
                    BatchOutcome(name=self.REVERSE_DNS_BATCH),
                ),
            )

        logger.debug(f"Enriching {len(unique_ips)} IPs")
        asn_batch = asyncio.gather(*(self.asn_lookup(ip) for ip in unique_ips))
        ptr_batch = asyncio.gather(*(self.reverse_lookup(ip) for ip in unique_ips))
        asn_results, ptr_results = await asyncio.gather(asn_batch, ptr_batch, return_exceptions=True)

        outcomes: List[BatchOutcome] = []

        asns: Tuple[EnrichmentRecord, ...] = ()
        if isinstance(asn_results, BaseException):
            logger.warning(f"ASN batch failed: {asn_results!r}")
            outcomes.append(BatchOutcome(name=self.ASN_BATCH, ok=False, error=str(asn_results) or type(asn_results).__name__))
        else:
            asns = self.merge_asn_records(asn_results)
            outcomes.append(BatchOutcome(name=self.ASN_BATCH))

        reverse_dns: Tuple[str, ...] = ()
        if isinstance(ptr_results, BaseException):
            logger.warning(f"Reverse DNS batch failed: {ptr_results!r}")
            outcomes.append(BatchOutcome(name=self.REVERSE_DNS_BATCH, ok=False, error=str(ptr_results) or type(ptr_results).__name__))
        else:
            reverse_dns = self.merge_reverse_dns(ptr_results)
            outcomes.append(BatchOutcome(name=self.REVERSE_DNS_BATCH))

        logger.debug(f"Enrichment produced {len(asns)} ASN records and {len(reverse_dns)} PTR names")
        return Enrichment(asns=asns, reverse_dns=reverse_dns, outcomes=tuple(outcomes))

    @staticmethod
    def merge_asn_records(records: Iterable[Optional[EnrichmentRecord]]) -> Tuple[EnrichmentRecord, ...]:
        """
        Drop failed lookups and keep the first record per ASN.

        Records without an ASN carry no match signal of their own and are
        all kept for reporting.
        """
        seen: Set[int] = set()
        merged: List[EnrichmentRecord] = []
        for record in records:
            if record is None:
                continue
            if record.asn is not None:
                if record.asn in seen:
                    continue
                seen.add(record.asn)
            merged.append(record)
        return tuple(merged)

    @staticmethod
    def merge_reverse_dns(names: Iterable[Optional[str]]) -> Tuple[str, ...]:
        return tuple(sorted({name for name in names if name}))
