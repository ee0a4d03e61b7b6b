import asyncio
import logging
from typing import Dict, Optional, Set, Tuple

from core.aggregator import Enrichment, EvidenceAggregator
from core.classifier import Classifier
from core.context import CollectedData
from core.discovery import MAX_DNS_REQUESTS, discover
from core.domain_utils import normalize_domain
from core.exceptions import ResolverError
from fetch.asn_client import DEFAULT_ASN_URL, lookup_asn
from fetch.dns_client import DEFAULT_DOH_URL, query_dns, reverse_lookup
from fetch.headers_client import DEFAULT_HEADERS_URL, fetch_headers
from fetch.http_client import DEFAULT_TIMEOUT
from models.detection import DetectionResult
from models.network import BatchOutcome, DiscoveryResult
from models.signature import SignatureCatalog
from rules.rules_loader import load_rules

HEADERS_OUTCOME = "headers"

class Engine:
    def __init__(
        self,
        catalog: Optional[SignatureCatalog] = None,
        exclude_signals: Set[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_dns_requests: int = MAX_DNS_REQUESTS,
        doh_url: str = DEFAULT_DOH_URL,
        asn_url: str = DEFAULT_ASN_URL,
        headers_url: str = DEFAULT_HEADERS_URL,
    ):
        """Initialize the engine with a signature catalog and lookup settings.

        Args:
            catalog: Provider signatures; loaded from the bundled rules file when omitted
            exclude_signals: Set of signal names to leave out of classification (e.g., {'server'})
            timeout: Per-request timeout in seconds
            max_dns_requests: DNS request budget for CNAME discovery
            doh_url: DNS-over-HTTPS JSON endpoint
            asn_url: IP organization endpoint, with an {ip} placeholder
            headers_url: Raw header dump endpoint
        """
        self.logger = logging.getLogger(__name__)
        self.catalog = catalog if catalog is not None else load_rules()
        self.logger.info(f"Loaded {len(self.catalog)} CDN signatures")

        self.classifier = Classifier(self.catalog, exclude_signals=exclude_signals)
        if exclude_signals:
            self.logger.info(f"Excluded signals: {', '.join(sorted(exclude_signals))}")

        self.timeout = timeout
        self.max_dns_requests = max_dns_requests
        self.doh_url = doh_url
        self.asn_url = asn_url
        self.headers_url = headers_url

    async def dns_lookup(self, hostname: str):
        return await query_dns(hostname, "A", timeout=self.timeout, doh_url=self.doh_url)

    async def asn_lookup(self, ip: str):
        return await lookup_asn(ip, timeout=self.timeout, asn_url=self.asn_url)

    async def reverse_lookup(self, ip: str):
        return await reverse_lookup(ip, timeout=self.timeout, doh_url=self.doh_url)

    async def header_lookup(self, domain: str) -> Dict[str, str]:
        return await fetch_headers(domain, timeout=self.timeout, headers_url=self.headers_url)

    async def detect(self, domain: str) -> DetectionResult:
        """Run discovery, enrichment and classification for one domain.

        Lookup failures only remove data; the only errors raised are for input
        that cannot be normalized into a hostname.
        """
        domain = normalize_domain(domain)
        self.logger.info(f"Starting CDN detection for {domain}")

        # Header fetch does not depend on DNS, so it runs alongside discovery
        (headers, headers_outcome), (discovery, enrichment) = await asyncio.gather(
            self._collect_headers(domain),
            self._collect_network(domain),
        )

        data = CollectedData(
            headers=headers,
            cname_chain=discovery.hostnames_visited,
            ips=tuple(sorted(discovery.ips)),
            asns=enrichment.asns,
            reverse_dns=enrichment.reverse_dns,
            outcomes=enrichment.outcomes + (headers_outcome,),
            dns_requests=discovery.requests_made,
        )

        classification = self.classifier.classify(data)
        result = DetectionResult(
            domain=domain,
            cdn_detected=classification.detected,
            cdn_provider=classification.provider,
            confidence=classification.confidence,
            evidence=classification.evidence,
            data=data,
            tied_providers=classification.tied_providers,
        )

        if result.cdn_detected:
            self.logger.info(f"{domain}: {result.cdn_provider} ({result.confidence_percent}% confidence, {len(result.evidence)} evidence)")
        else:
            self.logger.info(f"{domain}: no CDN detected")
        return result

    async def _collect_headers(self, domain: str) -> Tuple[Dict[str, str], BatchOutcome]:
        try:
            headers = await self.header_lookup(domain)
        except ResolverError as e:
            self.logger.warning(f"Could not get headers for {domain}: {e}")
            return {}, BatchOutcome(name=HEADERS_OUTCOME, ok=False, error=str(e))
        return headers, BatchOutcome(name=HEADERS_OUTCOME)

    async def _collect_network(self, domain: str) -> Tuple[DiscoveryResult, Enrichment]:
        discovery = await discover(domain, self.dns_lookup, max_requests=self.max_dns_requests)
        if not discovery.ips:
            self.logger.warning(
                f"Could not resolve {domain} to any IP after {discovery.requests_made} DNS requests; "
                "continuing without ASN and reverse DNS data"
            )

        aggregator = EvidenceAggregator(
            asn_lookup=self.asn_lookup,
            reverse_lookup=self.reverse_lookup,
        )
        enrichment = await aggregator.enrich(discovery.ips)
        return discovery, enrichment
