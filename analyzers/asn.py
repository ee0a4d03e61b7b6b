from typing import List
import logging
from core.context import CollectedData
from core.signal_registry import SignalRegistry
from models.detection import Evidence
from models.signature import SignatureEntry

@SignalRegistry.register("asn", weight=100)
class AsnSignal:
    """Matches enrichment ASNs against a provider's known networks."""

    def __init__(self, name: str, weight: int):
        self.name = name
        self.weight = weight

    def match(self, entry: SignatureEntry, data: CollectedData) -> List[Evidence]:
        logger = logging.getLogger(__name__)
        evidence: List[Evidence] = []

        for asn in entry.asns:
            for record in data.asns:
                if record.asn == asn:
                    logger.debug(f"AsnSignal matched {entry.provider} on AS{asn} ({record.ip})")
                    evidence.append(
                        Evidence(
                            provider=entry.provider,
                            signal=self.name,
                            weight=self.weight,
                            message=f"ASN {asn} matches {entry.provider}",
                        )
                    )
        return evidence
