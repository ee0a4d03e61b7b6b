from typing import List
import logging
from core.context import CollectedData
from core.signal_registry import SignalRegistry
from models.detection import Evidence
from models.signature import SignatureEntry

@SignalRegistry.register("hostname", weight=50)
class HostnameSignal:
    """Matches CNAME chain hostnames and PTR names against domain suffixes.

    The two sources are checked independently, so one suffix can produce
    evidence from both. Matching is a plain substring test.
    """

    def __init__(self, name: str, weight: int):
        self.name = name
        self.weight = weight

    def match(self, entry: SignatureEntry, data: CollectedData) -> List[Evidence]:
        logger = logging.getLogger(__name__)
        evidence: List[Evidence] = []

        for suffix in entry.domain_suffixes:
            for cname in data.cname_chain:
                if suffix in cname:
                    logger.debug(f"HostnameSignal matched {entry.provider} on CNAME {cname}")
                    evidence.append(
                        Evidence(
                            provider=entry.provider,
                            signal=self.name,
                            weight=self.weight,
                            message=f"CNAME {cname} matches {entry.provider}",
                        )
                    )
            for ptr in data.reverse_dns:
                if suffix in ptr:
                    logger.debug(f"HostnameSignal matched {entry.provider} on PTR {ptr}")
                    evidence.append(
                        Evidence(
                            provider=entry.provider,
                            signal=self.name,
                            weight=self.weight,
                            message=f"Reverse DNS {ptr} matches {entry.provider}",
                        )
                    )
        return evidence
