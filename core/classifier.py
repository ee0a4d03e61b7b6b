"""Weighted provider classification over collected evidence."""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from core.context import CollectedData
from core.signal_registry import SignalRegistry
from models.detection import Evidence
from models.signature import SignatureCatalog

# Import all signal matchers to trigger @SignalRegistry.register decorators.
# Import order is evaluation order: asn, hostname, header, server.
import analyzers.asn
import analyzers.network
import analyzers.headers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    provider: Optional[str]
    confidence: float
    evidence: Tuple[Evidence, ...]
    tied_providers: Tuple[str, ...] = ()

    @property
    def detected(self) -> bool:
        return self.provider is not None


class Classifier:
    """Scores every catalog entry against collected data and picks a winner."""

    def __init__(self, catalog: SignatureCatalog, exclude_signals: Set[str] = None):
        self.catalog = catalog
        self.signals = SignalRegistry.instantiate_all(exclude=exclude_signals)

    def collect_evidence(self, data: CollectedData) -> List[Evidence]:
        evidence: List[Evidence] = []
        for entry in self.catalog:
            for signal in self.signals.values():
                evidence.extend(signal.match(entry, data))
        return evidence

    def classify(self, data: CollectedData) -> Classification:
        evidence = self.collect_evidence(data)
        if not evidence:
            return Classification(provider=None, confidence=0.0, evidence=())

        # Insertion order follows catalog order, which decides ties
        weights: Dict[str, int] = {}
        total = 0
        for e in evidence:
            weights[e.provider] = weights.get(e.provider, 0) + e.weight
            total += e.weight

        best = max(weights.values())
        tied = tuple(provider for provider, weight in weights.items() if weight == best)
        winner = tied[0]
        if len(tied) > 1:
            logger.warning(f"Tie between {', '.join(tied)} at weight {best}; picking {winner}")

        confidence = best / total
        logger.debug(f"Classified as {winner} ({best}/{total})")
        return Classification(
            provider=winner,
            confidence=confidence,
            evidence=tuple(evidence),
            tied_providers=tied if len(tied) > 1 else (),
        )
