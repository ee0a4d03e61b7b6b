from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from core.context import CollectedData


@dataclass(frozen=True)
class Evidence:
    """Represents one weighted observation supporting a provider."""
    provider: str
    signal: str # e.g. 'asn', 'hostname', 'header', 'server'
    weight: int
    message: str


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of a single CDN detection."""
    domain: str
    cdn_detected: bool
    cdn_provider: Optional[str]
    confidence: float
    evidence: Tuple[Evidence, ...]
    data: 'CollectedData'
    tied_providers: Tuple[str, ...] = () # Providers sharing the winning weight, winner first

    @property
    def confidence_percent(self) -> int:
        return round(self.confidence * 100)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "cdn_detected": self.cdn_detected,
            "cdn_provider": self.cdn_provider,
            "confidence": self.confidence,
            "evidence": [
                {
                    "provider": e.provider,
                    "signal": e.signal,
                    "weight": e.weight,
                    "message": e.message,
                }
                for e in self.evidence
            ],
            "tied_providers": list(self.tied_providers),
            "data": self.data.to_dict(),
        }
