from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from models.network import BatchOutcome, EnrichmentRecord

@dataclass(frozen=True)
class CollectedData:
    """Raw data gathered for one detection, before classification."""
    headers: Dict[str, str] = field(default_factory=dict) # Names as received (case-sensitive)
    cname_chain: Tuple[str, ...] = () # Every hostname visited during discovery
    ips: Tuple[str, ...] = ()
    asns: Tuple[EnrichmentRecord, ...] = () # Deduplicated by ASN
    reverse_dns: Tuple[str, ...] = ()
    outcomes: Tuple[BatchOutcome, ...] = ()
    dns_requests: int = 0

    @property
    def resolved(self) -> bool:
        return bool(self.ips)

    def outcome(self, name: str) -> BatchOutcome:
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome
        return BatchOutcome(name=name, ok=False, error="not run")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "headers": dict(self.headers),
            "cname_chain": list(self.cname_chain),
            "ips": list(self.ips),
            "asns": [
                {
                    "ip": r.ip,
                    "asn": r.asn,
                    "asn_status": r.asn_status.value,
                    "organization": r.organization,
                    "country": r.country,
                    "city": r.city,
                }
                for r in self.asns
            ],
            "reverse_dns": list(self.reverse_dns),
            "outcomes": {
                o.name: {"ok": o.ok, "error": o.error} for o in self.outcomes
            },
            "dns_requests": self.dns_requests,
        }
