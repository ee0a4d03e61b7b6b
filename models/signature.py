from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple


@dataclass(frozen=True)
class SignatureEntry:
    """Known fingerprints of a single CDN provider."""
    provider: str
    asns: Tuple[int, ...] = ()
    domain_suffixes: Tuple[str, ...] = () # Matched as substrings of CNAME/PTR hostnames
    header_names: Tuple[str, ...] = () # Case-sensitive response header names
    server_tokens: Tuple[str, ...] = () # Substrings of the `server` header value


@dataclass(frozen=True)
class SignatureCatalog:
    """Read-only, ordered collection of provider signatures.

    Iteration order is the order entries were loaded in; the classifier relies
    on it to break ties between providers with equal weight.
    """
    entries: Tuple[SignatureEntry, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[SignatureEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def providers(self) -> Tuple[str, ...]:
        return tuple(entry.provider for entry in self.entries)

    def get(self, provider: str) -> Optional[SignatureEntry]:
        for entry in self.entries:
            if entry.provider == provider:
                return entry
        return None
