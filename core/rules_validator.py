"""
Validation of raw signature catalog data before it is turned into entries.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List


LIST_FIELDS = ("asns", "domains", "headers", "servers")


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem found in the catalog."""
    severity: str  # 'error' or 'warning'
    provider: str
    message: str

    def __str__(self) -> str:
        return f"[{self.severity}] {self.provider}: {self.message}"


def validate_catalog_data(raw_entries: Any) -> List[ValidationIssue]:
    """
    Check raw catalog data loaded from YAML.

    Errors make the catalog unusable: a non-list document, entries that are
    not mappings, missing or duplicate provider names, list fields of the
    wrong type and ASNs that are not integers.
    Warnings flag entries that can never match and signatures claimed by more
    than one provider.

    Args:
        raw_entries: The parsed YAML document

    Returns:
        List of issues, errors first in document order
    """
    if not isinstance(raw_entries, list):
        return [ValidationIssue("error", "<catalog>", "Catalog must be a list of provider entries")]

    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []
    seen_providers: Dict[str, int] = {}

    for index, entry in enumerate(raw_entries):
        label = f"<entry {index}>"
        if not isinstance(entry, dict):
            errors.append(ValidationIssue("error", label, "Entry must be a mapping"))
            continue

        provider = entry.get("provider")
        if not isinstance(provider, str) or not provider.strip():
            errors.append(ValidationIssue("error", label, "Missing provider name"))
            continue

        if provider in seen_providers:
            errors.append(ValidationIssue("error", provider, f"Duplicate provider (first defined as entry {seen_providers[provider]})"))
        else:
            seen_providers[provider] = index

        for field_name in LIST_FIELDS:
            values = entry.get(field_name)
            if values is None:
                continue
            if not isinstance(values, list):
                errors.append(ValidationIssue("error", provider, f"'{field_name}' must be a list"))
                continue
            for value in values:
                if field_name == "asns":
                    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                        errors.append(ValidationIssue("error", provider, f"ASN {value!r} is not a positive integer"))
                elif not isinstance(value, str) or not value:
                    errors.append(ValidationIssue("error", provider, f"'{field_name}' value {value!r} is not a non-empty string"))

        if not any(entry.get(field_name) for field_name in LIST_FIELDS):
            warnings.append(ValidationIssue("warning", provider, "Entry has no signatures and can never match"))

    warnings.extend(_detect_overlaps(raw_entries, "asns", "ASN"))
    warnings.extend(_detect_overlaps(raw_entries, "domains", "Domain suffix"))
    return errors + warnings


def _detect_overlaps(raw_entries: List[Any], field_name: str, label: str) -> List[ValidationIssue]:
    """Flag signature values listed by multiple providers."""
    owners = defaultdict(list)
    for entry in raw_entries:
        if not isinstance(entry, dict) or not isinstance(entry.get(field_name), list):
            continue
        provider = entry.get("provider")
        for value in entry[field_name]:
            try:
                if provider not in owners[value]:
                    owners[value].append(provider)
            except TypeError:
                # Unhashable values are already reported as errors
                continue

    return [
        ValidationIssue("warning", providers[0], f"{label} {value} also claimed by {', '.join(providers[1:])}")
        for value, providers in owners.items()
        if len(providers) > 1
    ]


def has_errors(issues: List[ValidationIssue]) -> bool:
    return any(issue.severity == "error" for issue in issues)
