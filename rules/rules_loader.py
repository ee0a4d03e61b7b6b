import logging
import os
import yaml
from typing import Any, Dict, List, Optional, Tuple
from core.exceptions import CatalogError
from core.rules_validator import has_errors, validate_catalog_data
from models.signature import SignatureCatalog, SignatureEntry

DEFAULT_RULES_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "cdn_signatures.yaml")

def _unique(values: Optional[List[Any]]) -> Tuple[Any, ...]:
    """De-duplicate while keeping file order."""
    return tuple(dict.fromkeys(values or []))

def read_rules_file(path: Optional[str] = None) -> Any:
    """Parse the raw YAML document of a catalog file."""
    path = path or DEFAULT_RULES_FILE
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f)
    except FileNotFoundError as e:
        raise CatalogError(f"Rules file not found: {path}") from e
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid YAML in rules file {path}: {e}") from e

def build_catalog(raw_entries: List[Dict[str, Any]]) -> SignatureCatalog:
    """
    Validates raw catalog data and builds the immutable catalog.

    Raises:
        CatalogError: the data contains validation errors
    """
    logger = logging.getLogger(__name__)
    issues = validate_catalog_data(raw_entries)
    if has_errors(issues):
        problems = [str(issue) for issue in issues if issue.severity == "error"]
        raise CatalogError(f"Signature catalog has {len(problems)} error(s)", problems)
    for issue in issues:
        logger.warning(f"Signature catalog: {issue}")

    entries = [
        SignatureEntry(
            provider=item["provider"],
            asns=_unique(item.get("asns")),
            domain_suffixes=_unique(item.get("domains")),
            header_names=_unique(item.get("headers")),
            server_tokens=_unique(item.get("servers")),
        )
        for item in raw_entries
    ]
    return SignatureCatalog(entries=tuple(entries))

def load_rules(path: Optional[str] = None) -> SignatureCatalog:
    """
    Loads CDN provider signatures from a YAML file.
    """
    logger = logging.getLogger(__name__)
    catalog = build_catalog(read_rules_file(path))
    logger.debug(f"Loaded {len(catalog)} provider signatures from {path or DEFAULT_RULES_FILE}")
    return catalog
