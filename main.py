import asyncio
import argparse
import json
import logging
import sys
from core.engine import Engine
from core.exceptions import CatalogError, InvalidDomainError
from core.rules_validator import has_errors, validate_catalog_data
from core.signal_registry import SignalRegistry
from fetch.asn_client import DEFAULT_ASN_URL
from fetch.dns_client import DEFAULT_DOH_URL
from fetch.headers_client import DEFAULT_HEADERS_URL
from fetch.http_client import DEFAULT_TIMEOUT
from core.discovery import MAX_DNS_REQUESTS
from models.detection import DetectionResult
from rules.rules_loader import build_catalog, read_rules_file

def _truncate_value(value: str, max_length: int = 200) -> str:
    """Truncate a string to max_length, adding ellipsis if truncated."""
    if not value:
        return value
    if len(value) <= max_length:
        return value
    return value[:max_length] + "..."

def _serialize_result(result: DetectionResult, value_max_length: int = 200):
    serialized = result.to_dict()
    serialized["confidence_percent"] = result.confidence_percent
    serialized["data"]["headers"] = {
        k: _truncate_value(v, value_max_length) for k, v in serialized["data"]["headers"].items()
    }
    return serialized

def _render_text(result: DetectionResult) -> str:
    lines = [f"Results for {result.domain}", ""]
    if result.cdn_detected:
        lines.append(result.cdn_provider)
        lines.append(f"Confidence: {result.confidence_percent}%")
        if result.tied_providers:
            lines.append(f"Tied with: {', '.join(result.tied_providers[1:])}")
        lines.append("")
        lines.append("Evidence:")
        lines.extend(f"  - {e.message}" for e in result.evidence)
    else:
        lines.append("No CDN detected")
        lines.append("This domain doesn't appear to be using a known CDN provider.")
    return "\n".join(lines)

def main(argv=None):
    parser = argparse.ArgumentParser(description="Identify the CDN fronting a domain")
    parser.add_argument("domain", nargs="?", help="Target domain or URL (e.g., example.com)")
    parser.add_argument("--json", action="store_true", help="Print the full detection result as JSON")
    parser.add_argument("--value-max-length", type=int, default=200, help="Maximum length for header values in JSON output (default: 200, use 0 for unlimited)")
    parser.add_argument("--log-level", type=str, default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity level (default: WARNING)")
    parser.add_argument("--exclude", type=str, nargs="+", help="Exclude specific signals (e.g., --exclude server header)")
    parser.add_argument("--list-signals", action="store_true", help="List all available signals and exit")
    parser.add_argument("--rules-file", type=str, help="Path to a YAML signature catalog (default: bundled catalog)")
    parser.add_argument("--validate-rules", action="store_true", help="Validate the signature catalog and exit")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help=f"Per-request timeout in seconds (default: {DEFAULT_TIMEOUT})")
    parser.add_argument("--max-dns-requests", type=int, default=MAX_DNS_REQUESTS, help=f"DNS request budget for CNAME discovery (default: {MAX_DNS_REQUESTS})")
    parser.add_argument("--doh-url", type=str, default=DEFAULT_DOH_URL, help="DNS-over-HTTPS JSON endpoint")
    parser.add_argument("--asn-url", type=str, default=DEFAULT_ASN_URL, help="IP organization endpoint with an {ip} placeholder")
    parser.add_argument("--headers-url", type=str, default=DEFAULT_HEADERS_URL, help="Raw HTTP header dump endpoint")
    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, args.log_level),
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)

    # List signals if requested
    if args.list_signals:
        print("Available signals:")
        for name in SignalRegistry.get_all_names():
            print(f"  - {name} (weight {SignalRegistry.get_weight(name)})")
        return 0

    if args.validate_rules:
        try:
            issues = validate_catalog_data(read_rules_file(args.rules_file))
        except CatalogError as e:
            print(e.message)
            return 1
        for issue in issues:
            print(issue)
        if has_errors(issues):
            return 1
        print("Signature catalog is valid")
        return 0

    # Require a domain if not listing or validating
    if not args.domain:
        parser.error("domain is required unless using --list-signals or --validate-rules")

    exclude_set = set(args.exclude) if args.exclude else set()
    available_signals = set(SignalRegistry.get_all_names())
    invalid_excludes = exclude_set - available_signals
    if invalid_excludes:
        logger.error(f"Invalid signal names: {', '.join(sorted(invalid_excludes))}")
        logger.info(f"Available signals: {', '.join(sorted(available_signals))}")
        return 2

    try:
        catalog = build_catalog(read_rules_file(args.rules_file))
    except CatalogError as e:
        logger.error(e.message)
        for problem in e.problems:
            logger.error(f"  {problem}")
        return 1

    async def run():
        engine = Engine(
            catalog=catalog,
            exclude_signals=exclude_set,
            timeout=args.timeout,
            max_dns_requests=args.max_dns_requests,
            doh_url=args.doh_url,
            asn_url=args.asn_url,
            headers_url=args.headers_url,
        )
        return await engine.detect(args.domain)

    try:
        result = asyncio.run(run())
    except InvalidDomainError as e:
        print(f"Detection failed: {e.message}")
        return 1
    except Exception as e:
        logger.error(f"Detection failed for {args.domain}: {e}", exc_info=True)
        print(f"Detection failed: {e}")
        return 1

    if args.json:
        # Use unlimited length if value_max_length is 0
        max_len = None if args.value_max_length == 0 else args.value_max_length
        print(json.dumps(_serialize_result(result, max_len or 999999), indent=2))
    else:
        print(_render_text(result))
    return 0

if __name__ == "__main__":
    sys.exit(main())
