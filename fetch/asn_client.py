import logging
import re
from typing import Optional, Tuple

from core.exceptions import ResolverError
from fetch.http_client import fetch_json
from models.network import AsnStatus, EnrichmentRecord

# IP organization lookup endpoint; {ip} is substituted
DEFAULT_ASN_URL = "https://ipinfo.io/{ip}/json"

_ASN_TOKEN = re.compile(r"^AS(\d+)\b", re.IGNORECASE)

def parse_asn(organization: Optional[str]) -> Tuple[Optional[int], AsnStatus]:
    """Extract the ASN from an organization string such as "AS13335 Cloudflare, Inc."."""
    if organization is None:
        return None, AsnStatus.MISSING
    if not isinstance(organization, str):
        return None, AsnStatus.UNPARSEABLE
    if not organization.strip():
        return None, AsnStatus.MISSING
    match = _ASN_TOKEN.match(organization.strip())
    if not match:
        return None, AsnStatus.UNPARSEABLE
    return int(match.group(1)), AsnStatus.FOUND

async def lookup_asn(
    ip: str,
    timeout: Optional[float] = None,
    asn_url: str = DEFAULT_ASN_URL,
) -> Optional[EnrichmentRecord]:
    """
    Looks up the autonomous system and organization that announce an IP.

    Returns None when the request fails; a record with asn=None when the
    response carries no usable ASN.
    """
    logger = logging.getLogger(__name__)
    url = asn_url.format(ip=ip)
    try:
        data = await fetch_json(url, timeout=timeout)
    except ResolverError as e:
        logger.warning(f"ASN lookup failed for {ip}: {e}")
        return None

    raw_org = data.get("org")
    asn, status = parse_asn(raw_org)
    # Non-string organizations are kept out of the record
    organization = (raw_org or None) if isinstance(raw_org, str) else None
    if status is AsnStatus.UNPARSEABLE:
        logger.debug(f"Could not parse ASN from organization {raw_org!r} for {ip}")

    record = EnrichmentRecord(
        ip=ip,
        asn=asn,
        asn_status=status,
        organization=organization,
        country=data.get("country"),
        city=data.get("city"),
    )
    logger.debug(f"ASN {ip}: {record.asn} ({record.asn_status.value})")
    return record
