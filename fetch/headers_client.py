import logging
from typing import Dict, Optional

from fetch.http_client import fetch_text

# Raw header dump endpoint; the domain is passed as the `q` parameter
DEFAULT_HEADERS_URL = "https://api.hackertarget.com/httpheaders/"

def parse_header_dump(text: str) -> Dict[str, str]:
    """
    Parse a plain-text header dump into a dictionary.

    Status lines, blank lines and lines without a colon are skipped. Names
    keep the case they were received in; a repeated name keeps its last value.
    """
    headers: Dict[str, str] = {}
    for line in text.splitlines():
        if not line.strip() or line.startswith("HTTP/"):
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        headers[key.strip()] = value.strip()
    return headers

async def fetch_headers(
    domain: str,
    timeout: Optional[float] = None,
    headers_url: str = DEFAULT_HEADERS_URL,
) -> Dict[str, str]:
    """
    Fetches the response headers served for a domain.

    Raises:
        ResolverTimeout, LookupFailure
    """
    logger = logging.getLogger(__name__)
    text = await fetch_text(headers_url, timeout=timeout, params={"q": domain})
    headers = parse_header_dump(text)
    logger.debug(f"Headers for {domain}: {len(headers)} entries")
    return headers
