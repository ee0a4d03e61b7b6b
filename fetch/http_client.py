import httpx
import logging
from typing import Any, Dict, Optional

from core.exceptions import LookupFailure, ResolverTimeout

# Default timeout for every outbound lookup (in seconds)
DEFAULT_TIMEOUT = 5.0

async def fetch_url(
    url: str,
    timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, str]] = None,
) -> httpx.Response:
    """
    Issues a single GET request bounded by a timeout.

    Args:
        url: The URL to fetch
        timeout: Total request timeout in seconds (default: 5s)
        headers: Optional dictionary of HTTP headers
        params: Optional query parameters

    Returns:
        httpx.Response object with a 2xx status

    Raises:
        ResolverTimeout: the request did not finish within the timeout
        LookupFailure: transport error or non-2xx status
    """
    logger = logging.getLogger(__name__)
    timeout_value = timeout or DEFAULT_TIMEOUT
    logger.debug(f"HTTP GET {url} (timeout: {timeout_value}s)")

    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout_value), follow_redirects=True) as client:
            response = await client.get(url, headers=headers, params=params)
    except httpx.TimeoutException as e:
        logger.warning(f"HTTP timeout for {url}: {e}")
        raise ResolverTimeout(url, timeout_value) from e
    except httpx.RequestError as e:
        logger.warning(f"HTTP request error for {url}: {e}")
        raise LookupFailure(f"Request failed: {e}", url) from e

    logger.debug(f"HTTP {response.status_code} {url} ({len(response.content)} bytes)")
    if not response.is_success:
        raise LookupFailure(f"HTTP {response.status_code}", url)
    return response

async def fetch_json(
    url: str,
    timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Fetch a URL and decode its body as a JSON object."""
    response = await fetch_url(url, timeout=timeout, headers=headers, params=params)
    try:
        data = response.json()
    except ValueError as e:
        raise LookupFailure(f"Malformed JSON response: {e}", url) from e
    if not isinstance(data, dict):
        raise LookupFailure("Expected a JSON object", url)
    return data

async def fetch_text(
    url: str,
    timeout: Optional[float] = None,
    params: Optional[Dict[str, str]] = None,
) -> str:
    """Fetch a URL and return its body as text."""
    response = await fetch_url(url, timeout=timeout, params=params)
    return response.text
