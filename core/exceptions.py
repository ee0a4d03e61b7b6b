"""Exceptions raised by the detection engine and its resolvers.

Resolver errors are caught inside the engine and turned into missing data;
only InvalidDomainError and CatalogError are meant to reach callers.
"""

from typing import Any, Dict, Optional


class CDNDetectorException(Exception):
    """Base exception carrying a machine-readable error code."""

    error_code: str = "CDN_DETECTOR_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        response = {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response


# ============ Resolver Errors ============


class ResolverError(CDNDetectorException):
    """A single outbound lookup did not produce usable data."""

    error_code = "RESOLVER_ERROR"

    def __init__(self, message: str, url: str):
        super().__init__(message, details={"url": url})
        self.url = url


class ResolverTimeout(ResolverError):
    """The lookup exceeded its deadline."""

    error_code = "RESOLVER_TIMEOUT"

    def __init__(self, url: str, timeout: float):
        super().__init__(f"Request timeout after {timeout}s: {url}", url)
        self.details["timeout"] = timeout


class LookupFailure(ResolverError):
    """Transport error, non-2xx status or malformed response body."""

    error_code = "LOOKUP_FAILURE"


# ============ Caller Errors ============


class InvalidDomainError(CDNDetectorException):
    """Input could not be normalized into a DNS hostname."""

    error_code = "INVALID_DOMAIN"

    def __init__(self, domain: str, reason: str = "Invalid domain format"):
        super().__init__(f"{reason}: {domain!r}", details={"domain": domain, "reason": reason})


class CatalogError(CDNDetectorException):
    """The signature catalog is missing or malformed."""

    error_code = "CATALOG_ERROR"

    def __init__(self, message: str, problems: Optional[list] = None):
        super().__init__(message, details={"problems": problems} if problems else None)
        self.problems = problems or []
