"""
Exception hierarchy for Cloudflare DDNS.

Exception Hierarchy:
    CloudflareDDNSError (Base)
    ├─ AddressLookupError      - External IP echo service failed
    ├─ CloudflareRequestError  - Transport failure or undecodable API reply
    ├─ CloudflareAPIError      - API reported success=false
    └─ ZoneNotFoundError       - No active zone matched the domain
"""

from __future__ import annotations


class CloudflareDDNSError(Exception):
    """Base exception for all Cloudflare DDNS errors."""


class AddressLookupError(CloudflareDDNSError):
    """
    Raised when the external IP address cannot be determined.

    Attributes
    ----------
    url : str
        The echo service URL that was queried.
    """

    def __init__(self, message: str, url: str) -> None:
        self.url = url
        super().__init__(message)


class CloudflareRequestError(CloudflareDDNSError):
    """Raised when a Cloudflare API call fails below the API level."""


class CloudflareAPIError(CloudflareDDNSError):
    """
    Raised when the Cloudflare API answers with ``success: false``.

    Only the first error of the response envelope is carried; its string
    form is ``"{code}: {message}"``.

    Attributes
    ----------
    code : int
        Cloudflare error code.
    message : str
        Cloudflare error message.
    """

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")


class ZoneNotFoundError(CloudflareDDNSError):
    """Raised when no active zone matches the configured domain."""

    def __init__(self, domain: str) -> None:
        self.domain = domain
        super().__init__(f"Zone not found for domain: {domain}")
