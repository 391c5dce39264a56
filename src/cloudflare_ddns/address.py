"""
External address lookup.

The caller's public address is read from an echo service that answers a
plain GET on its "v4." and "v6." subdomains with the address as text.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from cloudflare_ddns.exceptions import AddressLookupError

if TYPE_CHECKING:
    from typing import Final, Self

    from cloudflare_ddns.config import ExternalSourceConfig
    from cloudflare_ddns.models import IPVersion


# HTTP timeout in seconds
HTTP_TIMEOUT: Final[float] = 30.0


logger = logging.getLogger(__name__)


class ExternalAddressFetcher:
    """
    Fetch the external IPv4/IPv6 address from an echo service.

    Parameters
    ----------
    source : str
        Echo service host (e.g., "ifcfg.org").
    use_ssl : bool
        Whether to query the service over HTTPS.
    client : httpx.Client | None, optional
        HTTP client to use. A new one is created (and owned) if None.
    """

    def __init__(
        self,
        source: str,
        *,
        use_ssl: bool = True,
        client: httpx.Client | None = None,
    ) -> None:
        self.source = source
        self.use_ssl = use_ssl
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=HTTP_TIMEOUT)

    @classmethod
    def from_config(
        cls,
        config: ExternalSourceConfig,
        client: httpx.Client | None = None,
    ) -> Self:
        """Build a fetcher for the configured echo service."""
        return cls(config.host, use_ssl=config.ssl, client=client)

    def build_url(self, version: IPVersion) -> str:
        """
        Build the echo service URL for an IP version.

        Parameters
        ----------
        version : IPVersion
            The IP version to look up.

        Returns
        -------
        str
            URL of the form "https://v4.ifcfg.org".
        """
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{version.value}.{self.source}"

    def get_address(self, version: IPVersion) -> str:
        """
        Get the external address for an IP version.

        Parameters
        ----------
        version : IPVersion
            The IP version to look up.

        Returns
        -------
        str
            The response body with surrounding whitespace removed.

        Raises
        ------
        AddressLookupError
            If the request fails, the service answers with an error status,
            or the body is empty.
        """
        url = self.build_url(version)

        try:
            response = self._client.get(url)
        except httpx.RequestError as e:
            msg = f"Failed to get external {version} address from {url}: {e}"
            raise AddressLookupError(msg, url) from e

        logger.debug("GET %s -> %d", url, response.status_code)

        if not response.is_success:
            msg = (
                f"Failed to get external {version} address from {url}: "
                f"HTTP {response.status_code}"
            )
            raise AddressLookupError(msg, url)

        address = response.text.strip()
        if not address:
            msg = f"Empty response from {url}"
            raise AddressLookupError(msg, url)

        return address

    def close(self) -> None:
        """Close the underlying HTTP client if this fetcher created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
