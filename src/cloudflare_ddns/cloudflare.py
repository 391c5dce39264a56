"""
Cloudflare DNS API client.

This module implements the parts of the CloudFlare API v4 needed to update
DNS records: zone lookup, record listing and full record replacement.
Requests are authenticated with the account email and Global API Key.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from cloudflare_ddns.exceptions import (
    CloudflareAPIError,
    CloudflareRequestError,
    ZoneNotFoundError,
)
from cloudflare_ddns.models import Record, RecordUpdate, ResponseEnvelope, Zone

if TYPE_CHECKING:
    from typing import Final, Self

    from cloudflare_ddns.config import CloudflareConfig


# CloudFlare API base URL
CF_API_BASE: Final[str] = "https://api.cloudflare.com/client/v4"

# HTTP timeout in seconds
HTTP_TIMEOUT: Final[float] = 30.0

# Records returned by a single listing call
RECORDS_PER_PAGE: Final[int] = 20


logger = logging.getLogger(__name__)


class CloudflareClient:
    """
    Minimal CloudFlare DNS API client.

    Parameters
    ----------
    email : str
        Account email, sent as "X-Auth-Email".
    api_key : str
        Global API Key, sent as "X-Auth-Key".
    client : httpx.Client | None, optional
        HTTP client to use. A new one is created (and owned) if None.
    base_url : str, optional
        API base URL.
    """

    def __init__(
        self,
        email: str,
        api_key: str,
        *,
        client: httpx.Client | None = None,
        base_url: str = CF_API_BASE,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._headers = {
            "X-Auth-Email": email,
            "X-Auth-Key": api_key,
            "Content-Type": "application/json",
        }
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=HTTP_TIMEOUT)

    @classmethod
    def from_config(
        cls,
        config: CloudflareConfig,
        client: httpx.Client | None = None,
    ) -> Self:
        """Build a client authenticated with the configured credentials."""
        return cls(config.email, config.api_key, client=client)

    @staticmethod
    def build_fqdn(zone: str, record: str) -> str:
        """
        Build the fully qualified domain name.

        Parameters
        ----------
        zone : str
            The DNS zone (root domain).
        record : str
            The host record name.

        Returns
        -------
        str
            The FQDN.
        """
        if record in {"@", ""}:
            return zone
        return f"{record}.{zone}"

    def resolve_zone(self, domain: str) -> str:
        """
        Get the Zone ID for a domain.

        Parameters
        ----------
        domain : str
            The DNS zone name.

        Returns
        -------
        str
            The ID of the first active zone matching the name.

        Raises
        ------
        CloudflareAPIError
            If the API reports a failure.
        ZoneNotFoundError
            If no active zone matches the name.
        CloudflareRequestError
            If the request fails or the response cannot be decoded.
        """
        params = {
            "name": domain,
            "status": "active",
            "page": 1,
            "per_page": 1,
            "order": "status",
            "direction": "desc",
            "match": "all",
        }
        envelope = self._request(
            "GET",
            "/zones",
            ResponseEnvelope[list[Zone]],
            params=params,
        )

        zones = envelope.result or []
        if not zones:
            raise ZoneNotFoundError(domain)
        return zones[0].id

    def list_records(self, zone_id: str, name: str) -> list[Record]:
        """
        Get the DNS records of a zone matching a name.

        Parameters
        ----------
        zone_id : str
            The zone ID.
        name : str
            The fully qualified record name.

        Returns
        -------
        list[Record]
            Matching records, at most one page.

        Raises
        ------
        CloudflareAPIError
            If the API reports a failure.
        CloudflareRequestError
            If the request fails or the response cannot be decoded.
        """
        params = {
            "name": name,
            "page": 1,
            "per_page": RECORDS_PER_PAGE,
            "order": "type",
            "direction": "desc",
            "match": "all",
        }
        envelope = self._request(
            "GET",
            f"/zones/{zone_id}/dns_records",
            ResponseEnvelope[list[Record]],
            params=params,
        )
        return list(envelope.result or [])

    def update_record(
        self,
        zone_id: str,
        record_id: str,
        record_type: str,
        record_name: str,
        content: str,
    ) -> None:
        """
        Replace the content of a DNS record.

        The type and name are written back unchanged; the TTL is reset to
        the fixed update TTL. The write is issued even if the content is
        already current. Only the success flag of the reply is checked; its
        result is not decoded.

        Parameters
        ----------
        zone_id : str
            The zone ID.
        record_id : str
            The record ID.
        record_type : str
            The record type.
        record_name : str
            The record name.
        content : str
            The new record value.

        Raises
        ------
        CloudflareAPIError
            If the API reports a failure.
        CloudflareRequestError
            If the request fails or the response cannot be decoded.
        """
        payload = RecordUpdate(
            id=record_id,
            content=content,
            type=record_type,
            name=record_name,
        )
        self._request(
            "PUT",
            f"/zones/{zone_id}/dns_records/{record_id}",
            ResponseEnvelope[Any],
            json=payload.model_dump(),
        )

    def _request(
        self,
        method: str,
        path: str,
        envelope_type: type[ResponseEnvelope[Any]],
        *,
        params: dict[str, str | int] | None = None,
        json: dict[str, Any] | None = None,
    ) -> ResponseEnvelope[Any]:
        """
        Issue an API call and unwrap its response envelope.

        Parameters
        ----------
        method : str
            HTTP method.
        path : str
            Path below the API base URL.
        envelope_type : type[ResponseEnvelope[Any]]
            Parametrised envelope model to decode the body with.
        params : dict[str, str | int] | None, optional
            Query string parameters.
        json : dict[str, Any] | None, optional
            JSON request body.

        Returns
        -------
        ResponseEnvelope[Any]
            The decoded envelope of a successful call.

        Raises
        ------
        CloudflareAPIError
            If the envelope reports ``success: false``.
        CloudflareRequestError
            If the request fails or the response cannot be decoded.
        """
        url = f"{self.base_url}{path}"

        try:
            response = self._client.request(
                method,
                url,
                headers=self._headers,
                params=params,
                json=json,
            )
        except httpx.RequestError as e:
            logger.error("[cloudflare] Network request failed: '%s'", e)  # noqa: TRY400
            msg = f"Request error: {e}"
            raise CloudflareRequestError(msg) from e

        logger.debug("[cloudflare] %s %s -> %d", method, url, response.status_code)
        logger.debug("[cloudflare] Response: %s", response.text)

        try:
            envelope = envelope_type.model_validate_json(response.content)
        except ValidationError as e:
            msg = (
                f"Unexpected response from {method} {path} "
                f"(HTTP {response.status_code}): {response.text[:200]!r}"
            )
            raise CloudflareRequestError(msg) from e

        if not envelope.success:
            error = envelope.first_error()
            raise CloudflareAPIError(error.code, error.message)

        return envelope

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
