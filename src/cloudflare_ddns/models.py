"""
Data models for Cloudflare DDNS.

This module defines the Cloudflare API v4 payloads used by the updater:
the generic response envelope, zones, DNS records and the typed body of
a record update, plus the enumerations for record types and IP versions.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

# Fixed TTL (seconds) written on every record update
RECORD_TTL = 120

T = TypeVar("T")


class RecordType(StrEnum):
    """
    DNS record types managed by the updater.

    Attributes
    ----------
    A : str
        IPv4 address record.
    AAAA : str
        IPv6 address record.
    """

    A = "A"
    AAAA = "AAAA"


class IPVersion(StrEnum):
    """
    IP protocol versions.

    The value doubles as the subdomain prefix of the external echo
    service (``v4.ifcfg.org``, ``v6.ifcfg.org``).
    """

    V4 = "v4"
    V6 = "v6"

    @property
    def record_type(self) -> RecordType:
        """Get the DNS record type holding addresses of this version."""
        return RecordType.A if self is IPVersion.V4 else RecordType.AAAA


class ApiError(BaseModel):
    """
    Error entry of a Cloudflare API response.

    Attributes
    ----------
    code : int
        Cloudflare error code.
    message : str
        Human-readable error message.
    """

    code: int = 0
    message: str = ""

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class Zone(BaseModel):
    """
    A Cloudflare zone (DNS-managed domain).

    Attributes
    ----------
    id : str
        Zone identifier.
    name : str
        Zone (domain) name.
    """

    id: str
    name: str = ""


class Record(BaseModel):
    """
    A Cloudflare DNS record.

    Attributes
    ----------
    id : str
        Record identifier.
    type : str
        Record type ("A", "AAAA", "CNAME", ...).
    name : str
        Fully qualified record name.
    content : str
        Current record value.
    locked : bool
        Whether the record is locked by Cloudflare.
    zone_id : str
        Identifier of the owning zone.
    zone_name : str
        Name of the owning zone.
    """

    id: str
    type: str
    name: str
    content: str = ""
    locked: bool = False
    zone_id: str = ""
    zone_name: str = ""


class ResponseEnvelope(BaseModel, Generic[T]):
    """
    Standard wrapper of every Cloudflare API response.

    Attributes
    ----------
    success : bool
        Whether the call succeeded.
    errors : list[ApiError]
        Errors reported by the API, in order.
    messages : list[str | dict[str, Any]]
        Informational messages.
    result : T | None
        The response payload.
    """

    success: bool = False
    errors: list[ApiError] = Field(default_factory=list)
    messages: list[str | dict[str, Any]] = Field(default_factory=list)
    result: T | None = None

    def first_error(self) -> ApiError:
        """
        Get the error surfaced for a failed call.

        Returns
        -------
        ApiError
            The first reported error, or a placeholder when the API
            failed without listing any.
        """
        if self.errors:
            return self.errors[0]
        return ApiError(code=0, message="Unknown error")


class RecordUpdate(BaseModel):
    """
    Body of a full DNS record replacement (PUT).

    Attributes
    ----------
    id : str
        Record identifier.
    content : str
        New record value.
    type : str
        Record type, kept unchanged.
    name : str
        Record name, kept unchanged.
    ttl : int
        Time to live in seconds.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    type: str
    name: str
    ttl: int = RECORD_TTL


class UpdateResult(BaseModel):
    """
    Outcome of one record update.

    Attributes
    ----------
    record : Record
        The record as it was before the update.
    address : str
        The address written (or found already in place).
    action : Literal["updated", "unchanged"]
        What the updater did.
    """

    record: Record
    address: str
    action: Literal["updated", "unchanged"]
