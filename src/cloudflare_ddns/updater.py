"""
DNS record updater.

Ties the external address lookup and the Cloudflare client together: resolve
the zone, list the records carrying the configured name and rewrite every
A/AAAA record whose protocol is enabled.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cloudflare_ddns.models import IPVersion, UpdateResult

if TYPE_CHECKING:
    from cloudflare_ddns.address import ExternalAddressFetcher
    from cloudflare_ddns.cloudflare import CloudflareClient
    from cloudflare_ddns.config import Config
    from cloudflare_ddns.models import Record


logger = logging.getLogger(__name__)


class DDNSUpdater:
    """
    Update the configured records to the current external addresses.

    Errors are never caught here: the first failure stops the run and is
    raised to the caller.

    Parameters
    ----------
    config : Config
        Application configuration.
    cloudflare : CloudflareClient
        Cloudflare API client.
    fetcher : ExternalAddressFetcher
        External address lookup.
    """

    def __init__(
        self,
        config: Config,
        cloudflare: CloudflareClient,
        fetcher: ExternalAddressFetcher,
    ) -> None:
        self.config = config
        self.cloudflare = cloudflare
        self.fetcher = fetcher

    @property
    def record_name(self) -> str:
        """Get the fully qualified name of the records to update."""
        target = self.config.cloudflare
        return self.cloudflare.build_fqdn(target.domain, target.subdomain)

    @property
    def enabled_versions(self) -> list[IPVersion]:
        """Get the IP versions whose records are updated."""
        versions = []
        if self.config.update.v4:
            versions.append(IPVersion.V4)
        if self.config.update.v6:
            versions.append(IPVersion.V6)
        return versions

    def version_for(self, record: Record) -> IPVersion | None:
        """
        Get the enabled IP version a record holds.

        Parameters
        ----------
        record : Record
            A DNS record.

        Returns
        -------
        IPVersion | None
            The IP version, or None if the record is neither an A nor an
            AAAA record or its protocol is disabled.
        """
        for version in self.enabled_versions:
            if record.type == version.record_type:
                return version
        return None

    def log_summary(self) -> None:
        """
        Log the update target and the current external addresses.

        Raises
        ------
        AddressLookupError
            If an enabled address cannot be determined.
        """
        logger.info("Updating record for %s", self.record_name)
        logger.info("\tv4: %s", str(self.config.update.v4).lower())
        logger.info("\tv6: %s", str(self.config.update.v6).lower())

        for version in self.enabled_versions:
            logger.info(
                "external IP%s address: %s",
                version.value,
                self.fetcher.get_address(version),
            )

    def update_all(self) -> list[UpdateResult]:
        """
        Update every matching record.

        Returns
        -------
        list[UpdateResult]
            One result per A/AAAA record of an enabled protocol, in the
            order the API listed them.

        Raises
        ------
        CloudflareDDNSError
            On the first failure; remaining records are left untouched.
        """
        zone_id = self.cloudflare.resolve_zone(self.config.cloudflare.domain)
        logger.debug("Zone ID for %s: %s", self.config.cloudflare.domain, zone_id)

        records = self.cloudflare.list_records(zone_id, self.record_name)
        logger.debug("Found %d record(s) named %s", len(records), self.record_name)

        results = []
        for record in records:
            version = self.version_for(record)
            if version is None:
                logger.debug("Skipping %s record %s", record.type, record.name)
                continue
            results.append(self.update_record(zone_id, record, version))
        return results

    def update_record(
        self,
        zone_id: str,
        record: Record,
        version: IPVersion,
    ) -> UpdateResult:
        """
        Point one record at a freshly fetched address.

        Parameters
        ----------
        zone_id : str
            The zone ID.
        record : Record
            The record to update.
        version : IPVersion
            The IP version of the record.

        Returns
        -------
        UpdateResult
            What was done.
        """
        address = self.fetcher.get_address(version)

        if self.config.update.skip_unchanged and record.content == address:
            logger.info("%s record %s unchanged (%s)", record.type, record.name, address)
            return UpdateResult(record=record, address=address, action="unchanged")

        self.cloudflare.update_record(
            zone_id,
            record.id,
            record.type,
            record.name,
            address,
        )
        logger.info("Updated %s record %s to %s", record.type, record.name, address)
        return UpdateResult(record=record, address=address, action="updated")
