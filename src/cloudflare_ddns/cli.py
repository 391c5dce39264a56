"""
CLI entry point for Cloudflare DDNS.

This module provides the command-line interface for a single update run.
"""

from __future__ import annotations

import logging
import sys

from cloudflare_ddns import __version__
from cloudflare_ddns.address import ExternalAddressFetcher
from cloudflare_ddns.cloudflare import CloudflareClient
from cloudflare_ddns.config import ConfigValidationError, load_config, parse_args
from cloudflare_ddns.exceptions import CloudflareDDNSError
from cloudflare_ddns.logging_config import PACKAGE_LOGGER, setup_logging
from cloudflare_ddns.updater import DDNSUpdater

logger = logging.getLogger(PACKAGE_LOGGER)


def main(argv: list[str] | None = None) -> None:
    """
    Update the configured Cloudflare DNS records.

    Parse command-line arguments, load configuration, log the current
    external addresses and update every matching record. A failed run is
    logged and returns normally; only configuration errors exit with
    status 1.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. If None, uses sys.argv.
    """
    args = parse_args(argv)
    try:
        config = load_config(args)
    except ConfigValidationError as e:
        print(e, file=sys.stderr)  # noqa: T201
        sys.exit(1)

    setup_logging(config.logging)
    logger.info("Starting cloudflare-ddns v%s", __version__)

    with (
        CloudflareClient.from_config(config.cloudflare) as cloudflare,
        ExternalAddressFetcher.from_config(config.external_source) as fetcher,
    ):
        updater = DDNSUpdater(config, cloudflare, fetcher)
        try:
            updater.log_summary()
            updater.update_all()
        except CloudflareDDNSError as e:
            logger.error("%s", e)  # noqa: TRY400
            return

    logger.info("Successfully updated DNS records")


if __name__ == "__main__":
    main()
