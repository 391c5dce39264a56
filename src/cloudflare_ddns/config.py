"""
Configuration management for Cloudflare DDNS.

This module resolves the run settings from command-line flags, environment
variables and an optional TOML file. Configuration priority (high to low):
1. Command-line flags (when non-empty)
2. Environment variables (when non-empty)
3. Configuration file
4. Default values

The result is an immutable ``Config`` built once at startup and handed to
every component that needs it.
"""

from __future__ import annotations

import argparse
import copy
import logging
import os
import sys
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, ValidationError

from cloudflare_ddns import __version__
from cloudflare_ddns.logging_config import DATE_FORMAT, LOG_FORMAT

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Any, Final

# Configure basic logging for early startup messages.
# Log messages emitted while loading the configuration (before "setup_logging()"
# is called) are visible with proper formatting. "setup_logging()" reconfigures
# the "cloudflare_ddns" logger with full settings later.
logger_basic = logging.getLogger(__name__)
logger_basic.setLevel(logging.DEBUG)
handler = logging.StreamHandler()
formatter = logging.Formatter(
    fmt=LOG_FORMAT,
    datefmt=DATE_FORMAT,
)
handler.setFormatter(formatter)
logger_basic.addHandler(handler)
logger_basic.propagate = False


# Cloudflare settings with an environment fallback,
# as (flag dest, "cloudflare" key, variable).
ENV_VARS: Final[list[tuple[str, str, str]]] = [
    ("key", "api_key", "CLOUDFLARE_DDNS_KEY"),
    ("email", "email", "CLOUDFLARE_DDNS_EMAIL"),
    ("domain", "domain", "CLOUDFLARE_DDNS_DOMAIN"),
    ("subdomain", "subdomain", "CLOUDFLARE_DDNS_SUBDOMAIN"),
]

# Values accepted by boolean flags ("-v4=false")
_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "t", "true", "yes", "y", "on"})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"0", "f", "false", "no", "n", "off"})


class ConfigValidationError(Exception):
    """
    Exception raised when configuration validation fails.

    This exception is raised when the TOML configuration or the merged
    settings contain invalid types or values.

    Attributes
    ----------
    message : str
        Human-readable error message describing the validation failures.
    config_path : Path | None
        Path to the configuration file that failed validation.
    """

    def __init__(self, message: str, config_path: Path | None = None) -> None:
        """
        Initialize ConfigValidationError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        config_path : Path | None, optional
            Path to the configuration file.
        """
        self.config_path = config_path
        super().__init__(message)


# Configuration models (Pydantic with type validation and coercion)


class CloudflareConfig(BaseModel):
    """
    Cloudflare account and target record.

    Attributes
    ----------
    api_key : str
        Cloudflare API key (sent as "X-Auth-Key").
    email : str
        Cloudflare account email (sent as "X-Auth-Email").
    domain : str
        The zone to update records in.
    subdomain : str
        The record name inside the zone ("@" for the apex).
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    email: str = ""
    domain: str = ""
    subdomain: str = "@"


class UpdateConfig(BaseModel):
    """
    Which records to update.

    Attributes
    ----------
    v4 : bool
        Whether to update A records.
    v6 : bool
        Whether to update AAAA records.
    skip_unchanged : bool
        Whether to skip the write when a record already holds the address.
    """

    model_config = ConfigDict(frozen=True)

    v4: bool = True
    v6: bool = True
    skip_unchanged: bool = False


class ExternalSourceConfig(BaseModel):
    """
    External IP echo service.

    Attributes
    ----------
    host : str
        Service host; must serve "v4." and "v6." subdomains.
    ssl : bool
        Whether to query the service over HTTPS.
    """

    model_config = ConfigDict(frozen=True)

    host: str = "ifcfg.org"
    ssl: bool = True


class LoggingConfig(BaseModel):
    """
    Logging configuration.

    Attributes
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    file_enabled : bool
        Whether to log to file.
    file_path : str
        Path to the log file.
    """

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    file_enabled: bool = False
    file_path: str = "/var/log/cloudflare-ddns.log"

    @property
    def file_path_as_path(self) -> Path:
        """
        Get the log file path as a Path object.

        Returns
        -------
        Path
            The log file path.
        """
        return Path(self.file_path)


class Config(BaseModel):
    """
    Application configuration.

    Attributes
    ----------
    cloudflare : CloudflareConfig
        Account and target record.
    update : UpdateConfig
        Record selection.
    external_source : ExternalSourceConfig
        External IP echo service.
    logging : LoggingConfig
        Logging configuration.
    """

    model_config = ConfigDict(frozen=True)

    cloudflare: CloudflareConfig = CloudflareConfig()
    update: UpdateConfig = UpdateConfig()
    external_source: ExternalSourceConfig = ExternalSourceConfig()
    logging: LoggingConfig = LoggingConfig()


def _format_validation_errors(
    error: ValidationError,
    config_path: Path | None,
) -> str:
    """
    Format Pydantic validation errors into human-readable messages.

    Parameters
    ----------
    error : ValidationError
        Pydantic validation error.
    config_path : Path | None
        Path to the configuration file.

    Returns
    -------
    str
        Human-readable error message.
    """
    lines: list[str] = []

    if config_path:
        lines.append(f'Configuration error in "{config_path}":')
    else:
        lines.append("Configuration error:")

    for err in error.errors():
        # Build field path (e.g., "update.v4")
        field_path = ".".join(str(loc) for loc in err["loc"])

        error_input = err["input"]
        input_type = type(error_input).__name__
        value_repr = (
            f'"{error_input}"' if isinstance(error_input, str) else repr(error_input)
        )

        expected_type = _get_expected_type(err["type"])
        lines.append(
            f"  [{field_path}]: Expected {expected_type}, got {input_type} (value: {value_repr}). {err['msg']}.",
        )

    return "\n".join(lines)


def _get_expected_type(error_type: str) -> str:
    """
    Get human-readable expected type from Pydantic error type.

    Parameters
    ----------
    error_type : str
        Pydantic error type string.

    Returns
    -------
    str
        Human-readable type name.
    """
    type_mapping = {
        "bool_type": "bool",
        "bool_parsing": "bool",
        "string_type": "str",
        "model_type": "table",
    }
    return type_mapping.get(error_type, error_type)


def validate_config_dict(
    data: dict[str, Any],
    config_path: Path | None = None,
) -> Config:
    """
    Validate a configuration dictionary and build the Config.

    Parameters
    ----------
    data : dict[str, Any]
        Configuration dictionary to validate.
    config_path : Path | None, optional
        Path to the configuration file (for error messages).

    Returns
    -------
    Config
        The validated configuration.

    Raises
    ------
    ConfigValidationError
        If validation fails.
    """
    try:
        return Config.model_validate(data)
    except ValidationError as e:
        msg = _format_validation_errors(e, config_path)
        raise ConfigValidationError(msg, config_path) from e


def load_config_from_file(config_path: Path) -> dict[str, Any]:
    """
    Load configuration from a TOML file.

    Parameters
    ----------
    config_path : Path
        Path to the configuration file.

    Returns
    -------
    dict[str, Any]
        Parsed configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    tomllib.TOMLDecodeError
        If the configuration file is not valid TOML.
    """
    with config_path.open("rb") as f:
        return tomllib.load(f)


def merge_config(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Recursively merge two configuration dictionaries.

    Parameters
    ----------
    base : dict[str, Any]
        Base configuration.
    override : dict[str, Any]
        Override configuration (takes precedence).

    Returns
    -------
    dict[str, Any]
        Merged configuration.
    """
    result = copy.deepcopy(base)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_config(result[key], value)
        else:
            result[key] = value
    return result


def resolve_value(flag: str | None, env_value: str | None, default: str = "") -> str:
    """
    Pick a setting from its flag and environment variable.

    Parameters
    ----------
    flag : str | None
        Command-line value.
    env_value : str | None
        Environment variable value.
    default : str, optional
        Value used when both are empty.

    Returns
    -------
    str
        The flag value if non-empty, otherwise the environment value if
        non-empty, otherwise the default.
    """
    if flag:
        return flag
    if env_value:
        return env_value
    return default


def parse_bool(value: str) -> bool:
    """
    Parse a boolean flag value.

    This function is intended to be used as a `type` converter in `argparse`.

    Parameters
    ----------
    value : str
        Flag value (e.g., "true", "false", "1", "0").

    Returns
    -------
    bool
        Parsed value.

    Raises
    ------
    argparse.ArgumentTypeError
        If the value is not a recognised boolean.
    """
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    msg = f'Invalid boolean value: "{value}".'
    raise argparse.ArgumentTypeError(msg)


def _add_bool_flag(
    parser: argparse.ArgumentParser,
    name: str,
    dest: str,
    help_text: str,
) -> None:
    """Register a boolean flag usable as "-name", "-name=false" or "-name false"."""
    parser.add_argument(
        f"-{name}",
        f"--{name}",
        dest=dest,
        type=parse_bool,
        nargs="?",
        const=True,
        default=None,
        metavar="BOOL",
        help=help_text,
    )


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Parameters
    ----------
    args : list[str] | None, optional
        Command-line arguments. If None, uses sys.argv.

    Returns
    -------
    argparse.Namespace
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog="cloudflare-ddns",
        description="Update Cloudflare DNS records to the current external IP address",
        allow_abbrev=False,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Config arguments
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.toml)",
    )

    # Cloudflare arguments
    parser.add_argument(
        "-key",
        "--key",
        dest="key",
        default=None,
        help="Cloudflare API key, overrides environment variable CLOUDFLARE_DDNS_KEY",
    )
    parser.add_argument(
        "-email",
        "--email",
        dest="email",
        default=None,
        help="Cloudflare API email, overrides environment variable CLOUDFLARE_DDNS_EMAIL",
    )
    parser.add_argument(
        "-domain",
        "--domain",
        dest="domain",
        default=None,
        help="Domain to update records on, overrides environment variable CLOUDFLARE_DDNS_DOMAIN",
    )
    parser.add_argument(
        "-subdomain",
        "--subdomain",
        dest="subdomain",
        default=None,
        help=(
            "Subdomain to update records on (default: @), "
            "overrides environment variable CLOUDFLARE_DDNS_SUBDOMAIN"
        ),
    )

    # Update arguments
    _add_bool_flag(parser, "v4", "v4", "Whether to set the A record (default: true)")
    _add_bool_flag(parser, "v6", "v6", "Whether to set the AAAA record (default: true)")
    parser.add_argument(
        "--skip-unchanged",
        action="store_true",
        dest="skip_unchanged",
        default=None,
        help="Do not rewrite records that already hold the current address",
    )

    # External source arguments
    parser.add_argument(
        "-external-source",
        "--external-source",
        dest="external_source",
        default=None,
        help=(
            "External service used to determine the external address, "
            "must have v4 and v6 subdomains (default: ifcfg.org)"
        ),
    )
    _add_bool_flag(
        parser,
        "external-source-ssl",
        "external_source_ssl",
        "Whether to use HTTPS for the external source (default: true)",
    )

    # Logging arguments
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Log level",
    )
    log_file_group = parser.add_mutually_exclusive_group()
    log_file_group.add_argument(
        "--log-file-enabled",
        action="store_true",
        dest="log_file_enabled",
        default=None,
        help="Enable logging to file",
    )
    log_file_group.add_argument(
        "--log-file-disabled",
        action="store_false",
        dest="log_file_enabled",
        default=None,
        help="Disable logging to file",
    )
    parser.add_argument(
        "--log-file-path",
        type=Path,
        dest="log_file_path",
        default=None,
        help="Path to the log file",
    )

    return parser.parse_args(args)


def load_config(
    args: argparse.Namespace | None = None,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """
    Load configuration from file, environment and command-line arguments.

    Priority (high to low):
    1. Command-line arguments (when non-empty)
    2. Environment variables (when non-empty)
    3. Configuration file
    4. Default values

    Parameters
    ----------
    args : argparse.Namespace | None, optional
        Parsed command-line arguments.
    environ : Mapping[str, str] | None, optional
        Environment to read. If None, uses os.environ.

    Returns
    -------
    Config
        Loaded configuration.

    Raises
    ------
    ConfigValidationError
        If the merged configuration is invalid.
    """
    if args is None:
        args = parse_args()
    if environ is None:
        environ = os.environ

    config_dict: dict[str, Any] = {}

    # Load from config file if specified or if default exists
    config_path = args.config
    if config_path is not None:
        config_path = config_path.expanduser()
    if config_path is None:
        default_config = Path("config.toml")
        if default_config.exists():
            config_path = default_config

    if config_path is not None:
        if config_path.exists():
            logger_basic.info('Loading configuration from "%s".', config_path)
            try:
                config_dict = load_config_from_file(config_path)
            except tomllib.TOMLDecodeError as e:
                logger_basic.critical('Failed to parse configuration file: "%s".', e)
                sys.exit(1)
        else:
            logger_basic.critical("Configuration file not found: %s", config_path)
            sys.exit(1)

    # Apply command-line and environment overrides
    cli_overrides: dict[str, Any] = {}

    # Cloudflare overrides: a non-empty flag, else a non-empty environment variable
    for dest, key, variable in ENV_VARS:
        value = resolve_value(getattr(args, dest), environ.get(variable))
        if value:
            cli_overrides.setdefault("cloudflare", {})[key] = value

    # Update overrides
    if args.v4 is not None:
        cli_overrides.setdefault("update", {})["v4"] = args.v4
    if args.v6 is not None:
        cli_overrides.setdefault("update", {})["v6"] = args.v6
    if args.skip_unchanged is not None:
        cli_overrides.setdefault("update", {})["skip_unchanged"] = args.skip_unchanged

    # External source overrides
    if args.external_source:
        cli_overrides.setdefault("external_source", {})["host"] = args.external_source
    if args.external_source_ssl is not None:
        cli_overrides.setdefault("external_source", {})["ssl"] = (
            args.external_source_ssl
        )

    # Logging overrides
    if args.log_level is not None:
        cli_overrides.setdefault("logging", {})["level"] = args.log_level
    if args.log_file_enabled is not None:
        cli_overrides.setdefault("logging", {})["file_enabled"] = args.log_file_enabled
    if args.log_file_path is not None:
        cli_overrides.setdefault("logging", {})["file_path"] = str(args.log_file_path)

    config_dict = merge_config(config_dict, cli_overrides)

    # Handle file_path expansion before Pydantic validation
    logging_dict = config_dict.get("logging")
    if isinstance(logging_dict, dict) and "file_path" in logging_dict:
        logging_dict["file_path"] = str(Path(logging_dict["file_path"]).expanduser())

    return validate_config_dict(config_dict, config_path)
