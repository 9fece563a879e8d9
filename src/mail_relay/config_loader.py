# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Process configuration for the mail relay.

Settings are read once at startup. An INI file takes precedence, environment
variables are the fallback, and a ``.env`` file in the working directory is
loaded into the environment first (existing variables are not overridden).

Example:
    Configuration file format (config.ini)::

        [smtp]
        host = smtp.example.com
        port = 465
        user = relay@example.com
        password = secret
        # sender defaults to user
        sender = noreply@example.com
        # use_tls defaults to true on port 465
        use_tls = true
        validate_certs = false
        timeout = 30

        [server]
        host = 0.0.0.0
        port = 8000

        [logging]
        level = INFO
        dir = logs

Environment variables:
    MAIL_RELAY_CONFIG - Path to config.ini file (default: config.ini)
    MAIL_HOST, MAIL_PORT, MAIL_USER, MAIL_PASS, MAIL_FROM - SMTP server
    MAIL_USE_TLS, MAIL_TLS_VERIFY, MAIL_TIMEOUT - SMTP connection options
    HOST, PORT - HTTP listener (default: 0.0.0.0:8000)
    LOG_LEVEL, LOG_DIR - Logging (default: INFO, logs)
"""

from __future__ import annotations

import configparser
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigurationError
from .logger import get_logger

logger = get_logger("ConfigLoader")

DEFAULT_CONFIG_PATH = "config.ini"
DEFAULT_SMTP_PORT = 25
DEFAULT_HTTP_PORT = 8000


@dataclass(frozen=True)
class RelaySettings:
    """Immutable process configuration.

    Attributes:
        smtp_host: SMTP server hostname.
        smtp_port: SMTP server port.
        smtp_user: SMTP username, or None for no auth.
        smtp_password: SMTP password, or None for no auth.
        sender: Address used in the From header.
        smtp_use_tls: Implicit TLS; None means "true on port 465".
        smtp_validate_certs: Verify the server certificate.
        smtp_timeout: Seconds for connect+login and for sending.
        http_host: Listening interface.
        http_port: Listening port.
        log_level: Root logger level name.
        log_dir: Directory for the info/error log files, or None.
    """

    smtp_host: str
    sender: str
    smtp_port: int = DEFAULT_SMTP_PORT
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool | None = None
    smtp_validate_certs: bool = False
    smtp_timeout: float = 30.0
    http_host: str = "0.0.0.0"
    http_port: int = DEFAULT_HTTP_PORT
    log_level: str = "INFO"
    log_dir: str | None = "logs"


def _parse_bool(option: str, value: str | None) -> bool | None:
    if value is None or not value.strip():
        return None
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ConfigurationError(f"Invalid boolean for {option}: {value!r}")


def _parse_port(option: str, value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        port = int(value)
    except ValueError:
        raise ConfigurationError(f"Invalid port for {option}: {value!r}") from None
    if not 0 < port < 65536:
        raise ConfigurationError(f"Port out of range for {option}: {port}")
    return port


def _parse_float(option: str, value: str | None, default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        number = float(value)
    except ValueError:
        raise ConfigurationError(f"Invalid number for {option}: {value!r}") from None
    if number <= 0:
        raise ConfigurationError(f"{option} must be positive: {number}")
    return number


def load_settings(
    config_path: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> RelaySettings:
    """Load settings from the INI file with environment variables as fallbacks.

    Args:
        config_path: Path to the INI file. Defaults to ``MAIL_RELAY_CONFIG``
            or ``config.ini``; a missing file is not an error.
        environ: Environment mapping. Defaults to ``os.environ`` after
            loading ``.env``.

    Returns:
        The validated ``RelaySettings``.

    Raises:
        ConfigurationError: If the SMTP host or sender is missing, or a value
            cannot be parsed.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    path = Path(config_path or environ.get("MAIL_RELAY_CONFIG", DEFAULT_CONFIG_PATH))
    parser = configparser.ConfigParser()
    if path.exists():
        parser.read(path)
        logger.info("Loaded configuration from %s", path)

    def get(section: str, option: str, env_var: str) -> str | None:
        if parser.has_option(section, option):
            value = parser.get(section, option)
        else:
            value = environ.get(env_var)
        if value is None:
            return None
        return value.strip() or None

    smtp_host = get("smtp", "host", "MAIL_HOST")
    if not smtp_host:
        raise ConfigurationError("SMTP host is not configured (MAIL_HOST)")

    smtp_user = get("smtp", "user", "MAIL_USER")
    sender = get("smtp", "sender", "MAIL_FROM") or smtp_user
    if not sender:
        raise ConfigurationError("Sender address is not configured (MAIL_FROM or MAIL_USER)")

    log_dir = get("logging", "dir", "LOG_DIR")

    return RelaySettings(
        smtp_host=smtp_host,
        smtp_port=_parse_port("MAIL_PORT", get("smtp", "port", "MAIL_PORT"), DEFAULT_SMTP_PORT),
        smtp_user=smtp_user,
        smtp_password=get("smtp", "password", "MAIL_PASS"),
        sender=sender,
        smtp_use_tls=_parse_bool("MAIL_USE_TLS", get("smtp", "use_tls", "MAIL_USE_TLS")),
        smtp_validate_certs=bool(_parse_bool("MAIL_TLS_VERIFY", get("smtp", "validate_certs", "MAIL_TLS_VERIFY"))),
        smtp_timeout=_parse_float("MAIL_TIMEOUT", get("smtp", "timeout", "MAIL_TIMEOUT"), 30.0),
        http_host=get("server", "host", "HOST") or "0.0.0.0",
        http_port=_parse_port("PORT", get("server", "port", "PORT"), DEFAULT_HTTP_PORT),
        log_level=(get("logging", "level", "LOG_LEVEL") or "INFO").upper(),
        log_dir=os.path.expanduser(log_dir) if log_dir else "logs",
    )
