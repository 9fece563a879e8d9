# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Application assembly and uvicorn entry point.

The SMTP transport, dispatcher and relay pipeline are built once from the
process settings and shared by every request.

Usage:
    python main.py

    # or, with an external uvicorn process
    uvicorn --factory mail_relay.server:get_app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import socket
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .api import create_app
from .attachments import AttachmentResolver
from .config_loader import RelaySettings, load_settings
from .core import MailRelay
from .dispatcher import MailDispatcher
from .errors import ConfigurationError
from .logger import configure_logging, get_logger
from .smtp import SMTPTransport

logger = get_logger("MailRelayServer")


def build_relay(settings: RelaySettings) -> MailRelay:
    """Create the pipeline with its single, immutable transport."""
    transport = SMTPTransport(
        settings.smtp_host,
        settings.smtp_port,
        settings.smtp_user,
        settings.smtp_password,
        use_tls=settings.smtp_use_tls,
        validate_certs=settings.smtp_validate_certs,
        timeout=settings.smtp_timeout,
    )
    dispatcher = MailDispatcher(transport, sender=settings.sender)
    return MailRelay(dispatcher, AttachmentResolver())


def build_app(settings: RelaySettings) -> FastAPI:
    """Create the FastAPI application for ``settings``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(
            "Mail relay listening on %s:%d (SMTP %s:%d, sender %s)",
            settings.http_host,
            settings.http_port,
            settings.smtp_host,
            settings.smtp_port,
            settings.sender,
        )
        yield
        logger.info("Mail relay stopped")

    return create_app(build_relay(settings), lifespan=lifespan)


def get_app() -> FastAPI:
    """Factory for ``uvicorn --factory``: load settings and logging, build the app."""
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_dir)
    return build_app(settings)


def _bind(host: str, port: int) -> socket.socket:
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    return socket.create_server((host, port), family=family)


def run(settings: RelaySettings | None = None) -> None:
    """Serve the relay until interrupted.

    Raises:
        SystemExit: With status 1 when the listening socket cannot be bound.
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level, settings.log_dir)
    app = build_app(settings)

    try:
        sock = _bind(settings.http_host, settings.http_port)
    except OSError as exc:
        logger.error("Server error: %s", exc)
        raise SystemExit(1) from exc

    config = uvicorn.Config(app, host=settings.http_host, port=settings.http_port, log_config=None)
    uvicorn.Server(config).run(sockets=[sock])


def main() -> None:
    """Console entry point; exits with status 2 on bad configuration."""
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        configure_logging()
        logger.error("Configuration error: %s", exc.message)
        raise SystemExit(2) from exc
    run(settings)
