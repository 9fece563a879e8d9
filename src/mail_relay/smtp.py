# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SMTP transport used to deliver relayed messages.

The transport is created once at startup from the process configuration and
shared by every request. It only stores read-only connection settings: each
:meth:`SMTPTransport.send` call opens its own connection, so concurrent
requests never share protocol state.

TLS behavior based on port and use_tls flag:

- ``use_tls=True``: implicit TLS from the first byte (typically port 465)
- ``use_tls=False``: plain connection, upgraded with STARTTLS when offered
- ``use_tls=None``: ``True`` on port 465, ``False`` otherwise

Example:
    Sending one message::

        transport = SMTPTransport("smtp.example.com", 587, "user", "secret")
        response = await transport.send(message)
"""

from __future__ import annotations

import asyncio
from email.message import EmailMessage

import aiosmtplib

from .logger import get_logger

DEFAULT_TIMEOUT = 30.0

logger = get_logger("SMTPTransport")


class SMTPTransport:
    """Connection settings for one SMTP server plus a one-shot send operation.

    Attributes:
        host: SMTP server hostname or IP address.
        port: SMTP server port number.
        user: Username for SMTP authentication, or None for no auth.
        password: Password for SMTP authentication, or None for no auth.
        use_tls: Whether the connection starts with implicit TLS.
        validate_certs: Whether the server certificate is verified.
        timeout: Seconds allowed for each of connect+login and send.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str | None = None,
        password: str | None = None,
        *,
        use_tls: bool | None = None,
        validate_certs: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.host = host
        self.port = int(port)
        self.user = user
        self.password = password
        self.use_tls = self.port == 465 if use_tls is None else bool(use_tls)
        self.validate_certs = validate_certs
        self.timeout = timeout

    def _client(self) -> aiosmtplib.SMTP:
        if self.use_tls:
            # Implicit TLS
            return aiosmtplib.SMTP(
                hostname=self.host,
                port=self.port,
                use_tls=True,
                start_tls=False,
                validate_certs=self.validate_certs,
                timeout=self.timeout,
            )
        # start_tls=None upgrades only when the server advertises STARTTLS
        return aiosmtplib.SMTP(
            hostname=self.host,
            port=self.port,
            use_tls=False,
            start_tls=None,
            validate_certs=self.validate_certs,
            timeout=self.timeout,
        )

    async def send(self, message: EmailMessage) -> str:
        """Deliver ``message`` and return the server's final response text.

        Recipients are taken from the To, Cc and Bcc headers; aiosmtplib
        strips Bcc from the transmitted copy.

        Args:
            message: Fully built message, including the From header.

        Returns:
            The server response to the DATA command.

        Raises:
            asyncio.TimeoutError: If connecting or sending exceeds ``timeout``.
            aiosmtplib.SMTPException: If the server refuses the session, the
                credentials, the sender or every recipient.
        """
        smtp = self._client()

        async def _do_connect():
            await smtp.connect()
            if self.user and self.password:
                await smtp.login(self.user, self.password)

        try:
            await asyncio.wait_for(_do_connect(), timeout=self.timeout)
            refused, response = await asyncio.wait_for(smtp.send_message(message), timeout=self.timeout)
        finally:
            if smtp.is_connected:
                try:
                    await smtp.quit()
                except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as exc:
                    logger.debug("QUIT failed on %s:%s: %s", self.host, self.port, exc)

        for recipient, reply in refused.items():
            logger.warning("Recipient %s refused: %s", recipient, reply)
        return response
