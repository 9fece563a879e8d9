# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Message construction and submission to the SMTP transport.

The dispatcher turns a validated :class:`~mail_relay.models.MailRequest` and
its resolved attachments into an ``EmailMessage``, hands it to the transport
exactly once and reports the result as a dispatch outcome. Nothing is
retried: a transport failure is final for the request.
"""

from __future__ import annotations

import asyncio
import mimetypes
from collections.abc import Iterable, Sequence
from email.message import EmailMessage
from pathlib import Path
from typing import Protocol

from .logger import get_logger
from .models import (
    AttachmentDescriptor,
    DispatchFailure,
    DispatchOutcome,
    DispatchSuccess,
    MailRequest,
)


class Transport(Protocol):
    """Anything able to deliver a built message and return a response text."""

    async def send(self, message: EmailMessage) -> str: ...


def _join_addresses(addresses: Iterable[str]) -> str:
    return ", ".join(addresses)


def _summarise_addresses(addresses: Sequence[str]) -> str:
    """Comma-separated addresses for logging, truncated to 200 chars."""
    preview = _join_addresses(addresses)
    if len(preview) > 200:
        return f"{preview[:197]}..."
    return preview or "-"


def guess_mime(filename: str) -> tuple[str, str]:
    """Return (maintype, subtype) for ``filename``, defaulting to octet-stream."""
    mime_type, _ = mimetypes.guess_type(filename)
    if not mime_type or "/" not in mime_type:
        return "application", "octet-stream"
    maintype, subtype = mime_type.split("/", 1)
    return maintype, subtype


class MailDispatcher:
    """Builds outgoing messages and submits them through one transport.

    Attributes:
        transport: The shared transport configured at startup.
        sender: Address placed in the From header of every message.
    """

    def __init__(self, transport: Transport, sender: str):
        self.transport = transport
        self.sender = sender
        self.logger = get_logger("MailDispatcher")

    async def build_message(
        self,
        request: MailRequest,
        attachments: Sequence[AttachmentDescriptor] = (),
    ) -> EmailMessage:
        """Build the MIME message for ``request``.

        Text only gives ``text/plain``, html only gives ``text/html`` and both
        give ``multipart/alternative`` with the plain part first. Attachment
        files are read in a worker thread.

        Raises:
            OSError: If an attachment disappeared or cannot be read.
        """
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = _join_addresses(request.to)
        if request.cc:
            msg["Cc"] = _join_addresses(request.cc)
        if request.bcc:
            msg["Bcc"] = _join_addresses(request.bcc)
        msg["Subject"] = request.subject

        if request.text:
            msg.set_content(request.text)
            if request.html:
                msg.add_alternative(request.html, subtype="html")
        else:
            msg.set_content(request.html or "", subtype="html")

        for attachment in attachments:
            content = await asyncio.to_thread(Path(attachment.path).read_bytes)
            maintype, subtype = guess_mime(attachment.filename)
            msg.add_attachment(content, maintype=maintype, subtype=subtype, filename=attachment.filename)
        return msg

    async def dispatch(
        self,
        request: MailRequest,
        attachments: Sequence[AttachmentDescriptor] = (),
    ) -> DispatchOutcome:
        """Send ``request`` once and return the outcome.

        Never raises for delivery problems: any error while building the
        message or talking to the transport becomes a ``DispatchFailure``.
        """
        recipients = _summarise_addresses(request.to)
        self.logger.info(
            "Sending email to=%s cc=%s bcc=%s subject=%r attachments=%s",
            recipients,
            _summarise_addresses(request.cc),
            _summarise_addresses(request.bcc),
            request.subject,
            [att.filename for att in attachments] or "-",
        )
        try:
            message = await self.build_message(request, attachments)
            response = await self.transport.send(message)
        except Exception as exc:
            error = str(exc) or exc.__class__.__name__
            self.logger.error("Error sending email to %s: %s", recipients, error)
            return DispatchFailure(error=error)

        self.logger.info("Email sent to %s. Response: %s", recipients, response)
        return DispatchSuccess(response=str(response))
