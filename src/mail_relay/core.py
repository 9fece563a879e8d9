# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Request pipeline of the mail relay.

:class:`MailRelay` runs one request from raw body chunks to the JSON
response: accumulate, parse and validate, resolve attachments, dispatch,
map. Validation errors stop the pipeline before any attachment lookup or
transport call.

Example:
    Wiring the pipeline::

        relay = MailRelay(MailDispatcher(transport, sender), AttachmentResolver())
        response = await relay.handle(request.stream())
"""

from __future__ import annotations

from collections.abc import AsyncIterable

from fastapi.responses import JSONResponse

from .attachments import AttachmentResolver
from .body import accumulate_body
from .dispatcher import MailDispatcher
from .errors import RelayError, TransportStreamError
from .logger import get_logger
from .parser import parse_mail_request
from .responses import error_response, outcome_response


class MailRelay:
    """Coordinates the stages that handle one relay request.

    Holds no per-request state, so a single instance serves all concurrent
    requests.

    Attributes:
        dispatcher: Builds and sends the message.
        resolver: Resolves attachment paths.
    """

    def __init__(self, dispatcher: MailDispatcher, resolver: AttachmentResolver | None = None):
        self.dispatcher = dispatcher
        self.resolver = resolver or AttachmentResolver()
        self.logger = get_logger("MailRelay")

    async def handle(self, chunks: AsyncIterable[bytes]) -> JSONResponse:
        """Process one request body and return its response."""
        try:
            body = await accumulate_body(chunks)
        except TransportStreamError as exc:
            return error_response(exc)

        try:
            request = parse_mail_request(body)
        except RelayError as exc:
            self.logger.error("Rejected request (%s): %s", exc.code, exc.message)
            return error_response(exc)

        self.logger.info(
            "JSON parsed: %d recipient(s), %d cc, %d bcc, %d attachment(s)",
            len(request.to),
            len(request.cc),
            len(request.bcc),
            len(request.attachments),
        )

        attachments = await self.resolver.resolve(request.attachments)
        outcome = await self.dispatcher.dispatch(request, attachments)
        return outcome_response(outcome)
