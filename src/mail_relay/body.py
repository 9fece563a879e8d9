# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Accumulation of a streamed HTTP request body."""

from __future__ import annotations

from collections.abc import AsyncIterable

from .errors import TransportStreamError
from .logger import get_logger

logger = get_logger("RequestBody")


async def accumulate_body(chunks: AsyncIterable[bytes], encoding: str = "utf-8") -> str:
    """Concatenate body chunks in arrival order and decode them.

    The whole stream is consumed before anything is returned. Undecodable
    bytes are replaced rather than rejected so that the JSON parser reports
    the problem.

    Args:
        chunks: Async iterable of byte chunks, e.g. ``Request.stream()``.
        encoding: Text encoding of the body.

    Returns:
        The complete body as text; ``""`` for an empty body.

    Raises:
        TransportStreamError: If the chunk source fails before the end of
            the stream (client disconnect, socket error).
    """
    buffer = bytearray()
    try:
        async for chunk in chunks:
            if not chunk:
                continue
            buffer.extend(chunk)
            logger.info("Received %d bytes of request body", len(chunk))
    except Exception as exc:
        message = str(exc) or exc.__class__.__name__
        logger.error("Request error: %s", message)
        raise TransportStreamError(message) from exc

    logger.info("Request body complete (%d bytes)", len(buffer))
    return buffer.decode(encoding, errors="replace")
