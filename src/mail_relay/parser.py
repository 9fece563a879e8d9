# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Parsing and validation of the relay request body.

The parser is deterministic and performs no I/O: it turns the accumulated
body text into a :class:`~mail_relay.models.MailRequest` or raises one of
the client errors from :mod:`mail_relay.errors`.

Checks run in a fixed order and the first failure wins:

1. JSON syntax (and a top-level object) -> ``MalformedPayload``
2. ``to``, ``subject`` and one of ``text``/``html`` present -> ``MissingFields``
3. every address in ``to``, ``cc`` and ``bcc`` valid -> ``InvalidAddress``
4. remaining field types -> ``MalformedPayload``
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from .errors import InvalidAddress, MalformedPayload, MissingFields
from .models import MailRequest
from .validators import is_valid_email


def _address_list(value: Any, *, drop_empty: bool = False) -> tuple[str, ...]:
    """Normalise an address array, validating every entry.

    Args:
        value: Raw JSON value; ``None`` means the field was omitted.
        drop_empty: Discard ``""`` entries before validation (cc/bcc only).

    Raises:
        InvalidAddress: If the value is not an array of valid addresses.
    """
    if value is None:
        return ()
    if not isinstance(value, list):
        raise InvalidAddress(address=value)
    addresses = [item for item in value if not (drop_empty and item == "")]
    for address in addresses:
        if not is_valid_email(address):
            raise InvalidAddress(address=address)
    return tuple(addresses)


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def parse_mail_request(body: str) -> MailRequest:
    """Parse the raw request body into a validated mail request.

    Args:
        body: The complete request body as text.

    Returns:
        The validated, immutable ``MailRequest``.

    Raises:
        MalformedPayload: Invalid JSON, a non-object document, or fields of
            the wrong type.
        MissingFields: ``to``, ``subject`` or both body fields are missing
            or empty.
        InvalidAddress: An address in ``to`` or in the filtered ``cc``/``bcc``
            is invalid, or one of those fields is not an array.
    """
    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        raise MalformedPayload(str(exc)) from exc

    if not isinstance(data, dict):
        raise MalformedPayload(f"expected a JSON object, got {type(data).__name__}")

    if not data.get("to") or not data.get("subject") or not (data.get("text") or data.get("html")):
        raise MissingFields()

    to = _address_list(data["to"])
    cc = _address_list(data.get("cc"), drop_empty=True)
    bcc = _address_list(data.get("bcc"), drop_empty=True)

    try:
        return MailRequest(
            to=to,
            cc=cc,
            bcc=bcc,
            subject=data["subject"],
            text=data.get("text") or None,
            html=data.get("html") or None,
            attachments=data.get("attachments") or (),
        )
    except ValidationError as exc:
        raise MalformedPayload(_format_validation_error(exc)) from exc
