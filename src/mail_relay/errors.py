# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Error taxonomy of the relay pipeline.

Every exception carries a machine-readable ``code`` next to the message that
is shown to the HTTP caller.
"""

from __future__ import annotations

MISSING_FIELDS_MESSAGE = "Missing required fields in JSON"
INVALID_ADDRESS_MESSAGE = "Invalid email address format"
MALFORMED_PAYLOAD_PREFIX = "Error processing JSON request"


class RelayError(Exception):
    """Base class for all errors raised by the relay."""

    code = "relay_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransportStreamError(RelayError):
    """Raised when the request body stream fails before it is complete."""

    code = "request_error"


class MalformedPayload(RelayError):
    """Raised when the body is not a JSON object of the expected shape."""

    code = "malformed_payload"

    def __init__(self, detail: str):
        super().__init__(f"{MALFORMED_PAYLOAD_PREFIX}: {detail}")
        self.detail = detail


class MissingFields(RelayError):
    """Raised when ``to``, ``subject`` or both body fields are missing."""

    code = "missing_fields"

    def __init__(self, message: str = MISSING_FIELDS_MESSAGE):
        super().__init__(message)


class InvalidAddress(RelayError):
    """Raised when a recipient address is not syntactically valid."""

    code = "invalid_address"

    def __init__(self, message: str = INVALID_ADDRESS_MESSAGE, address: object = None):
        super().__init__(message)
        self.address = address


class ConfigurationError(RelayError):
    """Raised at startup when the process configuration is unusable."""

    code = "configuration_error"
