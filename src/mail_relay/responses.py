# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Mapping of pipeline results onto HTTP responses.

=====================  ======  ==============================================
Result                 Status  Body
=====================  ======  ==============================================
MissingFields          400     ``{"error": <message>}``
InvalidAddress         400     ``{"error": <message>}``
MalformedPayload       400     ``{"error": <message>}``
TransportStreamError   500     ``{"error": "Request error", "details": ...}``
DispatchFailure        500     ``{"error": "Error sending email", "details": ...}``
DispatchSuccess        200     ``{"message": ..., "response": ...}``
method / content type  405     ``{"error": "Method not allowed"}``
=====================  ======  ==============================================
"""

from __future__ import annotations

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .errors import InvalidAddress, MalformedPayload, MissingFields, RelayError, TransportStreamError
from .models import DispatchFailure, DispatchOutcome, DispatchSuccess, ErrorResponse, SentResponse

SENT_MESSAGE = "Email sent successfully"
SEND_ERROR_MESSAGE = "Error sending email"
REQUEST_ERROR_MESSAGE = "Request error"
METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed"
INTERNAL_ERROR_MESSAGE = "Internal server error"


def _json(status_code: int, body: BaseModel) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def error_response(exc: RelayError) -> JSONResponse:
    """Response for an error raised before dispatch."""
    if isinstance(exc, (MissingFields, InvalidAddress, MalformedPayload)):
        return _json(status.HTTP_400_BAD_REQUEST, ErrorResponse(error=exc.message))
    if isinstance(exc, TransportStreamError):
        return _json(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorResponse(error=REQUEST_ERROR_MESSAGE, details=exc.message),
        )
    return internal_error_response()


def outcome_response(outcome: DispatchOutcome) -> JSONResponse:
    """Response for a dispatch outcome: 200 on success, 500 on failure."""
    if isinstance(outcome, DispatchSuccess):
        return _json(status.HTTP_200_OK, SentResponse(message=SENT_MESSAGE, response=outcome.response))
    if isinstance(outcome, DispatchFailure):
        return _json(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorResponse(error=SEND_ERROR_MESSAGE, details=outcome.error),
        )
    raise TypeError(f"Unknown dispatch outcome: {outcome!r}")


def method_not_allowed_response() -> JSONResponse:
    return _json(status.HTTP_405_METHOD_NOT_ALLOWED, ErrorResponse(error=METHOD_NOT_ALLOWED_MESSAGE))


def internal_error_response() -> JSONResponse:
    return _json(status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorResponse(error=INTERNAL_ERROR_MESSAGE))
