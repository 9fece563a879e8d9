# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pydantic models for the mail relay.

Models:
    - MailRequest: validated description of one email to send
    - AttachmentDescriptor: resolved (filename, path) pair for one attachment
    - DispatchSuccess / DispatchFailure: outcome of one transport send
    - ErrorResponse / SentResponse: JSON bodies returned to the caller
"""

from __future__ import annotations

import re
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .validators import is_valid_email

LINE_BREAKS = re.compile(r"\r\n|\r|\n")


class MailRequest(BaseModel):
    """One email to send, as accepted by the relay endpoint.

    Instances are immutable. ``cc`` and ``bcc`` are expected to be already
    stripped of empty entries; the parser does that before building the model.

    Attributes:
        to: Recipient addresses (at least one).
        cc: Carbon-copy addresses, possibly empty.
        bcc: Blind carbon-copy addresses, possibly empty.
        subject: Message subject.
        text: Plain-text body.
        html: HTML body.
        attachments: Filesystem paths of files to attach.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    to: Annotated[
        tuple[str, ...],
        Field(min_length=1, description="Recipient addresses")
    ]
    cc: Annotated[
        tuple[str, ...],
        Field(default=(), description="Carbon-copy addresses")
    ]
    bcc: Annotated[
        tuple[str, ...],
        Field(default=(), description="Blind carbon-copy addresses")
    ]
    subject: Annotated[
        str,
        Field(min_length=1, description="Message subject")
    ]
    text: Annotated[
        str | None,
        Field(default=None, description="Plain-text body")
    ]
    html: Annotated[
        str | None,
        Field(default=None, description="HTML body")
    ]
    attachments: Annotated[
        tuple[str, ...],
        Field(default=(), description="Paths of files to attach")
    ]

    @field_validator("to", "cc", "bcc")
    @classmethod
    def addresses_must_be_valid(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject any address that is not ``local@domain.tld`` shaped."""
        for address in v:
            if not is_valid_email(address):
                raise ValueError(f"invalid email address: {address!r}")
        return v

    @field_validator("subject")
    @classmethod
    def subject_on_one_line(cls, v: str) -> str:
        """Replace CR/LF with spaces so the value is a single header line."""
        return LINE_BREAKS.sub(" ", v)

    @model_validator(mode="after")
    def body_required(self) -> MailRequest:
        """Require at least one of ``text`` and ``html``."""
        if not (self.text or self.html):
            raise ValueError("either text or html body is required")
        return self


class AttachmentDescriptor(BaseModel):
    """A file that exists on disk and will be attached to the message."""

    model_config = ConfigDict(frozen=True)

    filename: str
    path: str


class DispatchSuccess(BaseModel):
    """The transport accepted the message."""

    model_config = ConfigDict(frozen=True)

    status: Literal["sent"] = "sent"
    response: str


class DispatchFailure(BaseModel):
    """The transport failed or refused to send the message."""

    model_config = ConfigDict(frozen=True)

    status: Literal["error"] = "error"
    error: str


DispatchOutcome = Annotated[
    Union[DispatchSuccess, DispatchFailure],
    Field(discriminator="status"),
]


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""
    error: str
    details: str | None = None


class SentResponse(BaseModel):
    """Body of the 200 response after a successful send."""
    message: str
    response: str
