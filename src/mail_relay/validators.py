# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Syntactic email address validation."""

from __future__ import annotations

import re
from typing import Any

# local@label.label[...]: no whitespace, "@" or "," anywhere, no empty domain label
EMAIL_PATTERN = re.compile(r"[^\s@,]+@[^\s@,.]+(\.[^\s@,.]+)+")


def is_valid_email(value: Any) -> bool:
    """Return True when ``value`` looks like ``local@domain.tld``.

    The check is purely syntactic: no DNS lookup, no normalisation.
    Non-string values are never valid.
    """
    if not isinstance(value, str):
        return False
    return EMAIL_PATTERN.fullmatch(value) is not None
