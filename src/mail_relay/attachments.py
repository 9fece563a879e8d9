# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Best-effort resolution of local file attachments.

Attachments are given as filesystem paths. Each path is checked once; files
that exist become :class:`~mail_relay.models.AttachmentDescriptor` entries,
while missing ones are logged and dropped. A missing attachment never aborts
the send.

Example:
    Resolving a mixed list::

        resolver = AttachmentResolver()
        attachments = await resolver.resolve(["/srv/files/report.pdf", "/nope.txt"])
        # -> [AttachmentDescriptor(filename="report.pdf", path="/srv/files/report.pdf")]
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path

from .logger import get_logger
from .models import AttachmentDescriptor

logger = get_logger("AttachmentResolver")


class AttachmentResolver:
    """Turns attachment paths into descriptors for files present on disk.

    Relative paths are resolved against the process working directory. Only
    regular files count as present; directories are dropped like missing
    files.
    """

    @staticmethod
    def _exists(path: str) -> bool:
        return Path(path).is_file()

    async def partition(self, paths: Iterable[str]) -> tuple[list[AttachmentDescriptor], list[str]]:
        """Split paths into resolved descriptors and missing paths.

        Existence checks run in a worker thread so the event loop is never
        blocked on the filesystem. Input order is preserved in both lists.

        Args:
            paths: Attachment paths as received in the request.

        Returns:
            Tuple of (kept descriptors, dropped paths).
        """
        kept: list[AttachmentDescriptor] = []
        dropped: list[str] = []
        for path in paths:
            if path and await asyncio.to_thread(self._exists, path):
                kept.append(AttachmentDescriptor(filename=Path(path).name, path=path))
            else:
                dropped.append(path)
        return kept, dropped

    async def resolve(self, paths: Iterable[str] | None) -> list[AttachmentDescriptor]:
        """Return descriptors for the existing files, logging the missing ones."""
        if not paths:
            return []
        kept, dropped = await self.partition(paths)
        for path in dropped:
            logger.error("Attachment not found: %s", path)
        return kept
