"""On-disk image cache keyed by the derived file path.

A file already present at the derived path is treated as authoritative and
never re-downloaded; there is no content hash or freshness check.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from urllib.parse import urlparse

from coffeemania_sync.fetcher import Fetcher
from coffeemania_sync.normalize import safe_filename
from coffeemania_sync.records import NO_IMAGE

logger = logging.getLogger(__name__)

_DEFAULT_EXTENSION = ".jpg"
_UNNAMED = "unnamed"


def _extension(url: str) -> str:
    ext = os.path.splitext(urlparse(url).path)[1].lower()
    return ext or _DEFAULT_EXTENSION


def _write_file(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


class ImageCache:
    """Downloads images once into *directory*, optionally grouped by a key.

    Menu images live under ``images/{category}/``; restaurant images use a
    separate cache rooted at ``restaurant_images/`` with no group key.
    """

    def __init__(self, fetcher: Fetcher, directory: str | Path) -> None:
        self.fetcher = fetcher
        self.directory = Path(directory)

    def path_for(self, remote_url: str, item_name: str, group_key: str | None = None) -> Path:
        """Deterministic local path for an image."""
        name = safe_filename(item_name) or _UNNAMED
        base = self.directory
        if group_key:
            base = base / (safe_filename(group_key) or _UNNAMED)
        return base / f"{name}{_extension(remote_url)}"

    async def ensure_image(
        self,
        remote_url: str | None,
        item_name: str,
        group_key: str | None = None,
    ) -> str:
        """Return a local path for *remote_url*, downloading it if needed.

        Falls back to the remote URL itself when the download or the write
        fails, so a broken image never blocks the record.
        """
        if not remote_url or remote_url == NO_IMAGE:
            return NO_IMAGE

        path = self.path_for(remote_url, item_name, group_key)
        if path.is_file():
            logger.debug("Image cache hit: %s", path)
            return str(path)

        data = await self.fetcher.fetch_bytes(remote_url)
        if data is None:
            logger.warning("Could not download image %s", remote_url)
            return remote_url

        try:
            await asyncio.to_thread(_write_file, path, data)
        except OSError:
            logger.warning("Could not save image %s to %s", remote_url, path, exc_info=True)
            return remote_url

        logger.info("Saved image %s", path)
        return str(path)
