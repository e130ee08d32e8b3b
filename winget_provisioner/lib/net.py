from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Protocol

import requests

logger = logging.getLogger(__name__)

USER_AGENT = "winget-provisioner"
CHUNK_SIZE = 1024 * 256


class TransferError(RuntimeError):
    pass


class Downloader(Protocol):
    def fetch(self, url: str, dest: Path) -> int:
        ...


class HttpDownloader:
    """Plain GET into a file. No retries, no auth, library-default timeout."""

    def __init__(self, session: Optional[requests.Session] = None, *, dry_run: bool = False) -> None:
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self.dry_run = dry_run

    def fetch(self, url: str, dest: Path) -> int:
        """Download `url` to `dest`; return the byte count.

        Bytes land in ``<dest>.part`` first and are renamed once the body is
        complete, so `dest` only ever holds a whole transfer. A failed
        transfer leaves the .part file behind.
        """

        if self.dry_run:
            logger.info("Would download %s -> %s", url, dest)
            return 0

        part = dest.with_name(dest.name + ".part")
        written = 0
        try:
            with self.session.get(url, stream=True, allow_redirects=True) as r:
                r.raise_for_status()
                with open(part, "wb") as fh:
                    for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            fh.write(chunk)
                            written += len(chunk)
            os.replace(part, dest)
        except (requests.RequestException, OSError) as e:
            raise TransferError(f"{url}: {e}") from e

        logger.info("Downloaded %s (%d bytes)", dest.name, written)
        return written
