from __future__ import annotations

import logging
import shutil
import zipfile
from pathlib import Path

logger = logging.getLogger(__name__)


def extract_zip(archive: str, dst: str, *, dry_run: bool = False) -> None:
    """Expand a zip (a .nupkg is one) into dst."""

    a = Path(archive)
    d = Path(dst)

    if dry_run:
        # The archive may not have been downloaded in a dry run.
        logger.info("Would extract %s -> %s", str(a), str(d))
        return

    if not a.exists():
        raise FileNotFoundError(archive)

    d.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(a) as zf:
        zf.extractall(d)
    logger.info("Extracted %s -> %s", a.name, str(d))


def copy_file(src: str, dst: str, *, dry_run: bool = False) -> None:
    s = Path(src)
    d = Path(dst)

    if dry_run:
        logger.info("Would copy %s -> %s", str(s), str(d))
        return

    if not s.is_file():
        raise FileNotFoundError(src)

    d.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(s, d)
