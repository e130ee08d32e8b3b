from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from .lib.env import PATHS

DEFAULT_LOG_PATH = PATHS.log_default


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    also_console: bool = True,
) -> str:
    """Configure logging.

    Status output goes to the console at `level`; the log file always keeps
    `file_level` (DEBUG by default, so `CMD` stdout/stderr is on disk even
    without --verbose). If the requested log path is not writable, the file
    lands in the working directory instead.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(min(level, file_level))

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_winget_provisioner_configured", False):
        return getattr(logger, "_winget_provisioner_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        fallback = str(Path.cwd() / "winget-provisioner.log")
        file_handler = logging.FileHandler(fallback, encoding="utf-8")
        chosen_path = fallback
    file_handler.setFormatter(fmt)
    file_handler.setLevel(file_level)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(fmt="%(levelname)s: %(message)s"))
        console.setLevel(level)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_winget_provisioner_configured", True)
    setattr(logger, "_winget_provisioner_log_path", chosen_path)

    logging.getLogger(__name__).info("Logging initialized (requested=%s, actual=%s)", log_path, chosen_path)
    return chosen_path
