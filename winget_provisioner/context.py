from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .lib.appx import PackageInstaller
from .lib.chocolatey import ExternalInstaller
from .lib.env import PATHS
from .lib.manifests import Manifest
from .lib.net import Downloader
from .lib.osinfo import OSProfile
from .outcomes import Policy

logger = logging.getLogger(__name__)

CommandResolver = Callable[[str], Optional[str]]
OSProbe = Callable[[], OSProfile]
Pause = Callable[[str], None]


def operator_pause(message: str) -> None:
    """Block until the operator presses Enter (no-op without a TTY)."""

    if not sys.stdin or not sys.stdin.isatty():
        return
    try:
        input(f"{message} Press Enter to continue...")
    except EOFError:
        pass


@dataclass(frozen=True)
class ProvisionCtx:
    """Everything a step needs, passed explicitly to every step."""

    staging_dir: Path
    manifest: Manifest
    policy: Policy
    downloader: Downloader
    installer: PackageInstaller
    secondary: ExternalInstaller
    resolve: CommandResolver
    probe_os: OSProbe
    pause_fn: Optional[Pause] = operator_pause
    dry_run: bool = False
    upgrade_all: bool = True

    @property
    def fail_fast(self) -> bool:
        return self.policy is Policy.FAIL_FAST

    @property
    def extracted_dir(self) -> Path:
        return self.staging_dir / PATHS.extracted_dir_name

    def artifact_path(self, local_name: str) -> Path:
        return self.staging_dir / local_name

    def pause(self, message: str) -> None:
        # Only best-effort runs stop for acknowledgment; fail-fast halts instead.
        if self.policy is Policy.BEST_EFFORT and self.pause_fn is not None:
            self.pause_fn(message)

    def block(self, message: str) -> None:
        """Wait for acknowledgment whatever the policy (still honours --no-pause and the TTY check)."""
        if self.pause_fn is not None:
            self.pause_fn(message)
