from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from .command import CmdResult, powershell, ps_quote, run_cmd
from .env import PATHS

logger = logging.getLogger(__name__)

BOOTSTRAP_URL = "https://community.chocolatey.org/install.ps1"


class ExternalInstaller(Protocol):
    """A secondary package manager installed by an opaque remote bootstrap."""

    name: str

    def is_installed(self) -> bool:
        ...

    def ensure_installed(self) -> CmdResult:
        ...

    def install_package(self, package: str) -> CmdResult:
        ...


class Chocolatey:
    """Chocolatey, bootstrapped by fetching and executing its install script.

    The script is run as-is; nothing here authenticates it.
    """

    name = "chocolatey"

    def __init__(
        self,
        *,
        exe_path: str = PATHS.chocolatey_exe,
        bootstrap_url: str = BOOTSTRAP_URL,
        dry_run: bool = False,
    ) -> None:
        self.exe_path = exe_path
        self.bootstrap_url = bootstrap_url
        self.dry_run = dry_run

    def is_installed(self) -> bool:
        return Path(self.exe_path).exists()

    def ensure_installed(self) -> CmdResult:
        # TLS 1.2 (3072) must be on for older PowerShell hosts to reach the script.
        script = (
            "Set-ExecutionPolicy Bypass -Scope Process -Force; "
            "[System.Net.ServicePointManager]::SecurityProtocol = "
            "[System.Net.ServicePointManager]::SecurityProtocol -bor 3072; "
            f"Invoke-Expression ((New-Object System.Net.WebClient).DownloadString({ps_quote(self.bootstrap_url)}))"
        )
        return powershell(script, check=False, dry_run=self.dry_run)

    def install_package(self, package: str) -> CmdResult:
        return run_cmd([self.exe_path, "install", package, "-y"], check=False, dry_run=self.dry_run)
