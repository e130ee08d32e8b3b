from __future__ import annotations

import logging
from typing import Protocol

from .command import CmdResult, powershell, ps_quote

logger = logging.getLogger(__name__)


class PackageInstaller(Protocol):
    """The OS package installer capability."""

    def install_package(self, package_path: str) -> CmdResult:
        ...

    def install_provisioned_package(self, package_path: str, license_path: str) -> CmdResult:
        ...


class AppxInstaller:
    """Appx/MSIX installs through PowerShell's Appx and DISM cmdlets."""

    def __init__(self, *, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def install_package(self, package_path: str) -> CmdResult:
        # Current-user install.
        return powershell(
            f"Add-AppxPackage -Path {ps_quote(package_path)} -ErrorAction Stop",
            check=False,
            dry_run=self.dry_run,
        )

    def install_provisioned_package(self, package_path: str, license_path: str) -> CmdResult:
        # All-users install; needs an elevated shell.
        return powershell(
            "Add-AppxProvisionedPackage -Online "
            f"-PackagePath {ps_quote(package_path)} -LicensePath {ps_quote(license_path)} -ErrorAction Stop",
            check=False,
            dry_run=self.dry_run,
        )


def failure_reason(result: CmdResult) -> str:
    text = (result.stderr or result.stdout or "").strip()
    first = text.splitlines()[0] if text else "no output"
    return f"exit {result.returncode}: {first}"
