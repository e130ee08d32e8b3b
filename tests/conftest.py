from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from winget_provisioner.context import ProvisionCtx
from winget_provisioner.lib.command import CmdResult
from winget_provisioner.lib.manifests import build_manifest
from winget_provisioner.lib.net import TransferError
from winget_provisioner.lib.osinfo import OSProfile
from winget_provisioner.outcomes import Policy


def ok(argv: Optional[List[str]] = None) -> CmdResult:
    return CmdResult(argv=argv or [], returncode=0, stdout="", stderr="")


def failed(argv: Optional[List[str]] = None, stderr: str = "boom") -> CmdResult:
    return CmdResult(argv=argv or [], returncode=1, stdout="", stderr=stderr)


class FakeDownloader:
    def __init__(self, fail: Optional[set] = None) -> None:
        self.fail = fail or set()
        self.calls: List[str] = []

    def fetch(self, url: str, dest: Path) -> int:
        self.calls.append(dest.name)
        if dest.name in self.fail:
            raise TransferError(f"{url}: connection reset")
        dest.write_bytes(b"payload")
        return 7


class FakeInstaller:
    def __init__(self, fail: Optional[set] = None) -> None:
        self.fail = fail or set()
        self.installed: List[str] = []
        self.provisioned: List[tuple] = []

    def install_package(self, package_path: str) -> CmdResult:
        name = Path(package_path).name
        self.installed.append(name)
        return failed() if name in self.fail else ok()

    def install_provisioned_package(self, package_path: str, license_path: str) -> CmdResult:
        self.provisioned.append((Path(package_path).name, Path(license_path).name))
        return failed() if "provisioned" in self.fail else ok()


class FakeSecondary:
    name = "chocolatey"

    def __init__(self, *, installed: bool = True, bootstrap_ok: bool = True, install_ok: bool = True) -> None:
        self.installed = installed
        self.bootstrap_ok = bootstrap_ok
        self.install_ok = install_ok
        self.bootstraps = 0
        self.packages: List[str] = []
        self.on_install = None

    def is_installed(self) -> bool:
        return self.installed

    def ensure_installed(self) -> CmdResult:
        self.bootstraps += 1
        if self.bootstrap_ok:
            self.installed = True
            return ok()
        return failed(stderr="bootstrap script failed")

    def install_package(self, package: str) -> CmdResult:
        self.packages.append(package)
        if self.on_install is not None:
            self.on_install(package)
        return ok() if self.install_ok else failed(stderr="choco failed")


class FakeResolver:
    def __init__(self, paths: Optional[Dict[str, str]] = None) -> None:
        self.paths = dict(paths or {})
        self.calls: List[str] = []

    def __call__(self, name: str) -> Optional[str]:
        self.calls.append(name)
        return self.paths.get(name)


DESKTOP = OSProfile(version="10.0.19045", build_number=19045, caption="Microsoft Windows 10 Pro")


@pytest.fixture
def fakes():
    return {
        "downloader": FakeDownloader(),
        "installer": FakeInstaller(),
        "secondary": FakeSecondary(),
        "resolve": FakeResolver({"winget": r"C:\Users\me\AppData\Local\Microsoft\WindowsApps\winget.exe"}),
        "probe_os": lambda: DESKTOP,
    }


@pytest.fixture
def pauses():
    return []


@pytest.fixture
def make_ctx(tmp_path, fakes, pauses):
    def _make(
        *,
        policy: Policy = Policy.FAIL_FAST,
        source: str = "release",
        dry_run: bool = False,
        upgrade_all: bool = False,
        **overrides,
    ) -> ProvisionCtx:
        caps = dict(fakes, pause_fn=pauses.append)
        caps.update(overrides)
        return ProvisionCtx(
            staging_dir=tmp_path / "staging",
            manifest=build_manifest("x64", source),
            policy=policy,
            dry_run=dry_run,
            upgrade_all=upgrade_all,
            **caps,
        )

    return _make
