from __future__ import annotations

import json
import logging
import platform
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .command import powershell

logger = logging.getLogger(__name__)

# Oldest Windows 10 build (1809) that winget supports for a per-user install.
MIN_DESKTOP_BUILD = 17763
DESKTOP_MAJOR_VERSION = "10.0"

_DESKTOP_CAPTION = re.compile(r"\bWindows (10|11)\b", re.IGNORECASE)

_OS_QUERY = (
    "Get-CimInstance -ClassName Win32_OperatingSystem | "
    "Select-Object Caption,Version,BuildNumber | ConvertTo-Json -Compress"
)


class OSDetectionError(RuntimeError):
    pass


@dataclass(frozen=True)
class OSProfile:
    version: str
    build_number: int
    caption: str

    @property
    def major_version(self) -> str:
        parts = self.version.split(".")
        return ".".join(parts[:2])

    @property
    def is_desktop(self) -> bool:
        caption = self.caption.lower()
        return bool(_DESKTOP_CAPTION.search(self.caption)) and "server" not in caption

    @property
    def meets_min_build(self) -> bool:
        return self.build_number >= MIN_DESKTOP_BUILD

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "build_number": self.build_number,
            "caption": self.caption,
            "major_version": self.major_version,
            "is_desktop": self.is_desktop,
        }


def normalize_arch(machine: str) -> str:
    m = machine.lower()
    return {
        "amd64": "x64",
        "x86_64": "x64",
        "x64": "x64",
        "i386": "x86",
        "i686": "x86",
        "x86": "x86",
        "aarch64": "arm64",
        "arm64": "arm64",
    }.get(m, m)


def _build_from_version(version: str) -> int:
    parts = version.split(".")
    if len(parts) >= 3 and parts[2].isdigit():
        return int(parts[2])
    return 0


def parse_os_query(stdout: str) -> OSProfile:
    """Parse the JSON emitted by the Win32_OperatingSystem query."""

    try:
        data = json.loads(stdout)
    except ValueError as e:
        raise OSDetectionError(f"Unparseable OS query output: {stdout.strip()!r}") from e

    if isinstance(data, list):
        data = data[0] if data else {}
    if not isinstance(data, dict):
        raise OSDetectionError(f"OS query must return an object, got {type(data).__name__}")

    version = str(data.get("Version") or "").strip()
    caption = str(data.get("Caption") or "").strip()
    build_raw = str(data.get("BuildNumber") or "").strip()
    if not version:
        raise OSDetectionError("OS query returned no Version")

    build = int(build_raw) if build_raw.isdigit() else _build_from_version(version)
    return OSProfile(version=version, build_number=build, caption=caption)


def _profile_from_platform() -> OSProfile:
    version = platform.version()
    caption = f"{platform.system()} {platform.release()}".strip()
    return OSProfile(version=version, build_number=_build_from_version(version), caption=caption)


def detect_os_profile(*, dry_run: bool = False, overrides: Optional[Dict[str, Any]] = None) -> OSProfile:
    """Read the OS profile once from the host.

    `overrides` (from config `os_profile`) replaces detected values, which
    lets a dry run plan for a different host.
    """

    overrides = overrides or {}

    if dry_run or platform.system() != "Windows":
        profile = _profile_from_platform()
    else:
        r = powershell(_OS_QUERY, check=False)
        if not r.ok:
            raise OSDetectionError(f"OS query failed ({r.returncode}): {r.stderr.strip()}")
        profile = parse_os_query(r.stdout)

    if overrides:
        build = str(overrides.get("build_number", profile.build_number)).strip()
        if not build.isdigit():
            raise OSDetectionError(f"os_profile.build_number must be an integer, got {build!r}")
        profile = OSProfile(
            version=str(overrides.get("version", profile.version)),
            build_number=int(build),
            caption=str(overrides.get("caption", profile.caption)),
        )

    logger.info(
        "OS profile: caption=%r version=%s build=%s", profile.caption, profile.version, profile.build_number
    )
    return profile


def detect_arch() -> str:
    return normalize_arch(platform.machine())
