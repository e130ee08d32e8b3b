"""Artifact manifests.

The manifest is literal: URLs and local names are pinned here and nowhere
else. Two sources exist:

- ``release``: the UI.Xaml appx comes straight from the GitHub release.
- ``nuget``: the UI.Xaml appx is pulled out of the NuGet package archive.

Both share the VCLibs appx, the winget msixbundle and its license file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

WINGET_RELEASE = "v1.6.3482"
WINGET_LICENSE_ID = "e53e159d00e04f729cc2180cffd1c02e"
UI_XAML_VERSION = "2.8.6"
UI_XAML_APPX_SERIES = "2.8"

SUPPORTED_ARCHES = ("x64", "x86", "arm64")
SOURCES = ("release", "nuget")


@dataclass(frozen=True)
class ArtifactManifestEntry:
    url: str
    local_name: str
    required: bool = True


@dataclass(frozen=True)
class ArchiveSpec:
    """A downloaded archive plus the entries to pull out of it."""

    local_name: str
    member_dir: str
    # entry file name inside member_dir -> local name in the staging dir
    entries: Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class Manifest:
    arch: str
    source: str
    artifacts: Tuple[ArtifactManifestEntry, ...]
    archive: Optional[ArchiveSpec]

    @property
    def vclibs(self) -> str:
        return vclibs_name(self.arch)

    @property
    def ui_xaml(self) -> str:
        return ui_xaml_name(self.arch)

    @property
    def winget_bundle(self) -> str:
        return WINGET_BUNDLE_NAME

    @property
    def winget_license(self) -> str:
        return WINGET_LICENSE_NAME

    @property
    def runtime_libraries(self) -> List[str]:
        """Runtime packages in install order."""
        return [self.vclibs, self.ui_xaml]

    def required_names(self) -> List[str]:
        """Every local name the installation steps read."""
        names = [a.local_name for a in self.artifacts if a.required]
        if self.archive is not None:
            names.extend(local for _, local in self.archive.entries)
        # De-dup while preserving order
        dedup: List[str] = []
        for n in names:
            if n not in dedup:
                dedup.append(n)
        return dedup


WINGET_BUNDLE_NAME = "Microsoft.DesktopAppInstaller_8wekyb3d8bbwe.msixbundle"
WINGET_LICENSE_NAME = "License1.xml"


def vclibs_name(arch: str) -> str:
    return f"Microsoft.VCLibs.{arch}.14.00.Desktop.appx"


def ui_xaml_name(arch: str) -> str:
    return f"Microsoft.UI.Xaml.{UI_XAML_APPX_SERIES}.{arch}.appx"


def _winget_download(name: str) -> str:
    return f"https://github.com/microsoft/winget-cli/releases/download/{WINGET_RELEASE}/{name}"


_COMMON_URLS: Dict[str, str] = {
    "vclibs": "https://aka.ms/Microsoft.VCLibs.{arch}.14.00.Desktop.appx",
    "ui_xaml": (
        "https://github.com/microsoft/microsoft-ui-xaml/releases/download/"
        f"v{UI_XAML_VERSION}/Microsoft.UI.Xaml.{UI_XAML_APPX_SERIES}.{{arch}}.appx"
    ),
    "ui_xaml_nuget": f"https://www.nuget.org/api/v2/package/Microsoft.UI.Xaml/{UI_XAML_VERSION}",
}


def build_manifest(arch: str = "x64", source: str = "release") -> Manifest:
    """Return the fixed manifest for an architecture and download source."""

    if arch not in SUPPORTED_ARCHES:
        raise ValueError(f"Unsupported arch {arch!r} (expected one of {', '.join(SUPPORTED_ARCHES)})")
    if source not in SOURCES:
        raise ValueError(f"Unsupported artifact source {source!r} (expected one of {', '.join(SOURCES)})")

    artifacts: List[ArtifactManifestEntry] = [
        ArtifactManifestEntry(_COMMON_URLS["vclibs"].format(arch=arch), vclibs_name(arch)),
    ]
    archive: Optional[ArchiveSpec] = None

    if source == "release":
        artifacts.append(ArtifactManifestEntry(_COMMON_URLS["ui_xaml"].format(arch=arch), ui_xaml_name(arch)))
    else:
        nupkg = f"microsoft.ui.xaml.{UI_XAML_VERSION}.zip"
        artifacts.append(ArtifactManifestEntry(_COMMON_URLS["ui_xaml_nuget"], nupkg, required=False))
        archive = ArchiveSpec(
            local_name=nupkg,
            member_dir=f"tools/AppX/{arch}/Release",
            entries=((f"Microsoft.UI.Xaml.{UI_XAML_APPX_SERIES}.appx", ui_xaml_name(arch)),),
        )

    artifacts.append(ArtifactManifestEntry(_winget_download(WINGET_BUNDLE_NAME), WINGET_BUNDLE_NAME))
    artifacts.append(
        ArtifactManifestEntry(_winget_download(f"{WINGET_LICENSE_ID}_License1.xml"), WINGET_LICENSE_NAME)
    )

    return Manifest(arch=arch, source=source, artifacts=tuple(artifacts), archive=archive)
