import json

import pytest

from winget_provisioner.lib import osinfo
from winget_provisioner.lib.command import CmdResult
from winget_provisioner.lib.osinfo import OSDetectionError, OSProfile, detect_os_profile, normalize_arch, parse_os_query


def test_parse_os_query():
    out = json.dumps({"Caption": "Microsoft Windows 10 Pro", "Version": "10.0.19045", "BuildNumber": "19045"})
    profile = parse_os_query(out)
    assert profile == OSProfile(version="10.0.19045", build_number=19045, caption="Microsoft Windows 10 Pro")
    assert profile.major_version == "10.0"
    assert profile.is_desktop
    assert profile.meets_min_build


def test_parse_os_query_takes_build_from_version_when_missing():
    profile = parse_os_query('[{"Caption": "Microsoft Windows 10 Enterprise LTSC", "Version": "10.0.17763"}]')
    assert profile.build_number == 17763


@pytest.mark.parametrize("out", ["", "not json", "[]", '"text"'])
def test_parse_os_query_rejects_garbage(out):
    with pytest.raises(OSDetectionError):
        parse_os_query(out)


def test_server_caption_is_not_desktop():
    profile = OSProfile(version="10.0.17763", build_number=17763, caption="Microsoft Windows Server 2019 Standard")
    assert profile.major_version == "10.0"
    assert not profile.is_desktop


@pytest.mark.parametrize(
    "machine, arch",
    [("AMD64", "x64"), ("x86_64", "x64"), ("ARM64", "arm64"), ("aarch64", "arm64"), ("x86", "x86"), ("i686", "x86")],
)
def test_normalize_arch(machine, arch):
    assert normalize_arch(machine) == arch


def test_detect_uses_powershell_on_windows(monkeypatch):
    calls = []

    def fake_powershell(script, *, check=True, dry_run=False):
        calls.append(script)
        payload = {"Caption": "Microsoft Windows 11 Pro", "Version": "10.0.22631", "BuildNumber": "22631"}
        return CmdResult(argv=["powershell"], returncode=0, stdout=json.dumps(payload), stderr="")

    monkeypatch.setattr(osinfo.platform, "system", lambda: "Windows")
    monkeypatch.setattr(osinfo, "powershell", fake_powershell)

    profile = detect_os_profile()

    assert "Win32_OperatingSystem" in calls[0]
    assert profile.caption == "Microsoft Windows 11 Pro"
    assert profile.build_number == 22631


def test_detect_raises_when_query_fails(monkeypatch):
    monkeypatch.setattr(osinfo.platform, "system", lambda: "Windows")
    monkeypatch.setattr(
        osinfo,
        "powershell",
        lambda script, **kw: CmdResult(argv=["powershell"], returncode=1, stdout="", stderr="access denied"),
    )
    with pytest.raises(OSDetectionError, match="access denied"):
        detect_os_profile()


def test_overrides_replace_detected_values():
    profile = detect_os_profile(
        dry_run=True,
        overrides={"version": "10.0.17762", "build_number": 17762, "caption": "Microsoft Windows 10 Pro"},
    )
    assert profile == OSProfile(version="10.0.17762", build_number=17762, caption="Microsoft Windows 10 Pro")
    assert not profile.meets_min_build


@pytest.mark.parametrize("build", ["rs5", "", "17763.1"])
def test_non_numeric_build_override_is_a_detection_error(build):
    with pytest.raises(OSDetectionError, match="build_number"):
        detect_os_profile(dry_run=True, overrides={"build_number": build})


def test_numeric_string_build_override_is_accepted():
    assert detect_os_profile(dry_run=True, overrides={"build_number": " 17763 "}).build_number == 17763
