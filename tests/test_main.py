import json

import pytest

from conftest import DESKTOP, FakeDownloader, FakeInstaller, FakeResolver, FakeSecondary

from winget_provisioner import main as main_mod
from winget_provisioner.pipeline import PipelineResult, TERMINAL_DONE, TERMINAL_HALTED


def _caps(**overrides):
    caps = {
        "downloader": FakeDownloader(),
        "installer": FakeInstaller(),
        "secondary": FakeSecondary(),
        "resolve": FakeResolver({"winget": "winget.exe"}),
        "probe_os": lambda: DESKTOP,
        "pause_fn": None,
    }
    caps.update(overrides)
    return caps


def test_run_saves_the_run_record(tmp_path):
    staging = tmp_path / "staging"

    result = main_mod.run(
        staging_dir=str(staging),
        log_path=str(tmp_path / "provision.log"),
        overrides={"arch": "x64", "upgrade_all": False},
        **_caps(),
    )

    assert result.terminal == TERMINAL_DONE
    record = json.loads((staging / "provision-state.json").read_text(encoding="utf-8"))
    assert record["run_count"] == 1
    assert record["execution"]["summary"]["terminal"] == TERMINAL_DONE
    assert record["execution"]["decisions"]["install_scope"] == "current_user"
    assert record["execution"]["decisions"]["arch"] == "x64"


def test_run_count_increments(tmp_path):
    kwargs = dict(
        staging_dir=str(tmp_path / "staging"),
        log_path=str(tmp_path / "provision.log"),
        overrides={"arch": "x64", "upgrade_all": False},
    )
    main_mod.run(**kwargs, **_caps())
    main_mod.run(**kwargs, **_caps())
    record = json.loads((tmp_path / "staging" / "provision-state.json").read_text(encoding="utf-8"))
    assert record["run_count"] == 2


def test_fail_fast_halt_is_recorded(tmp_path):
    state_path = tmp_path / "state.json"

    result = main_mod.run(
        staging_dir=str(tmp_path / "staging"),
        state_path=str(state_path),
        log_path=str(tmp_path / "provision.log"),
        overrides={"arch": "x64"},
        **_caps(downloader=FakeDownloader(fail={"License1.xml"})),
    )

    assert result.terminal == TERMINAL_HALTED
    record = json.loads(state_path.read_text(encoding="utf-8"))
    assert record["execution"]["errors"][0]["step"] == "20_fetch_artifacts"
    assert record["execution"]["summary"]["terminal"] == TERMINAL_HALTED


def test_main_exit_status_follows_policy(monkeypatch):
    seen = {}

    def fake_run(**kwargs):
        seen.update(kwargs)
        return PipelineResult(state={}, halted=kwargs["overrides"]["policy"] == "fail-fast")

    monkeypatch.setattr(main_mod, "run", fake_run)

    assert main_mod.main(["--policy", "fail-fast", "--no-pause"]) == 1
    assert seen["overrides"]["pause"] is False
    assert seen["overrides"]["dry_run"] is None

    assert main_mod.main(["--policy", "best-effort", "--source", "nuget", "--dry-run"]) == 0
    assert seen["overrides"]["artifact_source"] == "nuget"
    assert seen["overrides"]["dry_run"] is True


def test_dry_run_end_to_end_touches_nothing_outside_staging(tmp_path, monkeypatch):
    def no_subprocess(*a, **kw):
        raise AssertionError("dry run must not execute commands")

    monkeypatch.setattr("subprocess.run", no_subprocess)

    result = main_mod.run(
        staging_dir=str(tmp_path / "staging"),
        log_path=str(tmp_path / "provision.log"),
        overrides={"arch": "x64", "dry_run": True, "artifact_source": "nuget"},
        resolve=FakeResolver(),
        probe_os=lambda: DESKTOP,
        pause_fn=None,
    )

    assert not result.halted
    assert result.failures == []


@pytest.mark.parametrize(
    "argv",
    [
        ["--arch", "arm"],
        ["--start-at", "99_nope"],
        ["--stop-after", "fetch"],
        ["--policy", "careful"],
    ],
)
def test_bad_arguments_exit_with_status_2(monkeypatch, argv):
    def fake_run(**kwargs):
        raise AssertionError("run must not be reached")

    monkeypatch.setattr(main_mod, "run", fake_run)

    with pytest.raises(SystemExit) as exc:
        main_mod.main(argv)

    assert exc.value.code == 2


def test_step_ids_and_arch_are_accepted(monkeypatch):
    seen = {}

    def fake_run(**kwargs):
        seen.update(kwargs)
        return PipelineResult(state={})

    monkeypatch.setattr(main_mod, "run", fake_run)

    assert main_mod.main(["--arch", "arm64", "--start-at", "50_install_runtime_libraries", "--stop-after", "60_install_package_manager"]) == 0
    assert seen["overrides"]["arch"] == "arm64"
    assert seen["start_at"] == "50_install_runtime_libraries"
    assert seen["stop_after"] == "60_install_package_manager"
