import pytest

from winget_provisioner.config import apply_overrides, load_config
from winget_provisioner.outcomes import Outcome, ErrorKind, StepReport
from winget_provisioner.state_store import (
    ensure_defaults,
    load_state,
    mark_step_completed,
    record_step_report,
    save_state,
)


def test_defaults_do_not_override_user_values():
    state = ensure_defaults({"config": {"policy": "best-effort"}})
    assert state["config"]["policy"] == "best-effort"
    assert state["config"]["artifact_source"] == "release"
    assert state["execution"]["completed_steps"] == []


def test_json_round_trip(tmp_path):
    path = str(tmp_path / "state.json")
    state = ensure_defaults({})
    mark_step_completed(state, "10_prepare_staging")
    mark_step_completed(state, "10_prepare_staging")
    report = StepReport("20_fetch_artifacts")
    report.add(Outcome.failed("License1.xml", ErrorKind.TRANSFER, "timed out"))
    record_step_report(state, report)

    save_state(path, state)
    loaded = load_state(path)

    assert loaded["execution"]["completed_steps"] == ["10_prepare_staging"]
    assert loaded["execution"]["outcomes"]["20_fetch_artifacts"] == [
        {"subject": "License1.xml", "kind": "failed", "reason": "timed out", "error": "TransferFailure"}
    ]


def test_yaml_round_trip(tmp_path):
    path = str(tmp_path / "state.yaml")
    save_state(path, {"config": {"policy": "fail-fast"}})
    assert load_state(path) == {"config": {"policy": "fail-fast"}}


def test_missing_state_is_empty(tmp_path):
    assert load_state(str(tmp_path / "nope.json")) == {}


def test_non_object_state_is_rejected(tmp_path):
    p = tmp_path / "state.json"
    p.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_state(str(p))


def test_config_overlay_then_cli(tmp_path):
    p = tmp_path / "provision.yaml"
    p.write_text("policy: best-effort\nartifact_source: nuget\n", encoding="utf-8")
    cfg = ensure_defaults({})["config"]

    apply_overrides(cfg, load_config(str(p)), {"artifact_source": "release", "arch": None})

    assert cfg["policy"] == "best-effort"
    assert cfg["artifact_source"] == "release"
    assert cfg["arch"] == "auto"


def test_config_rejects_unknown_keys(tmp_path):
    p = tmp_path / "provision.yaml"
    p.write_text("polcy: best-effort\n", encoding="utf-8")
    with pytest.raises(ValueError, match="polcy"):
        load_config(str(p))


def test_config_must_be_yaml(tmp_path):
    p = tmp_path / "provision.json"
    p.write_text("{}", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(p))
