from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from .outcomes import StepReport

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def _yaml():
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("YAML state requested but PyYAML is not available. Use a .json state path.") from e
    return yaml


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    fmt = _detect_format(p)
    text = p.read_text(encoding="utf-8")
    if fmt in {"yaml", "yml"}:
        data = _yaml().safe_load(text) or {}
    else:
        data = json.loads(text) if text.strip() else {}

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    fmt = _detect_format(p)
    if fmt in {"yaml", "yml"}:
        p.write_text(_yaml().safe_dump(state, sort_keys=False) + "\n", encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with defaults (without overriding user values)."""

    state.setdefault("version", "1")
    state.setdefault("config", {})
    state.setdefault("execution", {})

    cfg = state["config"]
    cfg.setdefault("policy", "fail-fast")
    # release: UI.Xaml appx from GitHub; nuget: UI.Xaml pulled from the NuGet archive.
    cfg.setdefault("artifact_source", "release")
    cfg.setdefault("arch", "auto")
    cfg.setdefault("dry_run", False)
    cfg.setdefault("pause", True)
    cfg.setdefault("upgrade_all", True)
    # Optional {version, build_number, caption} overriding the detected OS profile.
    cfg.setdefault("os_profile", {})

    exe = state["execution"]
    exe.setdefault("current_step", None)
    exe.setdefault("completed_steps", [])
    exe.setdefault("errors", [])
    exe.setdefault("warnings", [])
    exe.setdefault("decisions", {})
    exe.setdefault("outcomes", {})

    return state


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def record_step_report(state: Dict[str, Any], report: StepReport) -> None:
    exe = state.setdefault("execution", {})
    exe.setdefault("outcomes", {})[report.step_id] = [o.to_dict() for o in report.outcomes]


def add_warning(state: Dict[str, Any], **warning: Any) -> None:
    state.setdefault("execution", {}).setdefault("warnings", []).append(warning)


def set_decision(state: Dict[str, Any], key: str, value: Any) -> None:
    state.setdefault("execution", {}).setdefault("decisions", {})[key] = value
