from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

CONFIG_KEYS = {"policy", "artifact_source", "arch", "dry_run", "pause", "upgrade_all", "os_profile"}


def load_config(path: str) -> Dict[str, Any]:
    """Load a YAML config overlay (a mapping of config keys)."""

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the config file") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a mapping/object")

    unknown = sorted(set(raw) - CONFIG_KEYS)
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {', '.join(unknown)}")
    return raw


def apply_overrides(cfg: Dict[str, Any], *layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Apply layers in order; None values in a layer are ignored."""

    for layer in layers:
        for key, value in (layer or {}).items():
            if value is not None:
                cfg[key] = value
    return cfg
