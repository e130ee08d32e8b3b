from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .config import apply_overrides, load_config
from .context import CommandResolver, OSProbe, Pause, ProvisionCtx, operator_pause
from .lib.appx import AppxInstaller, PackageInstaller
from .lib.chocolatey import Chocolatey, ExternalInstaller
from .lib.command import resolve_command
from .lib.env import PATHS
from .lib.manifests import SOURCES, SUPPORTED_ARCHES, build_manifest
from .lib.net import Downloader, HttpDownloader
from .lib.osinfo import detect_arch, detect_os_profile
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .outcomes import Policy
from .pipeline import PipelineResult, ProvisionHalted, run_pipeline
from .state_store import ensure_defaults, load_state, save_state
from .steps import (
    CheckCompletenessStep,
    ExpandArchiveStep,
    FetchArtifactsStep,
    InstallPackageManagerStep,
    InstallRuntimeLibrariesStep,
    InstallSecondaryManagerStep,
    PrepareStagingStep,
    VerifyPackageManagerStep,
)

logger = logging.getLogger(__name__)


DEFAULT_STAGING_DIR = PATHS.staging_default


def build_steps():
    return [
        PrepareStagingStep(),
        FetchArtifactsStep(),
        ExpandArchiveStep(),
        CheckCompletenessStep(),
        InstallRuntimeLibrariesStep(),
        InstallPackageManagerStep(),
        InstallSecondaryManagerStep(),
        VerifyPackageManagerStep(),
    ]


def build_context(
    cfg: Dict[str, Any],
    staging_dir: str,
    *,
    downloader: Optional[Downloader] = None,
    installer: Optional[PackageInstaller] = None,
    secondary: Optional[ExternalInstaller] = None,
    resolve: Optional[CommandResolver] = None,
    probe_os: Optional[OSProbe] = None,
    pause_fn: Optional[Pause] = operator_pause,
) -> ProvisionCtx:
    """Turn resolved config into a ProvisionCtx; any capability can be injected."""

    dry_run = bool(cfg.get("dry_run", False))
    arch = str(cfg.get("arch") or "auto")
    if arch == "auto":
        arch = detect_arch()
    manifest = build_manifest(arch, str(cfg.get("artifact_source", "release")))
    os_overrides = cfg.get("os_profile") or {}

    return ProvisionCtx(
        staging_dir=Path(staging_dir),
        manifest=manifest,
        policy=Policy(str(cfg.get("policy", Policy.FAIL_FAST.value))),
        downloader=downloader or HttpDownloader(dry_run=dry_run),
        installer=installer or AppxInstaller(dry_run=dry_run),
        secondary=secondary or Chocolatey(dry_run=dry_run),
        resolve=resolve or resolve_command,
        probe_os=probe_os or (lambda: detect_os_profile(dry_run=dry_run, overrides=os_overrides)),
        pause_fn=pause_fn if cfg.get("pause", True) else None,
        dry_run=dry_run,
        upgrade_all=bool(cfg.get("upgrade_all", True)),
    )


def run(
    *,
    staging_dir: str = DEFAULT_STAGING_DIR,
    state_path: Optional[str] = None,
    log_path: str = DEFAULT_LOG_PATH,
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    log_level: int = logging.INFO,
    **capabilities: Any,
) -> PipelineResult:
    """Run the provisioning pipeline and save the run record."""

    actual_log_path = configure_logging(log_path=log_path, level=log_level)
    state_path = state_path or str(Path(staging_dir) / PATHS.state_name)

    previous = load_state(state_path)
    state = ensure_defaults({"run_count": int(previous.get("run_count") or 0) + 1})
    cfg = apply_overrides(state["config"], load_config(config_path) if config_path else None, overrides)
    state["execution"]["paths"] = {
        "staging_dir": staging_dir,
        "log_path_requested": log_path,
        "log_path_actual": actual_log_path,
    }

    ctx = build_context(cfg, staging_dir, **capabilities)
    state["execution"]["decisions"]["arch"] = ctx.manifest.arch
    logger.info(
        "Provisioning into %s (policy=%s source=%s arch=%s dry_run=%s)",
        ctx.staging_dir,
        ctx.policy.value,
        ctx.manifest.source,
        ctx.manifest.arch,
        ctx.dry_run,
    )

    try:
        try:
            result = run_pipeline(
                ctx=ctx,
                state=state,
                steps=build_steps(),
                start_at=start_at,
                stop_after=stop_after,
            )
        except ProvisionHalted as e:
            logger.error("Provisioning halted: %s", e)
            state["execution"]["errors"].append({"step": e.step_id, "error": str(e)})
            result = e.result or PipelineResult(state=state, halted=True)

        summary = state["execution"].setdefault("summary", {})
        summary["ran_steps"] = result.ran_steps
        summary["skipped_steps"] = result.skipped_steps
        summary["failures"] = len(result.failures)
        summary["terminal"] = result.terminal
        return result
    except Exception as e:
        logger.exception("Provisioner failed")
        state["execution"]["errors"].append(
            {
                "step": state["execution"].get("current_step"),
                "error": str(e),
            }
        )
        raise
    finally:
        save_state(state_path, state)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="winget-provisioner",
        description="Install the Windows Package Manager (winget) and its runtime dependencies.",
    )
    p.add_argument("--staging-dir", default=DEFAULT_STAGING_DIR, help="Where artifacts are downloaded")
    p.add_argument("--state", default=None, help="Path to the run record (json|yaml); default <staging>/provision-state.json")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the log file")
    p.add_argument("--config", default=None, help="YAML config overlay")
    p.add_argument("--policy", choices=[x.value for x in Policy], default=None, help="Error policy (default fail-fast)")
    p.add_argument("--source", choices=SOURCES, default=None, help="Where UI.Xaml comes from (default release)")
    step_ids = [s.step_id for s in build_steps()]
    p.add_argument("--arch", choices=[*SUPPORTED_ARCHES, "auto"], default=None, help="Target architecture (default: detect)")
    p.add_argument("--start-at", choices=step_ids, default=None, metavar="STEP_ID", help="Start at step_id (e.g. 50_install_runtime_libraries)")
    p.add_argument("--stop-after", choices=step_ids, default=None, metavar="STEP_ID", help="Stop after step_id")
    p.add_argument("--dry-run", action="store_true", default=None, help="Log commands and downloads without running them")
    p.add_argument("--no-pause", dest="pause", action="store_false", default=None, help="Never wait for Enter after errors or compatibility warnings")
    p.add_argument("--no-upgrade", dest="upgrade_all", action="store_false", default=None, help="Skip 'winget upgrade --all'")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug output on the console (the log file always has it)")

    args = p.parse_args(argv)

    result = run(
        staging_dir=args.staging_dir,
        state_path=args.state,
        log_path=args.log,
        config_path=args.config,
        overrides={
            "policy": args.policy,
            "artifact_source": args.source,
            "arch": args.arch,
            "dry_run": args.dry_run,
            "pause": args.pause,
            "upgrade_all": args.upgrade_all,
        },
        start_at=args.start_at,
        stop_after=args.stop_after,
        log_level=logging.DEBUG if args.verbose else logging.INFO,
    )

    if result.halted:
        logger.error("Provisioning stopped after %d error(s).", len(result.failures))
        return 1
    if result.failures or result.warnings:
        logger.warning(
            "Provisioning completed with %d error(s) and %d warning(s); review the messages above.",
            len(result.failures),
            len(result.warnings),
        )
    else:
        logger.info("Provisioning completed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
