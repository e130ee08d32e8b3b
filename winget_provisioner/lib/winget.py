from __future__ import annotations

from .command import CmdResult, run_cmd

WINGET_COMMAND = "winget"
WINGET_CHOCO_PACKAGE = "winget"


def upgrade_all(winget_path: str, *, dry_run: bool = False) -> CmdResult:
    return run_cmd(
        [
            winget_path,
            "upgrade",
            "--all",
            "--silent",
            "--accept-source-agreements",
            "--accept-package-agreements",
        ],
        check=False,
        dry_run=dry_run,
    )
