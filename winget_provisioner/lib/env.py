from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path


def _program_data() -> str:
    return os.environ.get("ProgramData") or r"C:\ProgramData"


@dataclass(frozen=True)
class Paths:
    staging_default: str = str(Path(tempfile.gettempdir()) / "winget-provision")
    log_default: str = str(Path(tempfile.gettempdir()) / "winget-provisioner.log")
    state_name: str = "provision-state.json"
    extracted_dir_name: str = "extracted"
    chocolatey_exe: str = field(default_factory=lambda: str(Path(_program_data()) / "chocolatey" / "bin" / "choco.exe"))


PATHS = Paths()
