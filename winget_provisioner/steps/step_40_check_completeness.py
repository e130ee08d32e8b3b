from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

from ..context import ProvisionCtx
from ..outcomes import ErrorKind, Outcome, StepReport

logger = logging.getLogger(__name__)


def find_missing(required: Iterable[str], present: Iterable[str]) -> List[str]:
    """Return the required names absent from `present`, in required order."""

    have = set(present)
    missing: List[str] = []
    for name in required:
        if name not in have and name not in missing:
            missing.append(name)
    return missing


def missing_artifacts(staging_dir: Path, required: Iterable[str]) -> List[str]:
    present = [p.name for p in staging_dir.iterdir() if p.is_file()] if staging_dir.is_dir() else []
    return find_missing(required, present)


class CheckCompletenessStep:
    step_id = "40_check_completeness"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepReport:
        report = StepReport(self.step_id)
        required = ctx.manifest.required_names()
        missing = missing_artifacts(ctx.staging_dir, required)

        if not missing:
            report.add(Outcome.success("artifacts", f"{len(required)} present"))
            return report

        message = "Missing required artifacts: " + ", ".join(missing)
        if ctx.dry_run:
            logger.info("%s (dry run, not enforced)", message)
            report.add(Outcome.already("artifacts", "dry run"))
            return report

        report.add(Outcome.failed("artifacts", ErrorKind.MISSING_ARTIFACT, message))
        return report
