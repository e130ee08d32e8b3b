from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import ProvisionCtx
from ..outcomes import ErrorKind, Outcome, StepReport

logger = logging.getLogger(__name__)


class PrepareStagingStep:
    step_id = "10_prepare_staging"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepReport:
        report = StepReport(self.step_id)
        staging = ctx.staging_dir
        subject = str(staging)

        if staging.is_dir():
            report.add(Outcome.already(subject))
            return report

        if ctx.dry_run:
            logger.info("Would create staging directory %s", staging)
            report.add(Outcome.success(subject, "dry run"))
            return report

        try:
            staging.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            report.add(Outcome.failed(subject, ErrorKind.DIRECTORY_CREATION, str(e)))
            return report

        report.add(Outcome.success(subject, "created"))
        return report
