from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.appx import failure_reason
from ..outcomes import ErrorKind, Outcome, StepReport

logger = logging.getLogger(__name__)


class InstallSecondaryManagerStep:
    step_id = "70_install_secondary_manager"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepReport:
        report = StepReport(self.step_id)
        secondary = ctx.secondary

        if secondary.is_installed():
            report.add(Outcome.already(secondary.name))
            return report

        logger.info("Bootstrapping %s from its remote installer", secondary.name)
        r = secondary.ensure_installed()
        if not r.ok:
            report.add(Outcome.failed(secondary.name, ErrorKind.SECONDARY_BOOTSTRAP, failure_reason(r)))
            return report

        report.add(Outcome.success(secondary.name))
        return report
