from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.appx import failure_reason
from ..outcomes import ErrorKind, Outcome, StepReport

logger = logging.getLogger(__name__)


class InstallRuntimeLibrariesStep:
    step_id = "50_install_runtime_libraries"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepReport:
        report = StepReport(self.step_id)

        # Each install is independent: a failure here never skips the next one.
        for name in ctx.manifest.runtime_libraries:
            logger.info("Installing runtime library %s", name)
            r = ctx.installer.install_package(str(ctx.artifact_path(name)))
            if r.ok:
                report.add(Outcome.success(name))
            else:
                report.add(Outcome.failed(name, ErrorKind.PACKAGE_INSTALL, failure_reason(r)))

        return report
