from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.appx import failure_reason
from ..lib.winget import WINGET_CHOCO_PACKAGE, WINGET_COMMAND, upgrade_all
from ..outcomes import ErrorKind, Outcome, StepReport
from ..state_store import add_warning, set_decision

logger = logging.getLogger(__name__)


class VerifyPackageManagerStep:
    step_id = "80_verify_package_manager"

    def _upgrade(self, ctx: ProvisionCtx, state: Dict[str, Any], winget_path: str) -> None:
        if not ctx.upgrade_all:
            return
        logger.info("Upgrading all installed packages")
        r = upgrade_all(winget_path, dry_run=ctx.dry_run)
        if not r.ok:
            # Never fatal.
            reason = failure_reason(r)
            logger.warning("Package upgrade failed: %s", reason)
            add_warning(state, step=self.step_id, upgrade_all=reason)

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepReport:
        report = StepReport(self.step_id)

        path = ctx.resolve(WINGET_COMMAND)
        if path is None and ctx.dry_run:
            path = WINGET_COMMAND

        if path is not None:
            set_decision(state, "fallback_used", False)
            report.add(Outcome.success(WINGET_COMMAND, path))
            self._upgrade(ctx, state, path)
            return report

        # Single fallback: one install through the secondary manager, one re-check.
        logger.warning("%s not found on PATH; installing it through %s", WINGET_COMMAND, ctx.secondary.name)
        set_decision(state, "fallback_used", True)
        r = ctx.secondary.install_package(WINGET_CHOCO_PACKAGE)
        if not r.ok:
            logger.warning("%s install of %s failed: %s", ctx.secondary.name, WINGET_CHOCO_PACKAGE, failure_reason(r))

        path = ctx.resolve(WINGET_COMMAND)
        if path is None:
            reason = f"{WINGET_COMMAND} is not on PATH after the {ctx.secondary.name} fallback"
            if not r.ok:
                reason += f" ({failure_reason(r)})"
            report.add(Outcome.failed(WINGET_COMMAND, ErrorKind.VERIFICATION, reason))
            return report

        report.add(Outcome.success(WINGET_COMMAND, f"{path} (via {ctx.secondary.name})"))
        return report
