from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.net import TransferError
from ..outcomes import ErrorKind, Outcome, StepReport

logger = logging.getLogger(__name__)


class FetchArtifactsStep:
    step_id = "20_fetch_artifacts"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepReport:
        report = StepReport(self.step_id)

        for entry in ctx.manifest.artifacts:
            dest = ctx.artifact_path(entry.local_name)

            # Presence alone is enough; no size or hash check.
            if dest.exists():
                report.add(Outcome.already(entry.local_name))
                continue

            logger.info("Downloading %s from %s", entry.local_name, entry.url)
            try:
                ctx.downloader.fetch(entry.url, dest)
            except TransferError as e:
                report.add(Outcome.failed(entry.local_name, ErrorKind.TRANSFER, str(e)))
                if ctx.fail_fast:
                    break
                continue

            report.add(Outcome.success(entry.local_name, "dry run" if ctx.dry_run else None))

        return report
