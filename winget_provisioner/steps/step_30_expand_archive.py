from __future__ import annotations

import logging
import zipfile
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.archive import copy_file, extract_zip
from ..outcomes import ErrorKind, Outcome, StepReport

logger = logging.getLogger(__name__)


class ExpandArchiveStep:
    """Pull allow-listed entries out of the dependency archive (nuget source only)."""

    step_id = "30_expand_archive"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepReport:
        report = StepReport(self.step_id)
        spec = ctx.manifest.archive
        if spec is None:
            logger.info("No dependency archive for source=%s; nothing to expand", ctx.manifest.source)
            return report

        archive = ctx.artifact_path(spec.local_name)
        extracted = ctx.extracted_dir

        if extracted.exists():
            report.add(Outcome.already(spec.local_name, f"already extracted to {extracted}"))
        else:
            try:
                extract_zip(str(archive), str(extracted), dry_run=ctx.dry_run)
            except (OSError, zipfile.BadZipFile) as e:
                report.add(Outcome.failed(spec.local_name, ErrorKind.EXTRACTION, str(e)))
                # Nothing to copy from.
                return report
            report.add(Outcome.success(spec.local_name, f"extracted to {extracted}"))

        member_dir = extracted.joinpath(*spec.member_dir.split("/"))
        for entry_name, local_name in spec.entries:
            dest = ctx.artifact_path(local_name)
            if dest.exists():
                report.add(Outcome.already(local_name))
                continue
            try:
                copy_file(str(member_dir / entry_name), str(dest), dry_run=ctx.dry_run)
            except OSError as e:
                report.add(Outcome.failed(local_name, ErrorKind.COPY, f"{entry_name}: {e}"))
                if ctx.fail_fast:
                    break
                continue
            report.add(Outcome.success(local_name, f"copied from {spec.member_dir}/{entry_name}"))

        return report
