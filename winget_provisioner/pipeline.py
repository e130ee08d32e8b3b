from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .context import ProvisionCtx
from .outcomes import Outcome, StepReport
from .state_store import mark_step_completed, record_step_report

logger = logging.getLogger(__name__)

TERMINAL_DONE = "done"
TERMINAL_DONE_WITH_WARNINGS = "done_with_warnings"
TERMINAL_HALTED = "halted"


class Step(Protocol):
    """A single idempotent step."""

    step_id: str

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepReport:
        ...


class ProvisionHalted(RuntimeError):
    """Raised under fail-fast when a step reports a failure."""

    def __init__(
        self, step_id: str, failures: List[Outcome], result: Optional["PipelineResult"] = None
    ) -> None:
        detail = "; ".join(f.describe() for f in failures)
        super().__init__(f"Step {step_id} failed: {detail}")
        self.step_id = step_id
        self.failures = failures
        self.result = result


@dataclass
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str] = field(default_factory=list)
    skipped_steps: List[str] = field(default_factory=list)
    reports: List[StepReport] = field(default_factory=list)
    halted: bool = False

    @property
    def failures(self) -> List[Outcome]:
        return [o for r in self.reports for o in r.failures]

    @property
    def warnings(self) -> List[Dict[str, Any]]:
        return list((self.state.get("execution") or {}).get("warnings") or [])

    @property
    def terminal(self) -> str:
        if self.halted:
            return TERMINAL_HALTED
        if self.failures or self.warnings:
            return TERMINAL_DONE_WITH_WARNINGS
        return TERMINAL_DONE


def run_pipeline(
    *,
    ctx: ProvisionCtx,
    state: Dict[str, Any],
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in order, applying the run's error policy after each step.

    Fail-fast raises ProvisionHalted (carrying the partial result on
    `.result`); best-effort logs, pauses and moves on.
    """

    if start_at is not None and start_at not in {s.step_id for s in steps}:
        raise ValueError(f"Unknown step id for start_at: {start_at}")
    if stop_after is not None and stop_after not in {s.step_id for s in steps}:
        raise ValueError(f"Unknown step id for stop_after: {stop_after}")

    result = PipelineResult(state=state)
    started = start_at is None

    for step in steps:
        if not started:
            if step.step_id == start_at:
                started = True
            else:
                result.skipped_steps.append(step.step_id)
                continue

        state.setdefault("execution", {})["current_step"] = step.step_id
        logger.info("Running step %s", step.step_id)

        report = step.run(ctx, state)
        result.reports.append(report)
        result.ran_steps.append(step.step_id)
        record_step_report(state, report)
        mark_step_completed(state, step.step_id)

        for o in report.outcomes:
            if o.is_failed:
                logger.error("%s", o.describe())
            else:
                logger.info("%s", o.describe())

        if report.failed:
            if ctx.fail_fast:
                result.halted = True
                state.setdefault("execution", {})["current_step"] = None
                raise ProvisionHalted(step.step_id, report.failures, result)
            ctx.pause(f"Step {step.step_id} reported {len(report.failures)} error(s).")

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    state.setdefault("execution", {})["current_step"] = None
    return result
