from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    ALREADY_SATISFIED = "already_satisfied"
    FAILED = "failed"


class ErrorKind(str, Enum):
    DIRECTORY_CREATION = "DirectoryCreationFailure"
    TRANSFER = "TransferFailure"
    EXTRACTION = "ExtractionFailure"
    COPY = "CopyFailure"
    MISSING_ARTIFACT = "MissingArtifact"
    PACKAGE_INSTALL = "PackageInstallFailure"
    PROVISIONING = "ProvisioningFailure"
    SECONDARY_BOOTSTRAP = "SecondaryManagerBootstrapFailure"
    VERIFICATION = "VerificationFailure"


class Policy(str, Enum):
    FAIL_FAST = "fail-fast"
    BEST_EFFORT = "best-effort"


@dataclass(frozen=True)
class Outcome:
    """Result of one unit of work (an artifact, a package, a check)."""

    subject: str
    kind: OutcomeKind
    reason: Optional[str] = None
    error: Optional[ErrorKind] = None

    @classmethod
    def success(cls, subject: str, reason: Optional[str] = None) -> "Outcome":
        return cls(subject=subject, kind=OutcomeKind.SUCCESS, reason=reason)

    @classmethod
    def already(cls, subject: str, reason: Optional[str] = None) -> "Outcome":
        return cls(subject=subject, kind=OutcomeKind.ALREADY_SATISFIED, reason=reason)

    @classmethod
    def failed(cls, subject: str, error: ErrorKind, reason: str) -> "Outcome":
        return cls(subject=subject, kind=OutcomeKind.FAILED, reason=reason, error=error)

    @property
    def is_failed(self) -> bool:
        return self.kind is OutcomeKind.FAILED

    def describe(self) -> str:
        if self.is_failed:
            return f"{self.error.value if self.error else 'Failure'}: {self.subject}: {self.reason}"
        if self.reason:
            return f"{self.subject}: {self.kind.value} ({self.reason})"
        return f"{self.subject}: {self.kind.value}"

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"subject": self.subject, "kind": self.kind.value}
        if self.reason:
            d["reason"] = self.reason
        if self.error is not None:
            d["error"] = self.error.value
        return d


@dataclass
class StepReport:
    step_id: str
    outcomes: List[Outcome] = field(default_factory=list)

    def add(self, outcome: Outcome) -> Outcome:
        self.outcomes.append(outcome)
        return outcome

    @property
    def failures(self) -> List[Outcome]:
        return [o for o in self.outcomes if o.is_failed]

    @property
    def failed(self) -> bool:
        return any(o.is_failed for o in self.outcomes)
