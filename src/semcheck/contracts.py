"""Public report models for semcheck package."""

from typing import Any, Dict, List

from pydantic import BaseModel

from semcheck._internal.canonical_json import canonical_dumps
from semcheck.codes import Severity
from semcheck.kernel.aggregate import CrateVerdict
from semcheck.kernel.changes import Change
from semcheck.kernel.policy import VersionPolicyResult


class ReportedChange(BaseModel):
    """One change as it appears in the serialized report."""
    path: str  # "crate::module::Item::member"
    kind: str  # ChangeKind value, e.g. "FieldAdded"
    severity: str  # "Breaking" | "TechnicallyBreaking" | "NonBreaking"
    detail: str

    @classmethod
    def from_change(cls, change: Change) -> "ReportedChange":
        return cls(
            path=change.path_str,
            kind=change.kind.value,
            severity=change.severity.value,
            detail=change.detail,
        )


class CompatibilityReport(BaseModel):
    """Final report handed to an external formatter."""
    old_version: str
    new_version: str
    changes: List[ReportedChange]  # sorted by path, then kind
    verdict: Severity
    policy_check: str  # e.g. "Mismatch: expected major bump, found minor bump"
    internal_errors: List[str]  # classifier defects; affected changes fall back to Breaking
    policy: VersionPolicyResult
    crate_verdict: CrateVerdict

    @classmethod
    def build(
        cls,
        old_version: str,
        new_version: str,
        verdict: CrateVerdict,
        policy: VersionPolicyResult,
    ) -> "CompatibilityReport":
        return cls(
            old_version=old_version,
            new_version=new_version,
            changes=[ReportedChange.from_change(c) for c in verdict.changes],
            verdict=verdict.overall_severity,
            policy_check=policy.describe(),
            internal_errors=list(verdict.internal_errors),
            policy=policy,
            crate_verdict=verdict,
        )

    def to_report_dict(self) -> Dict[str, Any]:
        """Plain, serializable report (the structured verdict and policy models are left out)."""
        return self.model_dump(mode="json", exclude={"policy", "crate_verdict"})

    def to_json(self) -> str:
        """Byte-stable JSON for the report dict."""
        return canonical_dumps(self.to_report_dict())
