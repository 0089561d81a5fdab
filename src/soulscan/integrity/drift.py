"""Drift classification: compare fingerprints and apply protection policy."""

from collections.abc import Callable

from pydantic import BaseModel, Field

from soulscan.integrity.checksums import ChecksumSet
from soulscan.integrity.policy import PolicyTable, Protection


class DriftReport(BaseModel):
    initialized: bool = False
    tampered: bool = False
    changed: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    added: list[str] = Field(default_factory=list)
    drifted: list[str] = Field(default_factory=list)
    restored: list[str] = Field(default_factory=list)
    alerted: list[str] = Field(default_factory=list)
    ignored: list[str] = Field(default_factory=list)
    details: list[str] = Field(default_factory=list)

    @property
    def unresolved(self) -> list[str]:
        """Drifted files that were neither restored nor ignored."""
        return list(self.alerted)


class DriftClassifier:
    """Decide restore / alert / ignore for each drifted file.

    restore_fn is only called for files whose policy is RESTORE, and only
    when restore mode is enabled for the run.
    """

    def __init__(self, policies: PolicyTable) -> None:
        self.policies = policies

    def classify(
        self,
        current: ChecksumSet,
        saved: ChecksumSet | None,
        restore_enabled: bool = False,
        restore_fn: Callable[[str], bool] | None = None,
    ) -> DriftReport:
        if saved is None:
            return DriftReport(initialized=True, details=["initializing baseline checksums"])

        report = DriftReport()
        report.changed = sorted(n for n in current if n in saved and saved[n] != current[n])
        report.removed = sorted(n for n in saved if n not in current)
        report.added = sorted(n for n in current if n not in saved)

        for name in report.added:
            report.details.append(f"{name}: new file added since last scan")

        for name in sorted(report.changed + report.removed):
            what = "content changed" if name in current else "file removed"
            report.drifted.append(name)
            policy = self.policies.policy_for(name)

            if policy is Protection.IGNORE:
                report.ignored.append(name)
                report.details.append(f"{name}: {what} since last scan (ignored by policy)")
                continue

            report.tampered = True

            if policy is Protection.RESTORE:
                if not restore_enabled or restore_fn is None:
                    report.alerted.append(name)
                    report.details.append(
                        f"{name}: {what} since last scan (restore policy; rerun with --restore to roll back)"
                    )
                elif restore_fn(name):
                    report.restored.append(name)
                    report.details.append(f"{name}: {what} since last scan, restored from baseline")
                else:
                    report.alerted.append(name)
                    report.details.append(
                        f"{name}: {what} since last scan, restore attempted but failed: "
                        "no usable baseline or write error (alert)"
                    )
                continue

            report.alerted.append(name)
            report.details.append(f"{name}: {what} since last scan (manual review required)")

        return report
