"""Scan orchestration: collect, check integrity, restore, validate, audit.

One call to ScanOrchestrator.scan() is one invocation. Only FatalIOError
aborts a run, and it is always raised before anything is persisted.
"""

import logging
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field

from soulscan.audit.logger import AuditLogger
from soulscan.audit.models import AuditAction, AuditEntry
from soulscan.config import DataPaths, SoulScanConfig
from soulscan.errors import FatalIOError
from soulscan.integrity.baseline import BaselineStore
from soulscan.integrity.checksums import ChecksumSet, ChecksumStore, fingerprint_all
from soulscan.integrity.drift import DriftClassifier, DriftReport
from soulscan.integrity.policy import PolicyTable
from soulscan.integrity.restore import RestoreExecutor
from soulscan.isolation.lock import ScanLock
from soulscan.validation.client import ValidationClient, ValidationReport, build_manifest
from soulscan.workspace import WorkspaceLocator, collect_files

logger = logging.getLogger(__name__)


class ScanState(StrEnum):
    IDLE = "idle"
    COLLECTING_FILES = "collecting_files"
    CHECKING_INTEGRITY = "checking_integrity"
    RESTORING = "restoring"
    VALIDATING = "validating"
    AUDITING = "auditing"
    DONE = "done"


class ScanOptions(BaseModel):
    init: bool = False
    restore: bool = False
    approve: bool = False
    offline: bool = False


class ScanResult(BaseModel):
    workspace: Path
    state: ScanState = ScanState.IDLE
    action: AuditAction | None = None
    files_scanned: int = 0
    drift: DriftReport = Field(default_factory=DriftReport)
    validation: ValidationReport | None = None
    audit_entry: AuditEntry | None = None

    @property
    def offline(self) -> bool:
        return self.validation is None

    @property
    def failed(self) -> bool:
        """Unresolved drift or failing validation checks."""
        unresolved = self.action != "approve" and self.drift.tampered and bool(self.drift.unresolved)
        validation_failed = self.validation is not None and self.validation.errors > 0
        return unresolved or validation_failed

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0


class ScanOrchestrator:
    def __init__(
        self,
        paths: DataPaths,
        config: SoulScanConfig | None = None,
        locator: WorkspaceLocator | None = None,
        validator: ValidationClient | None = None,
    ) -> None:
        self.paths = paths
        self.config = config or SoulScanConfig()
        self.locator = locator or WorkspaceLocator(self.config.platform)
        self.validator = validator or ValidationClient(self.config.api_base, self.config.timeout)
        self.policies = PolicyTable.with_overrides(self.config.policies)
        self.checksums = ChecksumStore(paths.checksums)
        self.baseline = BaselineStore(paths.baseline_dir)
        self.audit = AuditLogger(paths.audit_log)

    def scan(self, workspace_dir: Path | None = None, options: ScanOptions | None = None) -> ScanResult:
        opts = options or ScanOptions()
        workspace = self.locator.locate(workspace_dir)
        result = ScanResult(workspace=workspace)

        try:
            self.paths.ensure()
        except OSError as e:
            raise FatalIOError(f"Cannot create data directory {self.paths.root}: {e}") from e

        with ScanLock(self.paths.lock):
            self._advance(result, ScanState.COLLECTING_FILES)
            files = collect_files(workspace)
            result.files_scanned = len(files)
            if not files:
                logger.info("No tracked files in %s, nothing to scan", workspace)
                self._advance(result, ScanState.DONE)
                return result

            self._advance(result, ScanState.CHECKING_INTEGRITY)
            current = fingerprint_all(files)
            saved = None if opts.init else self.checksums.load()

            restore_enabled = opts.restore and not opts.approve
            if restore_enabled:
                self._advance(result, ScanState.RESTORING)
            executor = RestoreExecutor(workspace, self.baseline)
            drift = DriftClassifier(self.policies).classify(
                current, saved, restore_enabled=restore_enabled, restore_fn=executor.restore
            )
            result.drift = drift

            if drift.restored:
                files = collect_files(workspace)
                current = fingerprint_all(files)

            if drift.initialized:
                result.action = "init"
            elif opts.approve:
                result.action = "approve"
            elif drift.restored:
                result.action = "restore"
            else:
                result.action = "scan"

            try:
                if result.action in ("init", "approve"):
                    self.baseline.save(files)
                    self.checksums.save(current)
                else:
                    self.checksums.save(self._carry_unresolved(current, saved or {}, drift))
            except OSError as e:
                raise FatalIOError(f"Cannot write integrity state in {self.paths.root}: {e}") from e

            if not opts.offline:
                self._advance(result, ScanState.VALIDATING)
                text_files = {n: c.decode("utf-8", errors="replace") for n, c in files.items()}
                result.validation = self.validator.validate(build_manifest(text_files), text_files)

            self._advance(result, ScanState.AUDITING)
            validation = result.validation
            try:
                result.audit_entry = self.audit.log(
                    action=result.action,
                    files_scanned=len(files),
                    drift_detected=drift.drifted,
                    restored=drift.restored,
                    scan_score=validation.score if validation else None,
                    scan_errors=validation.errors if validation else None,
                    scan_warnings=validation.warnings if validation else None,
                )
            except OSError as e:
                raise FatalIOError(f"Cannot append to audit log {self.paths.audit_log}: {e}") from e

            self._advance(result, ScanState.DONE)
            return result

    @staticmethod
    def _carry_unresolved(current: ChecksumSet, saved: ChecksumSet, drift: DriftReport) -> ChecksumSet:
        """Keep the saved digest of alerted files so the alert persists until approved."""
        persisted = dict(current)
        for name in drift.alerted:
            if name in saved:
                persisted[name] = saved[name]
        return persisted

    @staticmethod
    def _advance(result: ScanResult, state: ScanState) -> None:
        logger.debug("scan %s -> %s", result.state, state)
        result.state = state
