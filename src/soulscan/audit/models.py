"""Pydantic models for audit trail entries."""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

GENESIS_HASH = "sha256:" + "0" * 64

AuditAction = Literal["init", "scan", "restore", "approve"]


class AuditEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    action: AuditAction
    files_scanned: int = 0
    drift_detected: list[str] = Field(default_factory=list)
    restored: list[str] = Field(default_factory=list)
    scan_score: float | None = None
    scan_errors: int | None = None
    scan_warnings: int | None = None
    prev_hash: str = GENESIS_HASH
    entry_hash: str | None = None


class VerificationResult(BaseModel):
    valid: bool
    entries_checked: int
    first_broken_index: int | None = None
    first_error: str | None = None
    expected: str | None = None
    actual: str | None = None
