"""Append-only JSONL audit logger with hash chain."""

import hashlib
import json
import logging
import os
from pathlib import Path

from soulscan.audit.models import GENESIS_HASH, AuditAction, AuditEntry

logger = logging.getLogger(__name__)


def compute_entry_hash(entry: AuditEntry) -> str:
    """Hash of every field except entry_hash, followed by prev_hash."""
    hashable = entry.model_dump(mode="json", exclude={"entry_hash", "prev_hash"})
    canonical = json.dumps(hashable, sort_keys=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256((canonical + entry.prev_hash).encode()).hexdigest()


def parse_entry(raw: bytes) -> AuditEntry:
    """Parse one stored line, requiring exactly the AuditEntry keys.

    Raises ValueError (including UnicodeDecodeError and pydantic's
    ValidationError) for anything that is not a complete entry.
    """
    data = json.loads(raw.decode("utf-8"))
    if not isinstance(data, dict):
        raise ValueError("entry is not a JSON object")
    missing = set(AuditEntry.model_fields) - set(data)
    if missing:
        raise ValueError(f"missing fields: {', '.join(sorted(missing))}")
    return AuditEntry.model_validate(data)


class AuditLogger:
    """Append-only JSONL logger with hash chain.

    Each entry's prev_hash points to the previous entry's hash,
    forming an integrity-verifiable chain rooted at GENESIS_HASH.
    """

    def __init__(self, log_path: Path) -> None:
        self.log_path = log_path

    def log(
        self,
        action: AuditAction,
        files_scanned: int,
        drift_detected: list[str] | None = None,
        restored: list[str] | None = None,
        scan_score: float | None = None,
        scan_errors: int | None = None,
        scan_warnings: int | None = None,
    ) -> AuditEntry:
        """Create and append an audit entry to the log."""
        entry = AuditEntry(
            action=action,
            files_scanned=files_scanned,
            drift_detected=list(drift_detected or []),
            restored=list(restored or []),
            scan_score=scan_score,
            scan_errors=scan_errors,
            scan_warnings=scan_warnings,
        )
        return self.append(entry)

    def append(self, entry: AuditEntry) -> AuditEntry:
        """Chain entry onto the log and write it as one line."""
        entry = entry.model_copy(update={"prev_hash": self.last_hash(), "entry_hash": None})
        entry.entry_hash = compute_entry_hash(entry)

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.log_path, "a") as f:
            f.write(entry.model_dump_json() + "\n")
            f.flush()
            os.fsync(f.fileno())

        logger.info("Audit %s entry appended to %s", entry.action, self.log_path)
        return entry

    def read_entries(self, last_n: int | None = None) -> list[AuditEntry]:
        """Read entries from the audit log without verifying the chain.

        Lines that fail to parse are skipped; verify the chain for an
        authoritative answer.
        """
        if not self.log_path.exists():
            return []

        entries = []
        with open(self.log_path, "rb") as f:
            for raw in f:
                raw = raw.strip()
                if not raw:
                    continue
                try:
                    entries.append(parse_entry(raw))
                except ValueError:
                    logger.warning("Skipping unparseable audit line in %s", self.log_path)

        if last_n is not None:
            return entries[-last_n:] if last_n > 0 else []
        return entries

    def recent(self, n: int) -> list[AuditEntry]:
        return self.read_entries(last_n=n)

    def last_hash(self) -> str:
        """Return the last entry's hash, or GENESIS_HASH if empty or unreadable."""
        if not self.log_path.exists():
            return GENESIS_HASH

        last_line = None
        try:
            with open(self.log_path, "rb") as f:
                for raw in f:
                    raw = raw.strip()
                    if raw:
                        last_line = raw
        except OSError as e:
            logger.warning("Audit log %s unreadable: %s", self.log_path, e)
            return GENESIS_HASH

        if last_line is None:
            return GENESIS_HASH

        try:
            entry = parse_entry(last_line)
        except ValueError:
            logger.warning("Last audit entry in %s is unparseable", self.log_path)
            return GENESIS_HASH
        return entry.entry_hash or GENESIS_HASH
