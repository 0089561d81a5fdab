"""Tests for audit logger hash chain."""

from pathlib import Path

from soulscan.audit.logger import AuditLogger, compute_entry_hash
from soulscan.audit.models import GENESIS_HASH


def test_log_creates_hash_chain(tmp_path: Path):
    log_path = tmp_path / "audit.jsonl"
    logger = AuditLogger(log_path)

    e1 = logger.log(action="init", files_scanned=3)
    assert e1.prev_hash == GENESIS_HASH
    assert e1.entry_hash is not None
    assert e1.entry_hash.startswith("sha256:")

    e2 = logger.log(action="scan", files_scanned=3)
    assert e2.prev_hash == e1.entry_hash
    assert e2.entry_hash != e1.entry_hash

    e3 = logger.log(action="restore", files_scanned=3, drift_detected=["SOUL.md"], restored=["SOUL.md"])
    assert e3.prev_hash == e2.entry_hash


def test_entry_hash_covers_prev_hash(tmp_path: Path):
    logger = AuditLogger(tmp_path / "audit.jsonl")
    entry = logger.log(action="scan", files_scanned=1)

    relinked = entry.model_copy(update={"prev_hash": "sha256:" + "f" * 64})
    assert compute_entry_hash(relinked) != entry.entry_hash
    assert compute_entry_hash(entry) == entry.entry_hash


def test_log_persists_to_file(tmp_path: Path):
    log_path = tmp_path / "audit.jsonl"
    logger = AuditLogger(log_path)

    logger.log(action="init", files_scanned=2)
    logger.log(action="scan", files_scanned=2, scan_score=92.5, scan_errors=0, scan_warnings=1)

    entries = logger.read_entries()
    assert len(entries) == 2
    assert entries[0].action == "init"
    assert entries[1].scan_score == 92.5
    assert entries[1].scan_warnings == 1
    assert len(log_path.read_text().splitlines()) == 2


def test_recent_returns_last_n_in_order(tmp_path: Path):
    logger = AuditLogger(tmp_path / "audit.jsonl")

    for i in range(5):
        logger.log(action="scan", files_scanned=i)

    last_2 = logger.recent(2)
    assert [e.files_scanned for e in last_2] == [3, 4]
    assert logger.recent(0) == []
    assert len(logger.recent(50)) == 5


def test_logger_resumes_hash_chain(tmp_path: Path):
    log_path = tmp_path / "audit.jsonl"

    # First session
    e1 = AuditLogger(log_path).log(action="init", files_scanned=1)

    # New session — should pick up where we left off
    e2 = AuditLogger(log_path).log(action="scan", files_scanned=1)
    assert e2.prev_hash == e1.entry_hash


def test_last_hash_genesis_for_missing_or_unreadable_log(tmp_path: Path):
    log_path = tmp_path / "audit.jsonl"
    logger = AuditLogger(log_path)
    assert logger.last_hash() == GENESIS_HASH

    log_path.write_text("\n\n")
    assert logger.last_hash() == GENESIS_HASH

    log_path.write_text("{not json\n")
    assert logger.last_hash() == GENESIS_HASH


def test_offline_entry_has_null_scan_fields(tmp_path: Path):
    logger = AuditLogger(tmp_path / "audit.jsonl")
    entry = logger.log(action="scan", files_scanned=4)

    stored = logger.read_entries()[0]
    assert stored.scan_score is None
    assert stored.scan_errors is None
    assert stored.entry_hash == entry.entry_hash


def test_undecodable_log_is_tolerated(tmp_path: Path):
    log_path = tmp_path / "audit.jsonl"
    logger = AuditLogger(log_path)
    logger.log(action="init", files_scanned=1)

    with open(log_path, "ab") as f:
        f.write(b"\xff\xfe garbage\n")

    assert logger.last_hash() == GENESIS_HASH
    assert [e.action for e in logger.read_entries()] == ["init"]

    entry = logger.log(action="scan", files_scanned=1)
    assert entry.prev_hash == GENESIS_HASH
