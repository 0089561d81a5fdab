"""Audit log hash chain verification."""

from pathlib import Path

from soulscan.audit.logger import compute_entry_hash, parse_entry
from soulscan.audit.models import GENESIS_HASH, VerificationResult

PREFIX_LEN = 23  # "sha256:" plus 16 hex chars


class AuditVerifier:
    """Verify the integrity of an audit log's hash chain.

    Indices are 1-based. An entry's prev_hash is checked before its own
    hash, so an in-place edit to entry k is reported at k.
    """

    def verify(self, log_path: Path) -> VerificationResult:
        """Replay the whole log from GENESIS_HASH.

        Checks:
        1. Each line is a complete entry (valid UTF-8 JSON, exact key set)
        2. Each entry's prev_hash matches the previous entry's hash
        3. Each entry's hash matches its contents
        4. First entry's prev_hash is the genesis sentinel
        """
        if not log_path.exists():
            return VerificationResult(valid=True, entries_checked=0)

        expected_prev = GENESIS_HASH
        index = 0

        with open(log_path, "rb") as f:
            for raw in f:
                raw = raw.strip()
                if not raw:
                    continue
                index += 1

                try:
                    entry = parse_entry(raw)
                except ValueError as e:
                    reason = str(e).splitlines()[0] if str(e) else type(e).__name__
                    return VerificationResult(
                        valid=False,
                        entries_checked=index,
                        first_broken_index=index,
                        first_error=f"Entry {index}: malformed entry: {reason[:120]}",
                    )

                if entry.prev_hash != expected_prev:
                    return self._broken(index, "prev_hash mismatch", expected_prev, entry.prev_hash)

                computed = compute_entry_hash(entry)
                if entry.entry_hash != computed:
                    return self._broken(index, "entry_hash mismatch", computed, entry.entry_hash)

                expected_prev = entry.entry_hash

        return VerificationResult(valid=True, entries_checked=index)

    @staticmethod
    def _broken(index: int, reason: str, expected: str, actual: str | None) -> VerificationResult:
        expected_prefix = expected[:PREFIX_LEN]
        actual_prefix = (actual or "<missing>")[:PREFIX_LEN]
        return VerificationResult(
            valid=False,
            entries_checked=index,
            first_broken_index=index,
            first_error=(
                f"Entry {index}: {reason}. "
                f"Expected {expected_prefix}..., got {actual_prefix}..."
            ),
            expected=expected_prefix,
            actual=actual_prefix,
        )
