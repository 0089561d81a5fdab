"""Content fingerprints and the persisted checksum set."""

import hashlib
import json
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

ChecksumSet = dict[str, str]


def fingerprint(content: bytes) -> str:
    """SHA-256 hex digest of the raw bytes, no normalization."""
    return hashlib.sha256(content).hexdigest()


def fingerprint_all(files: Mapping[str, bytes]) -> ChecksumSet:
    return {name: fingerprint(content) for name, content in files.items()}


def atomic_write(path: Path, data: bytes) -> None:
    """Replace path with data in a single rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


class ChecksumStore:
    """The saved checksum set from the previous run (checksums.json)."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> ChecksumSet | None:
        """Return the saved set, or None when missing or unreadable."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text())
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable checksum file %s: %s", self.path, e)
            return None
        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        ):
            logger.warning("Ignoring malformed checksum file %s", self.path)
            return None
        return data

    def save(self, checksums: Mapping[str, str]) -> None:
        atomic_write(self.path, json.dumps(dict(checksums), indent=2, sort_keys=True).encode())
        logger.info("Saved %d checksums to %s", len(checksums), self.path)
