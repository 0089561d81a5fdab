"""Baseline store — last approved snapshot of every tracked file.

Snapshots live under <data>/baseline/, one file per tracked name, next to
an index.json recording each snapshot's fingerprint. The index is written
last, so a snapshot only counts once the index that vouches for it exists.
"""

import json
import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from soulscan.integrity.checksums import atomic_write, fingerprint

logger = logging.getLogger(__name__)

INDEX_NAME = "index.json"


class BaselineIndex(BaseModel):
    captured_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    files: dict[str, str] = Field(default_factory=dict)


class BaselineStore:
    def __init__(self, root: Path) -> None:
        self.root = root
        self.index_path = root / INDEX_NAME

    def save(self, files: Mapping[str, bytes]) -> BaselineIndex:
        """Snapshot every given file, dropping snapshots of names not given."""
        self.root.mkdir(parents=True, exist_ok=True)
        for name, content in files.items():
            atomic_write(self._snapshot_path(name), content)

        index = BaselineIndex(files={name: fingerprint(c) for name, c in files.items()})
        atomic_write(self.index_path, index.model_dump_json(indent=2).encode())

        for stale in self.root.iterdir():
            if stale.name == INDEX_NAME or stale.name.startswith("."):
                continue
            if stale.is_file() and stale.name not in files:
                stale.unlink()

        logger.info("Captured baseline of %d files in %s", len(files), self.root)
        return index

    def load_index(self) -> BaselineIndex | None:
        if not self.index_path.exists():
            return None
        try:
            return BaselineIndex.model_validate_json(self.index_path.read_text())
        except (OSError, ValidationError) as e:
            logger.warning("Ignoring corrupt baseline index %s: %s", self.index_path, e)
            return None

    def load(self, filename: str) -> bytes | None:
        """Return the snapshot for filename, or None if absent or corrupt."""
        index = self.load_index()
        if index is None or filename not in index.files:
            return None

        path = self._snapshot_path(filename)
        try:
            content = path.read_bytes()
        except OSError as e:
            logger.warning("Baseline snapshot %s unreadable: %s", path, e)
            return None

        if fingerprint(content) != index.files[filename]:
            logger.warning("Baseline snapshot %s does not match its index entry", path)
            return None
        return content

    def status(self) -> dict[str, bool]:
        """Map each indexed name to whether its snapshot is intact."""
        index = self.load_index()
        if index is None:
            return {}
        return {name: self.load(name) is not None for name in sorted(index.files)}

    def _snapshot_path(self, filename: str) -> Path:
        # Tracked names are bare filenames; refuse anything that could escape root.
        if Path(filename).name != filename or filename in ("", ".", "..", INDEX_NAME):
            raise ValueError(f"Not a trackable filename: {filename!r}")
        return self.root / filename
