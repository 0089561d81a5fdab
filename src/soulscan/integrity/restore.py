"""Overwrite drifted workspace files with their baseline snapshot."""

import logging
from pathlib import Path

from soulscan.integrity.baseline import BaselineStore
from soulscan.integrity.checksums import atomic_write

logger = logging.getLogger(__name__)


class RestoreExecutor:
    def __init__(self, workspace: Path, baseline: BaselineStore) -> None:
        self.workspace = workspace
        self.baseline = baseline

    def restore(self, filename: str) -> bool:
        """Return True if filename was rewritten from its baseline.

        Without a usable snapshot, or when the write fails, the live file is
        left as it was.
        """
        content = self.baseline.load(filename)
        if content is None:
            logger.warning("No baseline for %s, cannot restore", filename)
            return False

        try:
            atomic_write(self.workspace / filename, content)
        except OSError as e:
            logger.warning("Cannot restore %s: %s", filename, e)
            return False
        logger.info("Restored %s from baseline", filename)
        return True
