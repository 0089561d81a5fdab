"""Exceptions that abort a SoulScan run.

Degraded conditions (unreachable validation service, missing baseline,
broken audit chain) are reported as data, not raised.
"""


class SoulScanError(Exception):
    """Base class for errors surfaced to the CLI."""


class FatalIOError(SoulScanError):
    """Workspace or data directory cannot be read or written."""


class ScanInProgressError(FatalIOError):
    """Another invocation holds the scan lock."""


class ConfigError(SoulScanError):
    """config.yaml exists but cannot be parsed."""
