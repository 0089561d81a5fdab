"""Per-file protection policy: what happens when a tracked file drifts."""

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType


class Protection(StrEnum):
    RESTORE = "restore"
    ALERT = "alert"
    IGNORE = "ignore"


DEFAULT_POLICIES: Mapping[str, Protection] = MappingProxyType({
    "SOUL.md": Protection.RESTORE,
    "IDENTITY.md": Protection.RESTORE,
    "AGENTS.md": Protection.RESTORE,
    "soul.json": Protection.IGNORE,
})


class PolicyTable:
    """Immutable filename -> Protection mapping. Unlisted names get ALERT."""

    def __init__(self, entries: Mapping[str, Protection] | None = None) -> None:
        source = DEFAULT_POLICIES if entries is None else entries
        self._entries: Mapping[str, Protection] = MappingProxyType(
            {name: Protection(mode) for name, mode in source.items()}
        )

    @classmethod
    def with_overrides(cls, overrides: Mapping[str, Protection]) -> "PolicyTable":
        """Defaults merged with per-deployment overrides from config."""
        return cls({**DEFAULT_POLICIES, **overrides})

    def policy_for(self, filename: str) -> Protection:
        return self._entries.get(filename, Protection.ALERT)

    @property
    def entries(self) -> Mapping[str, Protection]:
        return self._entries
