"""Agent workspace discovery and tracked-file collection."""

from pathlib import Path

from soulscan.errors import FatalIOError

TRACKED_FILES = (
    "SOUL.md",
    "IDENTITY.md",
    "AGENTS.md",
    "HEARTBEAT.md",
    "STYLE.md",
    "USER.md",
    "TOOLS.md",
    "soul.json",
)

PLATFORMS = ("openclaw", "zeroclaw")


class WorkspaceLocator:
    """Resolve the active agent workspace for OpenClaw or ZeroClaw.

    Auto-detection prefers OpenClaw unless only ~/.zeroclaw exists.
    """

    def __init__(self, platform: str | None = None, home: Path | None = None) -> None:
        if platform is not None and platform not in PLATFORMS:
            raise ValueError(f"Unknown platform '{platform}'. Use one of: {', '.join(PLATFORMS)}")
        self.platform = platform
        self.home = home or Path.home()

    def detect_platform(self) -> str:
        if self.platform:
            return self.platform
        has_openclaw = (self.home / ".openclaw").exists()
        has_zeroclaw = (self.home / ".zeroclaw").exists()
        if has_zeroclaw and not has_openclaw:
            return "zeroclaw"
        return "openclaw"

    def locate(self, explicit: Path | None = None) -> Path:
        """Return the workspace directory, raising FatalIOError if missing."""
        if explicit is not None:
            workspace = explicit.expanduser().resolve()
        else:
            workspace = self.home / f".{self.detect_platform()}" / "workspace"
        if not workspace.is_dir():
            raise FatalIOError(
                f"No workspace found at {workspace}. Specify a directory or ensure OpenClaw is installed."
            )
        return workspace


def collect_files(workspace: Path, names: tuple[str, ...] = TRACKED_FILES) -> dict[str, bytes]:
    """Read every tracked file that exists in the workspace."""
    files: dict[str, bytes] = {}
    for name in names:
        path = workspace / name
        if not path.exists():
            continue
        try:
            files[name] = path.read_bytes()
        except OSError as e:
            raise FatalIOError(f"Cannot read {path}: {e}") from e
    return files
