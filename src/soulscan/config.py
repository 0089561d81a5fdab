"""Config loading from ~/.clawsouls/soulscan/."""

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from soulscan.errors import ConfigError
from soulscan.integrity.policy import Protection

DEFAULT_DATA_DIR = Path.home() / ".clawsouls" / "soulscan"
DEFAULT_API_BASE = "https://clawsouls.ai/api/v1"


class SoulScanConfig(BaseModel):
    api_base: str = DEFAULT_API_BASE
    timeout: float = 10.0
    platform: Literal["openclaw", "zeroclaw"] | None = None
    policies: dict[str, Protection] = Field(default_factory=dict)


class DataPaths:
    """Locations of persisted state inside the private data directory."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.checksums = root / "checksums.json"
        self.baseline_dir = root / "baseline"
        self.audit_log = root / "audit.jsonl"
        self.config = root / "config.yaml"
        self.lock = root / ".lock"

    def ensure(self) -> None:
        """Create the data directory structure if it doesn't exist."""
        for d in [self.root, self.baseline_dir]:
            d.mkdir(parents=True, exist_ok=True)


def resolve_data_dir(override: Path | None = None) -> Path:
    """Explicit path, then $SOULSCAN_DIR, then ~/.clawsouls/soulscan."""
    if override is not None:
        return override
    env = os.environ.get("SOULSCAN_DIR")
    if env:
        return Path(env).expanduser()
    return DEFAULT_DATA_DIR


def load_config(paths: DataPaths) -> SoulScanConfig:
    """Load config from <data>/config.yaml, or return defaults.

    $CLAWSOULS_API overrides api_base from the file.
    """
    data: dict = {}
    if paths.config.exists():
        try:
            with open(paths.config) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file {paths.config}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid config file {paths.config}: expected a mapping")

    env_api = os.environ.get("CLAWSOULS_API")
    if env_api:
        data["api_base"] = env_api

    try:
        return SoulScanConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {paths.config}: {e}") from e
