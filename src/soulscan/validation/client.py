"""Client for the remote validation service (POST {api_base}/validate).

The service is optional: any transport error, timeout, non-2xx status
or malformed body yields None and the scan continues offline.
"""

import json
import logging
from collections.abc import Mapping
from typing import Literal

import httpx
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST = {"name": "workspace-scan", "version": "0.0.0", "specVersion": "0.3"}
MANIFEST_FILE = "soul.json"


class CheckResult(BaseModel):
    type: Literal["pass", "fail", "warn"]
    message: str = ""
    code: str | None = None
    details: list[str] | None = None


class ValidationReport(BaseModel):
    checks: list[CheckResult] = Field(default_factory=list)
    score: float | None = None

    @property
    def errors(self) -> int:
        return sum(1 for c in self.checks if c.type == "fail")

    @property
    def warnings(self) -> int:
        return sum(1 for c in self.checks if c.type == "warn")

    @property
    def passed(self) -> int:
        return sum(1 for c in self.checks if c.type == "pass")


def build_manifest(files: Mapping[str, str]) -> dict:
    """Parsed soul.json if it is a JSON object, else a placeholder manifest."""
    raw = files.get(MANIFEST_FILE)
    if raw is not None:
        try:
            data = json.loads(raw)
        except ValueError:
            data = None
        if isinstance(data, dict):
            return data
    return dict(DEFAULT_MANIFEST)


class ValidationClient:
    def __init__(
        self,
        api_base: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def validate(self, manifest: dict, files: Mapping[str, str]) -> ValidationReport | None:
        """Submit the files for validation; None means the scan was skipped."""
        payload = {"manifest": manifest, "files": dict(files), "soulscan": True}
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.post(f"{self.api_base}/validate", json=payload)
        except httpx.HTTPError as e:
            logger.warning("Validation service unreachable: %s", e)
            return None

        if resp.is_error:
            logger.warning("Validation service returned %d: %s", resp.status_code, resp.text[:200])
            return None

        try:
            data = resp.json()
            checks = [CheckResult.model_validate(c) for c in data.get("checks") or []]
        except (ValueError, AttributeError, ValidationError) as e:
            logger.warning("Malformed validation response: %s", e)
            return None

        report = ValidationReport(checks=checks)
        score = data.get("score")
        if isinstance(score, int | float) and not isinstance(score, bool):
            report.score = float(score)
        elif checks:
            report.score = round(100.0 * report.passed / len(checks), 1)
        return report
