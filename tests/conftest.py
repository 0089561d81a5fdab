"""Shared fixtures: an isolated workspace, data directory and fake validation service."""

import json
from pathlib import Path

import httpx
import pytest

from soulscan.config import DataPaths, SoulScanConfig
from soulscan.scanner import ScanOrchestrator
from soulscan.validation.client import ValidationClient


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    ws = tmp_path / "workspace"
    ws.mkdir()
    (ws / "SOUL.md").write_text("A")
    (ws / "USER.md").write_text("user notes")
    (ws / "soul.json").write_text(json.dumps({"name": "test-soul", "version": "1.0.0"}))
    return ws


@pytest.fixture
def paths(tmp_path: Path) -> DataPaths:
    return DataPaths(tmp_path / "data")


@pytest.fixture(autouse=True)
def no_real_network(monkeypatch: pytest.MonkeyPatch):
    """Point any default client at an unroutable address."""
    monkeypatch.setenv("CLAWSOULS_API", "http://127.0.0.1:9/api/v1")
    monkeypatch.delenv("SOULSCAN_DIR", raising=False)


@pytest.fixture
def make_validator():
    """Factory for a ValidationClient backed by a canned service response.

    Request payloads are recorded on the returned client's ``requests`` list.
    """

    def factory(checks: list[dict] | None = None, status: int = 200, score=None) -> ValidationClient:
        requests: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(json.loads(request.content))
            body: dict = {"checks": checks or []}
            if score is not None:
                body["score"] = score
            return httpx.Response(status, json=body)

        client = ValidationClient("https://validator.test/api/v1", transport=httpx.MockTransport(handler))
        client.requests = requests  # type: ignore[attr-defined]
        return client

    return factory


@pytest.fixture
def offline_validator() -> ValidationClient:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return ValidationClient("https://validator.test/api/v1", transport=httpx.MockTransport(handler))


@pytest.fixture
def make_orchestrator(paths: DataPaths, offline_validator: ValidationClient):
    """Factory for a ScanOrchestrator on the test data dir, offline unless told otherwise."""

    def factory(validator: ValidationClient | None = None, **config) -> ScanOrchestrator:
        return ScanOrchestrator(paths, SoulScanConfig(**config), validator=validator or offline_validator)

    return factory
