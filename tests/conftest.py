"""
Pytest configuration and shared fixtures for versiongate tests.

This module provides reusable fixtures and test doubles for the engine's
collaborators (fetcher, cache, signal emitter).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from versiongate.logging import SilentLogger, set_global_logger
from versiongate.policy import GatePolicy, decode_policy


class FakeFetcher:
    """Fetcher returning queued results; None simulates a network failure."""

    def __init__(self, *results: GatePolicy | None):
        self.results = list(results)
        self.calls: list[str] = []

    def fetch_policy(self, app_version: str) -> GatePolicy | None:
        self.calls.append(app_version)
        if not self.results:
            return None
        return self.results.pop(0)


class MemoryCache:
    """In-memory ComplianceCache that counts reads and writes."""

    def __init__(self, policy: GatePolicy | None = None):
        self.policy = policy
        self.writes: list[GatePolicy | None] = []

    def read(self) -> GatePolicy | None:
        return self.policy

    def write(self, policy: GatePolicy | None) -> None:
        self.writes.append(policy)
        self.policy = policy


class RecordingEmitter:
    """SignalEmitter that records (name, value) pairs."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    def send_signal(self, name: str, value: str = "") -> None:
        self.sent.append((name, value))


@pytest.fixture(autouse=True)
def silent_global_logger():
    """Reset the global logger so tests never leak verbose output."""
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def server_payload() -> dict[str, Any]:
    """Server-computed payload with a dismissable gate."""
    return {
        "gateType": 1,
        "lastGateUpdate": "2025-01-01T00:00:00Z",
        "latestVersion": "2.0.0",
        "whatsNew": "New features",
        "storeUrl": "https://apps.apple.com/app/id123",
    }


@pytest.fixture
def client_payload() -> dict[str, Any]:
    """Client-computed payload with a minimum version and a blocklist."""
    return {
        "minVersion": {"version": "1.0.0", "type": 0},
        "blockedVersions": [
            {"version": "2.1.0", "type": 0},
            {"version": "2.3.0", "type": 2},
        ],
        "lastGateUpdate": "2025-02-01T00:00:00Z",
        "latestVersion": "2.4.0",
        "storeUrls": [
            {"type": 1, "url": "https://play.google.com/store/apps/details?id=x"},
            {"type": 0, "url": "https://apps.apple.com/app/id123"},
        ],
    }


@pytest.fixture
def make_policy():
    """
    Factory fixture for server-computed policies.

    Usage:
        policy = make_policy(gate_type=0, token="t1")
    """

    def _make(gate_type: int = 1, token: str = "t1", **extra: Any) -> GatePolicy:
        return decode_policy({"gateType": gate_type, "lastGateUpdate": token, **extra})

    return _make


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("versiongate.yaml", {"key": "value"})
    """

    def _create(filename: str, data: Any) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create
