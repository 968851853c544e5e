"""Shared pytest fixtures for percentfmt tests."""

from __future__ import annotations

from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast tests of a single module")
    config.addinivalue_line("markers", "integration: end-to-end formatting scenarios")


@pytest.fixture
def api_client():
    from fastapi.testclient import TestClient

    from percentfmt.main import api_app

    return TestClient(api_app)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "PERCENTFMT_LOG_LEVEL",
        "PERCENTFMT_SERVE_HOST",
        "PERCENTFMT_SERVE_PORT",
        "PERCENTFMT_MAX_FIELD_WIDTH",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
