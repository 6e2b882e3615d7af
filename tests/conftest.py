# ruff: noqa: E402
# tests/conftest.py
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure project root importable
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def myapp_html() -> Path:
    """Path to the sample discovery document served by fake transports."""
    return FIXTURES / "myapp.html"


@pytest.fixture(autouse=True)
def _isolate_discovery_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Autouse: drop any DISCOVERY_* overrides (e.g. from a developer .env) and
    proxy variables so transports are built from known defaults.
    """
    for var in (
        "DISCOVERY_USER_AGENT",
        "DISCOVERY_CONNECT_TIMEOUT_S",
        "DISCOVERY_READ_TIMEOUT_S",
        "DISCOVERY_MAX_REDIRECTS",
        "DISCOVERY_FOLLOW_REDIRECTS",
        "HTTP_PROXY",
        "HTTPS_PROXY",
        "ALL_PROXY",
        "http_proxy",
        "https_proxy",
        "all_proxy",
    ):
        monkeypatch.delenv(var, raising=False)
