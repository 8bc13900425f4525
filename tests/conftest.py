"""
Global test configuration: environment isolation, markers and fakes.
"""

import logging
import os

import pytest

from ai_client.types import RetryPolicy
from tests.fakes import FakeTransport, RecordingSleep


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_env(request, monkeypatch):
    """Ensure a clean credential/config environment for each test.

    - Removes GEMINI_* variables, GOOGLE_API_KEY and telemetry toggles
    - Leaves everything else intact

    Escape hatches:
      - @pytest.mark.allow_env_pollution: keep current env unchanged
      - tests marked with @pytest.mark.api bypass isolation so the real key
        can be used when explicitly running API tests.
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith("GEMINI_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    # Avoid DEBUG toggles switching telemetry on
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.delenv("AI_CLIENT_TELEMETRY", raising=False)


@pytest.fixture(autouse=True)
def quiet_third_party_logs():
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "integration: Component integration tests with fake transports",
        "api: Real API integration tests (requires API key)",
        "allow_env_pollution: Keep the process environment untouched",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


def pytest_collection_modifyitems(config, items):  # noqa: ARG001
    """Automatically skip API tests when API key is unavailable."""
    if not (
        (os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"))
        and os.getenv("ENABLE_API_TESTS")
    ):
        skip_api = pytest.mark.skip(
            reason="API tests require GEMINI_API_KEY or GOOGLE_API_KEY and ENABLE_API_TESTS=1",
        )
        for item in items:
            if "api" in item.keywords:
                item.add_marker(skip_api)


# --- Core Fixtures ---


@pytest.fixture
def mock_api_key():
    """Provide a consistent, fake API key for tests."""
    return "test_api_key_12345_67890_abcdef_ghijkl"


@pytest.fixture
def mock_env(mock_api_key, monkeypatch):
    """Set the credential and model variables the settings loader reads."""
    monkeypatch.setenv("GEMINI_API_KEY", mock_api_key)
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-flash")


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def fast_policy():
    """Three retries with recognisable, non-zero backoff values."""
    return RetryPolicy(max_retries=3, initial_interval=1.0, max_interval=4.0)
