"""
Configuration for real API integration tests.
"""

import os

import pytest

from ai_client import GeminiClient


@pytest.fixture
def real_api_client():
    """Real Gemini client for API integration tests."""
    api_key = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
    if not api_key:
        pytest.skip("GEMINI_API_KEY or GOOGLE_API_KEY required for API tests")

    return GeminiClient(api_key, request_timeout=120)

