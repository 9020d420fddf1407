"""
Shared fixtures for the usercrypt tests.
"""

import pytest

from usercrypt.config import Config


TEST_SECRET = "test-server-secret"


@pytest.fixture
def settings(monkeypatch):
    """Configuration with ENCRYPTION_SECRET set."""
    monkeypatch.setenv("ENCRYPTION_SECRET", TEST_SECRET)
    return Config()


@pytest.fixture
def settings_without_secret(monkeypatch):
    """Configuration with ENCRYPTION_SECRET absent."""
    monkeypatch.delenv("ENCRYPTION_SECRET", raising=False)
    return Config()
