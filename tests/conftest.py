"""Pytest configuration and shared fixtures for all tests."""

import pytest

PUBLISHER_SETTINGS = (
    "PUBLISHER_SKIP_PUBLISH",
    "PUBLISHER_PARALLELISM",
    "PUBLISHER_PROJECT_NAME",
    "PUBLISHER_VERSION",
    "PUBLISHER_TAG",
    "PUBLISHER_LOG_LEVEL",
    "PUBLISHER_LOG_JSON",
)


@pytest.fixture(autouse=True)
def isolate_publisher_env(monkeypatch):
    """Keep PUBLISHER_* settings of the developer's shell out of the tests.

    RunContext.from_env reads these variables; tests that need them pass
    an explicit env mapping instead.
    """
    for key in PUBLISHER_SETTINGS:
        monkeypatch.delenv(key, raising=False)
