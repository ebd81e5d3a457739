"""Shared pytest fixtures for the orgstat test suite."""

from __future__ import annotations

import pytest

from orgstat.config import AppSettings

pytest_plugins = ("respx",)


@pytest.fixture
def settings() -> AppSettings:
    """Provide application settings with deterministic defaults for tests."""
    return AppSettings.model_validate(
        {
            "github_api_base": "https://api.github.example.com",
            "organization": "acme",
            "user": "octocat",
            "token": "token",  # pragma: allowlist secret
            "output": "-",
        },
    )
