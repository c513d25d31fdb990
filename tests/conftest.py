"""Pytest configuration and fixtures."""

import os

import pytest

from tests.cli_fixtures import clean_runner  # noqa: F401
from vnscript.config import (
    VNScriptSettings,
    configure_logging,
    reset_settings,
    set_settings,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test",
    )
    config.addinivalue_line(
        "markers",
        "unit: mark test as unit test",
    )


@pytest.fixture(autouse=True)
def isolated_test_environment(tmp_path, monkeypatch):
    """Run every test with clean settings and a private working directory.

    Prevents save files, config files and ``VNSCRIPT_`` variables from the
    developer's machine leaking into tests, and tests from writing into the
    repository.
    """
    for var in [k for k in os.environ if k.startswith("VNSCRIPT_")]:
        monkeypatch.delenv(var)
    monkeypatch.chdir(tmp_path)

    set_settings(VNScriptSettings(save_file=tmp_path / "saves.json"))

    yield

    reset_settings()
    # CLI tests can leave handlers bound to a closed runner stream
    configure_logging(VNScriptSettings())
