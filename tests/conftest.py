"""Shared pytest fixtures and configuration for the octl test suite.

Guidelines
----------
* No internet access in any test.
* azure-identity and msgraph-sdk are mocked at the infra boundary.
* Core tests must be pure: no side effects.
* Every test gets its own config directory; the user's real
  ``~/.config/octl`` is never touched.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from octl.infra import config_store


@pytest.fixture(autouse=True)
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``OCTL_CONFIG_DIR`` at a fresh temp dir and clear overrides."""
    directory = tmp_path / "octl-config"
    monkeypatch.setenv(config_store.ENV_CONFIG_DIR, str(directory))
    monkeypatch.delenv(config_store.ENV_CLIENT_ID, raising=False)
    monkeypatch.delenv(config_store.ENV_TENANT_ID, raising=False)
    return directory
