"""Tests for tool settings: env-driven."""

from __future__ import annotations

from pathlib import Path

import pytest

from promprov.config import ProvisionerSettings


class TestProvisionerSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("PROMPROV_LOG_LEVEL", raising=False)
        settings = ProvisionerSettings()
        assert settings.log_level == "INFO"
        assert settings.state_path == Path(".promprov/state.json")
        assert settings.defaults_path is None
        assert settings.gather_facts is True

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("PROMPROV_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("PROMPROV_GATHER_FACTS", "false")
        monkeypatch.setenv("PROMPROV_DEFAULTS_PATH", "/etc/promprov/defaults.yaml")
        settings = ProvisionerSettings()
        assert settings.log_level == "DEBUG"
        assert settings.gather_facts is False
        assert settings.defaults_path == Path("/etc/promprov/defaults.yaml")

    def test_explicit_kwargs(self):
        settings = ProvisionerSettings(state_path=Path("/tmp/s.json"))
        assert settings.state_path == Path("/tmp/s.json")
