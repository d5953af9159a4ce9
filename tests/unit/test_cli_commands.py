"""Unit tests for the CLI: Typer command registration and basic behavior.

Exercises plan, apply and render-config end to end through
typer.testing.CliRunner, with parameters and facts read from YAML files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml
from typer.testing import CliRunner

from promprov.cli.app import app

runner = CliRunner()

# Keeps log records out of output that is parsed as YAML.
QUIET = ["--log-level", "WARNING"]


def _write_yaml(path: Path, data: dict[str, Any]) -> Path:
    path.write_text(yaml.safe_dump(data))
    return path


@pytest.fixture
def params_file(tmp_path: Path, base_params: dict[str, Any]) -> Path:
    params = dict(base_params)
    params["extra_alerts"] = {
        "node": [
            {
                "name": "node.rules",
                "rules": [{"alert": "NodeDown", "expr": "up == 0", "for": "5m"}],
            }
        ]
    }
    return _write_yaml(tmp_path / "params.yaml", params)


@pytest.fixture
def facts_file(tmp_path: Path, facts: dict[str, str]) -> Path:
    return _write_yaml(tmp_path / "facts.yaml", facts)


# ---------------------------------------------------------------------------
# Test: CLI help and registration
# ---------------------------------------------------------------------------


class TestCliApp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        # Typer's no_args_is_help may exit with 0 or 2 depending on version
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("plan", "apply", "render-config", "facts"):
            assert command in result.output

    @pytest.mark.parametrize("command", ["plan", "apply", "render-config", "facts"])
    def test_command_help(self, command: str):
        assert runner.invoke(app, [command, "--help"]).exit_code == 0


# ---------------------------------------------------------------------------
# Test: plan
# ---------------------------------------------------------------------------


class TestPlanCommand:
    def test_shows_resolved_url(self, params_file: Path, facts_file: Path):
        result = runner.invoke(app, ["plan", str(params_file), "--facts", str(facts_file)])
        assert result.exit_code == 0, result.output
        assert "Notification routes" in result.output

    def test_show_config(self, params_file: Path, facts_file: Path):
        args = ["plan", str(params_file), "--facts", str(facts_file)]
        assert "scrape_interval" not in runner.invoke(app, args).output
        result = runner.invoke(app, [*args, "--show-config"])
        assert result.exit_code == 0, result.output
        assert "scrape_interval" in result.output

    def test_unsupported_arch_exits_1(self, tmp_path: Path, params_file: Path, facts: dict[str, str]):
        bad_facts = _write_yaml(tmp_path / "bad.yaml", {**facts, "architecture": "s390x"})
        result = runner.invoke(app, ["plan", str(params_file), "--facts", str(bad_facts)])
        assert result.exit_code == 1
        assert "UnsupportedArchitecture" in result.output

    def test_missing_version_exits_1(self, tmp_path: Path, facts_file: Path):
        params = _write_yaml(tmp_path / "params.yaml", {"user": "prom"})
        result = runner.invoke(app, ["plan", str(params), "--facts", str(facts_file)])
        assert result.exit_code == 1
        assert "version" in result.output

    def test_unknown_parameter_exits_1(self, tmp_path: Path, facts_file: Path):
        params = _write_yaml(tmp_path / "params.yaml", {"version": "2.3.1", "no_such_knob": 1})
        result = runner.invoke(app, ["plan", str(params), "--facts", str(facts_file)])
        assert result.exit_code == 1

    def test_wrapped_defaults_file_exits_1(self, tmp_path: Path, params_file: Path, facts_file: Path):
        defaults = _write_yaml(tmp_path / "defaults.yaml", {"global": {"scrape_interval": "1m"}})
        result = runner.invoke(
            app,
            ["plan", str(params_file), "--facts", str(facts_file)],
            env={"PROMPROV_DEFAULTS_PATH": str(defaults)},
        )
        assert result.exit_code == 1
        assert "InvalidDefaultsLayer" in result.output

    def test_flat_defaults_file_applies(self, tmp_path: Path, params_file: Path, facts_file: Path):
        defaults = _write_yaml(tmp_path / "defaults.yaml", {"scrape_interval": "1m"})
        result = runner.invoke(
            app,
            [*QUIET, "render-config", str(params_file), "--facts", str(facts_file)],
            env={"PROMPROV_DEFAULTS_PATH": str(defaults)},
        )
        assert result.exit_code == 0, result.output
        assert yaml.safe_load(result.output)["global"]["scrape_interval"] == "1m"

    def test_malformed_legacy_alert_exits_1(self, tmp_path: Path, facts_file: Path):
        params = _write_yaml(
            tmp_path / "params.yaml", {"version": "1.8.2", "alerts": [{"name": "A"}]}
        )
        result = runner.invoke(app, ["plan", str(params), "--facts", str(facts_file)])
        assert result.exit_code == 1
        assert "InvalidAlertRule" in result.output
        assert not isinstance(result.exception, KeyError)


# ---------------------------------------------------------------------------
# Test: render-config
# ---------------------------------------------------------------------------


class TestRenderConfigCommand:
    def test_prints_config(self, params_file: Path, facts_file: Path):
        result = runner.invoke(app, [*QUIET, "render-config", str(params_file), "--facts", str(facts_file)])
        assert result.exit_code == 0, result.output
        config = yaml.safe_load(result.output)
        assert config["global"]["scrape_interval"] == "15s"
        assert "/etc/prometheus/rules/node.rules" in config["rule_files"]

    def test_prints_alert_file(self, params_file: Path, facts_file: Path):
        result = runner.invoke(
            app, [*QUIET, "render-config", str(params_file), "--facts", str(facts_file), "-a", "node"]
        )
        assert result.exit_code == 0, result.output
        assert yaml.safe_load(result.output)["groups"][0]["name"] == "node.rules"

    def test_unknown_alert_file(self, params_file: Path, facts_file: Path):
        result = runner.invoke(
            app, ["render-config", str(params_file), "--facts", str(facts_file), "-a", "nope"]
        )
        assert result.exit_code == 1


# ---------------------------------------------------------------------------
# Test: apply
# ---------------------------------------------------------------------------


class TestApplyCommand:
    def test_apply_twice_is_idempotent(self, tmp_path: Path, params_file: Path, facts_file: Path):
        state = tmp_path / "state.json"
        args = ["apply", str(params_file), "--facts", str(facts_file), "--state", str(state)]

        first = runner.invoke(app, args)
        assert first.exit_code == 0, first.output
        assert state.exists()
        assert "already converged" not in first.output

        second = runner.invoke(app, args)
        assert second.exit_code == 0, second.output
        assert "already converged" in second.output

    def test_package_install_fails(self, tmp_path: Path, facts_file: Path):
        params = _write_yaml(tmp_path / "params.yaml", {"version": "2.3.1", "install_method": "package"})
        result = runner.invoke(
            app,
            ["apply", str(params), "--facts", str(facts_file), "--state", str(tmp_path / "s.json")],
        )
        assert result.exit_code == 1
        assert "install" in result.output
