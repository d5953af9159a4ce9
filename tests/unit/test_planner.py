"""Tests for pre-flight planning and notification wiring."""

from __future__ import annotations

import pytest
import yaml

from promprov.core.errors import (
    DuplicateAlertFileName,
    InvalidVersionFormat,
    UnsupportedArchitecture,
)
from promprov.core.planner import build_plan
from promprov.models.plan import ResourceKind
from promprov.models.stages import NotificationRoute, Signal, Stage


def _resources(plan, stage, kind=None):
    return [
        r for r in plan.directive_for(stage).resources if kind is None or r.kind == kind
    ]


class TestPlanLayout:
    def test_stages_in_order(self, plan):
        assert [d.stage for d in plan.stages] == [
            Stage.INSTALL,
            Stage.CONFIG,
            Stage.RUN_SERVICE,
            Stage.SERVICE_RELOAD,
        ]

    def test_install_payload(self, plan):
        payload = plan.directive_for(Stage.INSTALL).payload
        assert payload["url"] == plan.artifact.url
        assert payload["purge_config_dir"] is True

    def test_config_payload(self, plan):
        payload = plan.directive_for(Stage.CONFIG).payload
        assert payload["rule_files"] == plan.merged_config.rule_files
        assert payload["storage_retention"] == "360h"
        assert payload["template"] == "prometheus.yaml"

    def test_rules_directory_managed(self, plan):
        dirs = [r.name for r in _resources(plan, Stage.CONFIG, ResourceKind.DIRECTORY)]
        assert "/etc/prometheus/rules" in dirs

    def test_config_dir_purge_follows_flag(self, make_spec):
        plan = build_plan(make_spec(purge_config_dir=False))
        config_dir = next(
            r for r in _resources(plan, Stage.INSTALL, ResourceKind.DIRECTORY)
            if r.name == "/etc/prometheus"
        )
        assert config_dir.attrs["purge"] is False

    def test_config_file_content(self, plan):
        (config_file,) = [
            r for r in _resources(plan, Stage.CONFIG, ResourceKind.FILE)
            if r.name == "/etc/prometheus/prometheus.yaml"
        ]
        assert config_file.content == plan.config_text
        assert config_file.notify == Signal.RELOAD
        assert config_file.attrs["validate_cmd"] == "/usr/local/bin/promtool check config %"
        assert yaml.safe_load(config_file.content)["global"]["scrape_interval"] == "15s"

    def test_legacy_validate_cmd(self, make_spec):
        plan = build_plan(make_spec(version="1.8.2"))
        config_file = next(
            r for r in _resources(plan, Stage.CONFIG, ResourceKind.FILE)
            if r.name.endswith("prometheus.yaml")
        )
        assert config_file.attrs["validate_cmd"].endswith("check-config %")

    def test_one_file_per_alert_artifact(self, make_spec):
        plan = build_plan(
            make_spec(extra_alerts={"net": [], "disk": []})
        )
        files = {r.name for r in _resources(plan, Stage.CONFIG, ResourceKind.FILE)}
        assert {a.path for a in plan.alert_files} <= files
        assert [a.name for a in plan.alert_files] == ["alert", "net", "disk"]

    def test_unmanaged_service_has_no_service_resources(self, make_spec):
        plan = build_plan(make_spec(manage_service=False))
        assert _resources(plan, Stage.RUN_SERVICE) == []
        assert _resources(plan, Stage.SERVICE_RELOAD) == []

    def test_reload_exec_is_refresh_only(self, plan):
        (reload_exec,) = _resources(plan, Stage.SERVICE_RELOAD)
        assert reload_exec.attrs["refreshonly"] is True
        assert reload_exec.attrs["command"] == "systemctl reload-or-restart prometheus"

    def test_install_none_skips_artifact(self, make_spec):
        plan = build_plan(make_spec(install_method="none"))
        assert _resources(plan, Stage.INSTALL, ResourceKind.ARCHIVE) == []

    def test_sysv_gets_env_file(self, make_spec):
        plan = build_plan(make_spec(init_style="sysv"))
        names = [r.name for r in _resources(plan, Stage.CONFIG, ResourceKind.FILE)]
        assert "/etc/default/prometheus" in names

    def test_plan_hash_stable(self, make_spec):
        assert build_plan(make_spec()).plan_hash == build_plan(make_spec()).plan_hash
        assert build_plan(make_spec()).plan_hash != build_plan(make_spec(version="2.4.0")).plan_hash


class TestNotificationWiring:
    def test_reload_route_always_present(self, make_spec):
        for flag in (True, False):
            plan = build_plan(make_spec(restart_on_change=flag))
            assert NotificationRoute(
                source=Stage.CONFIG, signal=Signal.RELOAD, target=Stage.SERVICE_RELOAD
            ) in plan.routes

    def test_restart_routes_when_enabled(self, plan):
        restart_routes = [r for r in plan.routes if r.signal == Signal.RESTART]
        assert {r.source for r in restart_routes} == {Stage.INSTALL, Stage.CONFIG}
        assert all(r.target == Stage.RUN_SERVICE for r in restart_routes)

    def test_no_restart_wiring_when_disabled(self, make_spec):
        plan = build_plan(make_spec(restart_on_change=False))
        assert not [r for r in plan.routes if r.signal == Signal.RESTART]
        for directive in plan.stages:
            assert all(r.notify != Signal.RESTART for r in directive.resources)

    def test_command_line_resources_notify_restart(self, plan):
        archive = _resources(plan, Stage.INSTALL, ResourceKind.ARCHIVE)[0]
        (unit,) = _resources(plan, Stage.CONFIG, ResourceKind.SERVICE_DEFINITION)
        assert archive.notify == Signal.RESTART
        assert unit.notify == Signal.RESTART

    def test_config_files_notify_reload_regardless(self, make_spec):
        plan = build_plan(make_spec(restart_on_change=False))
        files = _resources(plan, Stage.CONFIG, ResourceKind.FILE)
        assert files and all(f.notify == Signal.RELOAD for f in files)


class TestPreflight:
    def test_unsupported_arch(self, make_spec):
        with pytest.raises(UnsupportedArchitecture):
            build_plan(make_spec(arch="ppc64le"))

    def test_bad_version_even_with_explicit_url(self, make_spec):
        with pytest.raises(InvalidVersionFormat):
            build_plan(make_spec(version="2.3", download_url="http://x/p.tgz"))

    def test_duplicate_alert_files(self, make_spec):
        with pytest.raises(DuplicateAlertFileName):
            build_plan(make_spec(extra_alerts={"Net": [], "NET": []}))
