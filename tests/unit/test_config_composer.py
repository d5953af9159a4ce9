"""Tests for deep merge, rule-path expansion and config composition."""

from __future__ import annotations

import pytest
import yaml

from promprov.core.alert_files import generate_alert_files
from promprov.core.config_composer import (
    DEFAULT_GLOBAL_CONFIG,
    compose_config,
    deep_merge,
    expand_rule_paths,
    render_config,
)
from promprov.core.errors import InvalidDefaultsLayer, MergeTypeError


class TestDeepMerge:
    def test_recursive_merge_override_wins(self):
        merged = deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3, "z": 4}})
        assert merged == {"a": {"x": 1, "y": 3, "z": 4}}

    def test_empty_overrides_is_identity(self):
        assert deep_merge({"a": 1}, {}) == {"a": 1}

    def test_falsy_override_replaces_default(self):
        merged = deep_merge({"a": 1, "b": {"c": 2}, "d": [1]}, {"a": 0, "b": None, "d": []})
        assert merged == {"a": 0, "b": None, "d": []}

    def test_lists_replaced_wholesale(self):
        assert deep_merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}

    def test_mapping_replaces_scalar(self):
        assert deep_merge({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}

    def test_scalar_replaces_mapping(self):
        assert deep_merge({"a": {"b": 2}}, {"a": "flat"}) == {"a": "flat"}

    def test_inputs_not_mutated(self):
        defaults = {"a": {"x": 1}}
        overrides = {"a": {"y": [1]}}
        merged = deep_merge(defaults, overrides)
        merged["a"]["x"] = 99
        merged["a"]["y"].append(2)
        assert defaults == {"a": {"x": 1}}
        assert overrides == {"a": {"y": [1]}}

    @pytest.mark.parametrize("bad", [None, [], "a", 1])
    def test_non_mapping_rejected(self, bad):
        with pytest.raises(MergeTypeError):
            deep_merge(bad, {})
        with pytest.raises(MergeTypeError):
            deep_merge({}, bad)

    def test_merge_type_error_is_type_error(self):
        with pytest.raises(TypeError):
            deep_merge({}, [("a", 1)])


class TestExpandRulePaths:
    def test_order_preserved(self):
        assert expand_rule_paths(["app", "db"], "/etc/prom") == [
            "/etc/prom/rules/app/*.rules",
            "/etc/prom/rules/db/*.rules",
        ]

    def test_reverse_order(self):
        paths = expand_rule_paths(["db", "app"], "/etc/prom")
        assert paths[0].endswith("/db/*.rules")

    def test_empty(self):
        assert expand_rule_paths([], "/etc/prom") == []


class TestComposeConfig:
    def test_defaults_when_no_overrides(self, spec):
        merged = compose_config(spec)
        assert merged.global_config == DEFAULT_GLOBAL_CONFIG

    def test_global_override_merges(self, make_spec):
        spec = make_spec(global_config={"scrape_interval": "30s", "external_labels": {"dc": "eu"}})
        merged = compose_config(spec)
        assert merged.global_config["scrape_interval"] == "30s"
        assert merged.global_config["evaluation_interval"] == "15s"
        assert merged.global_config["external_labels"] == {"monitor": "master", "dc": "eu"}

    def test_site_defaults_layer_sits_under_overrides(self, make_spec):
        spec = make_spec(global_config={"scrape_interval": "30s"})
        merged = compose_config(spec, defaults={"scrape_interval": "20s", "evaluation_interval": "1m"})
        assert merged.global_config["scrape_interval"] == "30s"
        assert merged.global_config["evaluation_interval"] == "1m"

    def test_wrapped_defaults_layer_rejected(self, spec):
        with pytest.raises(InvalidDefaultsLayer, match="global"):
            compose_config(spec, defaults={"global": {"scrape_interval": "1m"}})

    def test_rule_files_order(self, make_spec):
        spec = make_spec(
            config_dir="/etc/prom",
            rule_files=["app", "db"],
            extra_alerts={"net": [{"name": "g", "rules": []}]},
        )
        alert_files = generate_alert_files(spec.extra_alerts, spec.config_dir, spec.version)
        merged = compose_config(spec, alert_files)
        assert merged.rule_files == [
            "/etc/prom/alert.rules",
            "/etc/prom/rules/app/*.rules",
            "/etc/prom/rules/db/*.rules",
            "/etc/prom/rules/net.rules",
        ]

    def test_alerting_block(self, make_spec):
        spec = make_spec(
            alertmanagers_config=[{"static_configs": [{"targets": ["am:9093"]}]}],
            alert_relabel_config=[{"action": "labeldrop", "regex": "replica"}],
        )
        merged = compose_config(spec)
        assert merged.alerting["alertmanagers"][0]["static_configs"][0]["targets"] == ["am:9093"]
        assert merged.alerting["alert_relabel_configs"][0]["action"] == "labeldrop"

    def test_alerting_block_omitted_when_empty(self, spec):
        assert compose_config(spec).alerting == {}


class TestRenderConfig:
    def test_yaml_round_trips(self, make_spec):
        spec = make_spec(remote_write_configs=[{"url": "http://remote/write"}])
        document = yaml.safe_load(render_config(compose_config(spec)))
        assert document["global"]["scrape_interval"] == "15s"
        assert document["remote_write"] == [{"url": "http://remote/write"}]
        assert document["scrape_configs"][0]["job_name"] == "prometheus"
        assert "remote_read" not in document
        assert "alerting" not in document

    def test_section_order(self, spec):
        text = render_config(compose_config(spec))
        assert text.index("global:") < text.index("rule_files:") < text.index("scrape_configs:")
