"""Configuration composition: layered deep merge and rule-path expansion.

Defaults and overrides are explicit layers, so override precedence is a
pure, testable function instead of declaration order.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from copy import deepcopy
from typing import Any

import yaml

from promprov.core.errors import InvalidDefaultsLayer, MergeTypeError
from promprov.models.artifacts import AlertFileArtifact
from promprov.models.plan import MergedConfig
from promprov.models.spec import ProvisioningSpec

DEFAULT_GLOBAL_CONFIG: dict[str, Any] = {
    "scrape_interval": "15s",
    "evaluation_interval": "15s",
    "external_labels": {"monitor": "master"},
}


def deep_merge(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *overrides* onto *defaults*.

    Mapping/mapping pairs merge recursively; for any other pair the override
    value replaces the default outright, falsy values included. Only the
    absence of a key in *overrides* keeps the default. Neither input is
    mutated.
    """
    if not isinstance(defaults, Mapping) or not isinstance(overrides, Mapping):
        raise MergeTypeError(
            "deep_merge expects two mappings, got "
            f"{type(defaults).__name__} and {type(overrides).__name__}"
        )
    return _merge_mapping(defaults, overrides)


def _merge_mapping(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {k: deepcopy(v) for k, v in defaults.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _merge_mapping(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


def expand_rule_paths(stems: Sequence[str], config_dir: str) -> list[str]:
    """Expand rule stems into one directory-scoped glob each.

    The daemon's rule_files globbing cannot cross more than one directory
    level, so every rule subdirectory needs its own entry. Order follows
    *stems*.
    """
    return [f"{config_dir}/rules/{stem}/*.rules" for stem in stems]


def main_alert_file_path(config_dir: str) -> str:
    return f"{config_dir}/alert.rules"


def compose_config(
    spec: ProvisioningSpec,
    alert_files: Sequence[AlertFileArtifact] = (),
    defaults: Mapping[str, Any] | None = None,
) -> MergedConfig:
    """Build the daemon's runtime configuration for *spec*.

    *defaults* is an optional site-wide layer applied over the built-in
    global defaults and under ``spec.global_config``. It holds global
    settings directly; a document wrapped in a top-level ``global:`` key is
    rejected with ``InvalidDefaultsLayer``.
    """
    base = DEFAULT_GLOBAL_CONFIG
    if defaults is not None:
        if "global" in defaults:
            raise InvalidDefaultsLayer(
                "The defaults layer holds global settings directly; "
                "remove the top-level 'global' key"
            )
        base = deep_merge(base, defaults)
    global_config = deep_merge(base, spec.global_config)

    rule_files = [main_alert_file_path(spec.config_dir)]
    rule_files.extend(expand_rule_paths(spec.rule_files, spec.config_dir))
    rule_files.extend(artifact.path for artifact in alert_files)

    alerting: dict[str, Any] = {}
    if spec.alert_relabel_config:
        alerting["alert_relabel_configs"] = deepcopy(spec.alert_relabel_config)
    if spec.alertmanagers_config:
        alerting["alertmanagers"] = deepcopy(spec.alertmanagers_config)

    return MergedConfig(
        global_config=global_config,
        rule_files=rule_files,
        scrape_configs=deepcopy(spec.scrape_configs),
        remote_read_configs=deepcopy(spec.remote_read_configs),
        remote_write_configs=deepcopy(spec.remote_write_configs),
        alerting=alerting,
    )


def render_config(merged: MergedConfig) -> str:
    """Render *merged* as the daemon's YAML configuration file.

    Empty optional sections are left out.
    """
    document: dict[str, Any] = {
        "global": merged.global_config,
        "rule_files": merged.rule_files,
        "scrape_configs": merged.scrape_configs,
    }
    if merged.remote_read_configs:
        document["remote_read"] = merged.remote_read_configs
    if merged.remote_write_configs:
        document["remote_write"] = merged.remote_write_configs
    if merged.alerting:
        document["alerting"] = merged.alerting
    return yaml.safe_dump(document, sort_keys=False, default_flow_style=False)
