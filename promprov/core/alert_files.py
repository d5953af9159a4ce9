"""Alert-rule file fan-out.

Each ``{name: rule_set}`` entry becomes one independent file under
``{config_dir}/rules``. Entries share no state, so the executor may write
them in any order or in parallel; only the output order is fixed (input
order) to keep plans reproducible.

Rule-set shape depends on the daemon version:

* ``>= 2.0.0``: a list of rule groups, serialized as YAML ``groups:``.
* ``< 2.0.0``: a list of alerts (``name``, ``condition``, optional
  ``timeduration``, ``labels``, ``annotations``) in the legacy text format.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

import semver
import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from promprov.core.config_composer import main_alert_file_path
from promprov.core.errors import DuplicateAlertFileName, InvalidAlertFileName, InvalidAlertRule
from promprov.core.hasher import content_address
from promprov.core.url_resolver import parse_version
from promprov.models.artifacts import AlertFileArtifact

logger = logging.getLogger(__name__)

YAML_RULES_BOUNDARY = semver.Version(2, 0, 0)

RuleSet = Sequence[Mapping[str, Any]]


def normalize_alert_file_name(name: str) -> str:
    """Return the collision key for *name* on a case-insensitive filesystem."""
    return name.strip().casefold()


class LegacyAlertRule(BaseModel):
    """One alert in the pre-2.0.0 text rule format."""

    model_config = ConfigDict(frozen=True)

    name: str
    condition: str
    timeduration: str | None = None
    labels: dict[str, Any] | None = None
    annotations: dict[str, Any] | None = None


def serialize_rule_set(rule_set: RuleSet, version: str, file_name: str = "alert") -> str:
    """Serialize *rule_set* in the format the daemon *version* reads.

    Raises ``InvalidAlertRule`` naming *file_name* when an entry does not
    have the shape that format needs.
    """
    if parse_version(version) >= YAML_RULES_BOUNDARY:
        groups = []
        for index, group in enumerate(rule_set):
            if not isinstance(group, Mapping):
                raise InvalidAlertRule(
                    f"Rule group {index} in alert file {file_name!r} must be a mapping, "
                    f"got {type(group).__name__}"
                )
            groups.append(dict(group))
        return yaml.safe_dump({"groups": groups}, sort_keys=False, default_flow_style=False)
    return _render_legacy_rules(_validate_legacy_rules(rule_set, file_name))


def _validate_legacy_rules(rule_set: RuleSet, file_name: str) -> list[LegacyAlertRule]:
    rules = []
    for index, rule in enumerate(rule_set):
        try:
            rules.append(LegacyAlertRule.model_validate(rule))
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'rule'}: {error['msg']}"
                for error in exc.errors()
            )
            raise InvalidAlertRule(
                f"Alert {index} in alert file {file_name!r} is invalid ({problems})"
            ) from exc
    return rules


def _render_legacy_rules(rules: list[LegacyAlertRule]) -> str:
    blocks = []
    for rule in rules:
        lines = [f"ALERT {rule.name}", f"  IF {rule.condition}"]
        if rule.timeduration:
            lines.append(f"  FOR {rule.timeduration}")
        for section, values in (("labels", rule.labels), ("annotations", rule.annotations)):
            if values:
                lines.append(f"  {section.upper()} {{")
                for key, value in values.items():
                    lines.append(f"    {key} = {json.dumps(str(value))},")
                lines.append("  }")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n" if blocks else ""


def _build_artifact(name: str, path: str, rule_set: RuleSet, version: str) -> AlertFileArtifact:
    content = serialize_rule_set(rule_set, version, file_name=name)
    return AlertFileArtifact(
        name=name,
        path=path,
        content=content,
        content_address=content_address(content),
    )


def generate_alert_files(
    alert_files: Mapping[str, RuleSet],
    config_dir: str,
    version: str,
) -> list[AlertFileArtifact]:
    """Fan *alert_files* out into one artifact per entry.

    Raises ``DuplicateAlertFileName`` when two names collide after
    normalization and ``InvalidAlertFileName`` for empty names or names
    containing a path separator. Nothing is generated if any name is bad.
    """
    seen: dict[str, str] = {}
    for name in alert_files:
        key = normalize_alert_file_name(name)
        if not key or "/" in key or "\\" in key:
            raise InvalidAlertFileName(f"Invalid alert file name {name!r}")
        if key in seen:
            raise DuplicateAlertFileName(
                f"Alert files {seen[key]!r} and {name!r} map to the same "
                f"file {key}.rules"
            )
        seen[key] = name

    artifacts = [
        _build_artifact(
            name.strip(),
            f"{config_dir}/rules/{name.strip()}.rules",
            rule_set,
            version,
        )
        for name, rule_set in alert_files.items()
    ]
    logger.debug("Generated %d alert files under %s/rules", len(artifacts), config_dir)
    return artifacts


def render_main_alert_file(alerts: RuleSet, config_dir: str, version: str) -> AlertFileArtifact:
    """Build the always-present ``alert.rules`` file from the main alerts."""
    return _build_artifact("alert", main_alert_file_path(config_dir), alerts, version)
