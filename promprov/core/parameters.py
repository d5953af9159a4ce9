"""Parameter and fact intake.

Facts describe the host (kernel, machine, service manager). Parameters are
what the operator declares. Declared parameters always win over facts.
"""

from __future__ import annotations

import logging
import platform
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from promprov.core.errors import MissingRequiredParameter
from promprov.models.spec import ProvisioningSpec

logger = logging.getLogger(__name__)

REQUIRED_PARAMETERS: tuple[str, ...] = ("version", "os", "arch", "init_style")

# Parameter name -> fact name it may be filled from.
FACT_SOURCES: dict[str, str] = {
    "os": "kernel",
    "arch": "architecture",
    "init_style": "service_provider",
}

_SYSTEMD_RUNTIME_DIR = Path("/run/systemd/system")


def load_yaml_mapping(path: Path) -> dict[str, Any]:
    """Read a YAML file that must contain a mapping (empty file -> ``{}``)."""
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def gather_facts() -> dict[str, str]:
    """Collect the facts this tool consumes from the local host."""
    facts = {
        "kernel": platform.system(),
        "architecture": platform.machine(),
    }
    if _SYSTEMD_RUNTIME_DIR.is_dir():
        facts["service_provider"] = "systemd"
    return facts


def _fact_value(param: str, facts: Mapping[str, Any]) -> Any:
    value = facts.get(FACT_SOURCES[param])
    if param == "os" and isinstance(value, str):
        # Kernel facts are capitalized ("Linux"); archives are not.
        return value.lower()
    return value


def load_spec(
    params: Mapping[str, Any],
    facts: Mapping[str, Any] | None = None,
) -> ProvisioningSpec:
    """Build the frozen ``ProvisioningSpec`` for one run.

    Raises ``MissingRequiredParameter`` for the first required parameter
    that neither *params* nor *facts* supplies. Type errors surface as
    pydantic ``ValidationError``.
    """
    facts = facts or {}
    values = dict(params)
    for param, fact in FACT_SOURCES.items():
        if values.get(param) in (None, ""):
            fact_value = _fact_value(param, facts)
            if fact_value not in (None, ""):
                logger.debug("Filling %s from fact %s=%r", param, fact, fact_value)
                values[param] = fact_value

    for name in REQUIRED_PARAMETERS:
        if values.get(name) in (None, ""):
            raise MissingRequiredParameter(name)

    return ProvisioningSpec(**values)
