"""Shared input loading for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console

from promprov.config import ProvisionerSettings
from promprov.core.errors import ProvisioningError
from promprov.core.parameters import gather_facts, load_spec, load_yaml_mapping
from promprov.core.planner import build_plan
from promprov.models.plan import ProvisioningPlan


def load_defaults(settings: ProvisionerSettings) -> dict[str, Any] | None:
    if settings.defaults_path is None:
        return None
    return load_yaml_mapping(settings.defaults_path)


def load_plan(
    console: Console,
    params_file: Path,
    facts_file: Path | None,
    settings: ProvisionerSettings,
) -> ProvisioningPlan:
    """Read parameters and facts, then run pre-flight planning.

    Any input or resolution error is printed and exits with code 1.
    """
    try:
        params = load_yaml_mapping(params_file)
        if facts_file is not None:
            facts = load_yaml_mapping(facts_file)
        elif settings.gather_facts:
            facts = gather_facts()
        else:
            facts = {}
        spec = load_spec(params, facts)
        return build_plan(spec, defaults=load_defaults(settings))
    except ValidationError as exc:
        console.print(f"[bold red]Invalid parameters:[/bold red]\n{exc}")
        raise typer.Exit(code=1)
    except (ProvisioningError, OSError, ValueError) as exc:
        console.print(f"[bold red]{type(exc).__name__}:[/bold red] {exc}")
        raise typer.Exit(code=1)
