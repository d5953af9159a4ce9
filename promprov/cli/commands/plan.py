"""``promprov plan PARAMS``: show what a run would converge.

Runs pre-flight resolution only. Nothing is applied and no state is read.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from promprov.cli.commands._inputs import load_plan
from promprov.config import ProvisionerSettings
from promprov.monitor.renderer import PlanRenderer

console = Console()


def plan_cmd(
    params_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="YAML file with the provisioning parameters.",
    ),
    facts_file: Path = typer.Option(
        None,
        "--facts",
        "-f",
        exists=True,
        dir_okay=False,
        help="YAML file with host facts (default: gather from this host).",
    ),
    show_config: bool = typer.Option(
        False,
        "--show-config",
        help="Also print the composed daemon configuration.",
    ),
) -> None:
    """Resolve the artifact, compose the config and print the plan."""
    plan = load_plan(console, params_file, facts_file, ProvisionerSettings())
    renderer = PlanRenderer(console=console)
    renderer.print_plan(plan)
    if show_config:
        renderer.print_config(plan)
