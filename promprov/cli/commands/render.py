"""``promprov render-config PARAMS``: print the composed daemon config."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from promprov.cli.commands._inputs import load_plan
from promprov.config import ProvisionerSettings

console = Console()


def render_config_cmd(
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
    alert_file: str = typer.Option(
        None,
        "--alert-file",
        "-a",
        help="Print this generated alert file instead of the main config.",
    ),
) -> None:
    """Print the merged configuration (or one alert file) as plain text."""
    plan = load_plan(console, params_file, facts_file, ProvisionerSettings())
    if alert_file is None:
        typer.echo(plan.config_text, nl=False)
        return

    for artifact in plan.alert_files:
        if artifact.name == alert_file:
            typer.echo(artifact.content, nl=False)
            return
    names = ", ".join(a.name for a in plan.alert_files)
    console.print(f"[bold red]No alert file named {alert_file!r}.[/bold red] Known: {names}")
    raise typer.Exit(code=1)
