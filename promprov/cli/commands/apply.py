"""``promprov apply PARAMS``: run the full stage chain.

Uses the recording executor, whose state file stands in for the host: a
second apply with unchanged parameters reports no changes.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from promprov.cli.commands._inputs import load_plan
from promprov.config import ProvisionerSettings
from promprov.core.errors import StageFailure
from promprov.core.executor import RecordingExecutor
from promprov.core.orchestrator import StageOrchestrator
from promprov.monitor.renderer import PlanRenderer

console = Console()


def apply_cmd(
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
    state_file: Path = typer.Option(
        None,
        "--state",
        "-s",
        help="Executor state file (default: PROMPROV_STATE_PATH).",
    ),
) -> None:
    """Plan, then run Install -> Config -> RunService -> ServiceReload."""
    settings = ProvisionerSettings()
    plan = load_plan(console, params_file, facts_file, settings)
    renderer = PlanRenderer(console=console)

    executor = RecordingExecutor(state_path=state_file or settings.state_path)
    orchestrator = StageOrchestrator(executor)

    try:
        report = orchestrator.run(plan)
    except StageFailure as exc:
        if orchestrator.report is not None:
            renderer.print_report(orchestrator.report)
        console.print(f"[bold red]Provisioning failed in {exc.stage.value}:[/bold red] {exc.cause}")
        raise typer.Exit(code=1)

    renderer.print_report(report)
    if not report.changed:
        console.print("[dim]Host already converged; nothing to do.[/dim]")
