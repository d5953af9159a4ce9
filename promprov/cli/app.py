"""Main Typer application: imports and registers all CLI commands.

Entry point: ``promprov`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from promprov.cli.commands.apply import apply_cmd
from promprov.cli.commands.plan import plan_cmd
from promprov.cli.commands.render import render_config_cmd
from promprov.config import ProvisionerSettings
from promprov.core.parameters import gather_facts

app = typer.Typer(
    name="promprov",
    help="promprov: single-host Prometheus server provisioning.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="plan", help="Show the provisioning plan without applying it.")(plan_cmd)
app.command(name="apply", help="Run Install -> Config -> RunService -> ServiceReload.")(apply_cmd)
app.command(name="render-config", help="Print the composed daemon configuration.")(render_config_cmd)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (default: PROMPROV_LOG_LEVEL or INFO).",
    ),
) -> None:
    """Configure logging for every command."""
    level = (log_level or ProvisionerSettings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@app.command(name="facts", help="Show the host facts promprov would use.")
def facts_cmd() -> None:
    """Print the facts gathered from this host."""
    console = Console()
    table = Table(title="Host facts", header_style="bold cyan")
    table.add_column("Fact", style="cyan")
    table.add_column("Value")
    facts = gather_facts()
    for name in ("kernel", "architecture", "service_provider"):
        value = facts.get(name)
        table.add_row(name, value if value else "[dim]unknown[/dim]")
    console.print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
