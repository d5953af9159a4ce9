"""Rich terminal renderer for provisioning plans and run reports.

Color scheme
------------
- green     : stage passed with changes
- dim       : stage passed, nothing changed
- bold red  : stage failed
- dim       : stage not reached
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from promprov.models.plan import ProvisioningPlan
from promprov.models.reports import RunReport
from promprov.models.stages import STAGE_DISPLAY_NAMES, STAGE_ORDER, RunState, Stage

_RUN_STATE_STYLES: dict[RunState, str] = {
    RunState.COMPLETE: "bold green",
    RunState.FAILED: "bold red",
    RunState.PENDING: "dim",
}


class PlanRenderer:
    """Renders plans and reports as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Plan
    # ------------------------------------------------------------------

    def render_plan(self, plan: ProvisioningPlan) -> Panel:
        """Render a plan as a Panel: artifact summary, routes, resources."""
        spec = plan.spec
        summary = "\n".join([
            f"[bold]Version:[/bold]  {spec.version} ({spec.os}/{plan.artifact.arch})",
            f"[bold]URL:[/bold]      {plan.artifact.url}",
            f"[bold]Init:[/bold]     {spec.init_style.value}",
            f"[bold]Restart on change:[/bold] "
            + ("[green]yes[/green]" if spec.restart_on_change else "[yellow]no[/yellow]"),
            f"[bold]Plan:[/bold]     [dim]{plan.plan_hash}[/dim]",
        ])

        routes = Table(title="Notification routes", header_style="bold cyan", expand=True)
        routes.add_column("From")
        routes.add_column("Signal", justify="center")
        routes.add_column("To")
        for route in plan.routes:
            routes.add_row(
                STAGE_DISPLAY_NAMES[route.source],
                route.signal.value,
                STAGE_DISPLAY_NAMES[route.target],
            )

        return Panel(
            Group(Text.from_markup(summary), Text(""), routes, Text(""), self._resource_table(plan)),
            title=f"[bold]{spec.package_name} provisioning plan[/bold]",
            border_style="blue",
            padding=(1, 2),
        )

    def _resource_table(self, plan: ProvisioningPlan) -> Table:
        table = Table(header_style="bold cyan", expand=True, show_lines=False)
        table.add_column("Stage", min_width=14)
        table.add_column("Kind", min_width=10)
        table.add_column("Resource", min_width=30)
        table.add_column("Notify", justify="center", width=8)

        for directive in plan.stages:
            if not directive.resources:
                table.add_row(STAGE_DISPLAY_NAMES[directive.stage], "[dim]-[/dim]", "[dim]nothing to manage[/dim]", "")
            for resource in directive.resources:
                table.add_row(
                    STAGE_DISPLAY_NAMES[directive.stage],
                    resource.kind.value,
                    resource.name,
                    resource.notify.value if resource.notify else "[dim]-[/dim]",
                )
        return table

    def render_config(self, plan: ProvisioningPlan) -> Syntax:
        return Syntax(plan.config_text, "yaml", theme="ansi_dark", background_color="default")

    # ------------------------------------------------------------------
    # Report
    # ------------------------------------------------------------------

    def render_report(self, report: RunReport) -> Panel:
        """Render a RunReport as a Panel containing a per-stage Table."""
        table = Table(header_style="bold cyan", expand=True)
        table.add_column("#", style="dim", width=3, justify="right")
        table.add_column("Stage", min_width=14)
        table.add_column("State", justify="center", min_width=10)
        table.add_column("Changed", justify="right", width=8)
        table.add_column("Signals", min_width=12)
        table.add_column("Refreshed", min_width=16)

        results = {r.stage: r for r in report.results}
        for i, stage in enumerate(STAGE_ORDER, start=1):
            table.add_row(str(i), STAGE_DISPLAY_NAMES[stage], *self._stage_cells(report, stage, results))

        state_style = _RUN_STATE_STYLES.get(report.state, "yellow")
        footer = f"[bold]State:[/bold] [{state_style}]{report.state.value}[/{state_style}]"
        if report.error:
            footer += f"  |  [bold red]Error:[/bold red] {report.error}"

        return Panel(
            Group(table, Text(""), Text.from_markup(footer)),
            title="[bold]Provisioning run[/bold]",
            subtitle=f"[dim]{report.plan_hash[:19]}[/dim]",
            border_style="red" if report.state == RunState.FAILED else "green",
            padding=(1, 2),
        )

    @staticmethod
    def _stage_cells(report: RunReport, stage: Stage, results: dict) -> list[str]:
        result = results.get(stage)
        if result is None:
            if report.failed_stage == stage:
                return ["[bold red]FAILED[/bold red]", "", "", ""]
            return ["[dim]NOT RUN[/dim]", "", "", ""]

        state = "[green]CHANGED[/green]" if (result.changed or result.refreshed) else "[dim]OK[/dim]"
        signals = ", ".join(
            [f"in:{s.value}" for s in result.received] + [f"out:{s.value}" for s in result.emitted]
        )
        return [
            state,
            str(len(result.changed)) if result.changed else "[dim]0[/dim]",
            signals or "[dim]-[/dim]",
            ", ".join(result.refreshed) or "[dim]-[/dim]",
        ]

    # ------------------------------------------------------------------
    # Standalone print
    # ------------------------------------------------------------------

    def print_plan(self, plan: ProvisioningPlan) -> None:
        self.console.print(self.render_plan(plan))

    def print_config(self, plan: ProvisioningPlan) -> None:
        self.console.print(
            Panel(self.render_config(plan), title=f"[bold]{plan.spec.config_file}[/bold]", border_style="blue")
        )

    def print_report(self, report: RunReport) -> None:
        self.console.print(self.render_report(report))
