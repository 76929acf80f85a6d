"""Rich table builders for scan results."""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table

from argazer.models.result import ApplicationCheckResult, ScanStatistics
from argazer.output.themes import styled_update_type
from argazer.utils.version_compare import classify_update


def summary_panel(stats: ScanStatistics) -> Panel:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Value", justify="right")
    table.add_row("Applications checked", str(stats.total))
    table.add_row("Up to date", f"[green]{stats.up_to_date}[/green]")
    table.add_row("Updates available", f"[yellow]{stats.updates_available}[/yellow]")
    table.add_row("Skipped", f"[red]{stats.skipped}[/red]" if stats.skipped else "0")
    return Panel(table, title="[bold]Argazer Scan Results[/bold]", border_style="blue", expand=False)


def updates_table(results: list[ApplicationCheckResult]) -> Table:
    table = Table(title="Applications with Updates Available", expand=True)
    table.add_column("Application", style="bold white", no_wrap=True)
    table.add_column("Project", style="blue")
    table.add_column("Chart", style="magenta", no_wrap=True)
    table.add_column("Current", style="dim")
    table.add_column("Latest", style="bold")
    table.add_column("Update Type", no_wrap=True)
    table.add_column("Note", style="dim")
    table.add_column("Repository", style="dim", max_width=40)

    for r in results:
        note = ""
        if r.constraint_applied not in ("", "major"):
            note = f"constraint: {r.constraint_applied}"
        if r.has_update_outside_constraint and r.latest_version_all:
            note = (note + "; " if note else "") + f"{r.latest_version_all} outside constraint"
        table.add_row(
            r.app_name,
            r.project,
            r.chart_name,
            r.current_version,
            r.latest_version,
            styled_update_type(classify_update(r.current_version, r.latest_version)),
            note,
            r.repo_url,
        )
    return table


def constrained_table(results: list[ApplicationCheckResult]) -> Table:
    table = Table(title="Up to Date (with updates outside constraint)", expand=True)
    table.add_column("Application", style="bold white", no_wrap=True)
    table.add_column("Project", style="blue")
    table.add_column("Chart", style="magenta", no_wrap=True)
    table.add_column("Current", style="dim")
    table.add_column("Constraint")
    table.add_column("Available", style="yellow")
    table.add_column("Repository", style="dim", max_width=40)

    for r in results:
        table.add_row(
            r.app_name,
            r.project,
            r.chart_name,
            r.current_version,
            r.constraint_applied,
            r.latest_version_all or "-",
            r.repo_url,
        )
    return table


def errors_table(results: list[ApplicationCheckResult]) -> Table:
    table = Table(title="Applications Skipped (unable to check)", expand=True)
    table.add_column("Application", style="bold white", no_wrap=True)
    table.add_column("Project", style="blue")
    table.add_column("Chart", style="magenta", no_wrap=True)
    table.add_column("Repository", style="dim", max_width=40)
    table.add_column("Reason", style="red")

    for r in results:
        table.add_row(r.app_name, r.project, r.chart_name, r.repo_url, r.error)
    return table
