"""Table / JSON / YAML / Markdown output dispatch."""

from __future__ import annotations

import json
from typing import Any

import yaml
from rich.console import Console

from argazer.models import OutputFormat
from argazer.models.result import ApplicationCheckResult, CategorizedResults

console = Console()


def results_to_dict(cat: CategorizedResults) -> dict[str, Any]:
    return {
        "summary": {
            "total": cat.stats.total,
            "up_to_date": cat.stats.up_to_date,
            "updates_available": cat.stats.updates_available,
            "skipped": cat.stats.skipped,
        },
        "updates_available": [r.to_dict() for r in cat.updates_available],
        "up_to_date_with_constraint": [r.to_dict() for r in cat.up_to_date_with_constraint],
        "up_to_date": [r.to_dict() for r in cat.up_to_date],
        "errors": [r.to_dict() for r in cat.errors],
    }


def _markdown_rows(rows: list[tuple[str, str]]) -> list[str]:
    lines = ["| Field | Value |", "|-------|-------|"]
    lines.extend(f"| **{key}** | {value} |" for key, value in rows)
    return lines + [""]


def _markdown_update(r: ApplicationCheckResult) -> list[str]:
    rows = [
        ("Project", r.project),
        ("Chart", r.chart_name),
        ("Current Version", r.current_version),
        ("Latest Version", r.latest_version),
    ]
    if r.constraint_applied not in ("", "major"):
        rows.append(("Version Constraint", r.constraint_applied))
    if r.has_update_outside_constraint and r.latest_version_all:
        rows.append(("Latest Version (all)", r.latest_version_all))
    rows.append(("Repository", r.repo_url))
    return _markdown_rows(rows)


def render_markdown(cat: CategorizedResults) -> str:
    lines = [
        "# Argazer Scan Results",
        "",
        "## Summary",
        "",
        f"- **Total applications checked:** {cat.stats.total}",
        f"- **Up to date:** {cat.stats.up_to_date}",
        f"- **Updates available:** {cat.stats.updates_available}",
        f"- **Skipped:** {cat.stats.skipped}",
        "",
    ]

    if cat.updates_available:
        lines += ["## Applications with Updates Available", ""]
        for r in cat.updates_available:
            lines += [f"### {r.app_name}", ""] + _markdown_update(r)

    if cat.up_to_date_with_constraint:
        lines += ["## Up to Date (with updates outside constraint)", ""]
        for r in cat.up_to_date_with_constraint:
            rows = [
                ("Project", r.project),
                ("Chart", r.chart_name),
                ("Current Version", r.current_version),
                ("Status", f"Up to date within '{r.constraint_applied}' constraint"),
            ]
            if r.latest_version_all:
                rows.append(("Latest Version (all)", r.latest_version_all))
            rows.append(("Repository", r.repo_url))
            lines += [f"### {r.app_name}", ""] + _markdown_rows(rows)

    if cat.errors:
        lines += ["## Applications Skipped", ""]
        for r in cat.errors:
            rows = [
                ("Project", r.project),
                ("Chart", r.chart_name),
                ("Repository", r.repo_url),
                ("Error", r.error),
            ]
            lines += [f"### {r.app_name}", ""] + _markdown_rows(rows)

    return "\n".join(lines)


def render_results(cat: CategorizedResults, fmt: OutputFormat | str, out: Console | None = None) -> None:
    out = out or console
    fmt = OutputFormat(fmt)
    if fmt is OutputFormat.JSON:
        out.print_json(json.dumps(results_to_dict(cat), indent=2))
    elif fmt is OutputFormat.YAML:
        out.print(
            yaml.safe_dump(results_to_dict(cat), default_flow_style=False, sort_keys=False),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
    elif fmt is OutputFormat.MARKDOWN:
        out.print(render_markdown(cat), markup=False, highlight=False, soft_wrap=True)
    else:
        from argazer.output.tables import constrained_table, errors_table, summary_panel, updates_table
        out.print(summary_panel(cat.stats))
        if cat.updates_available:
            out.print(updates_table(cat.updates_available))
        if cat.up_to_date_with_constraint:
            out.print(constrained_table(cat.up_to_date_with_constraint))
        if cat.errors:
            out.print(errors_table(cat.errors))
        if cat.stats.updates_available:
            out.print(f"\n[yellow]{cat.stats.updates_available} update(s) available[/yellow]")
        elif cat.stats.total:
            out.print("\n[green]All charts are up to date[/green]")
