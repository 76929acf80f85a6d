"""Root Typer application, mounts sub-commands."""

from __future__ import annotations

import typer

app = typer.Typer(
    name="argazer",
    help="Argazer - Monitor Helm chart versions in Argo CD applications.",
    no_args_is_help=True,
)


def _register_commands() -> None:
    from argazer.cli.commands.scan_cmd import app as scan_app
    from argazer.cli.commands.configure_cmd import app as configure_app
    from argazer.cli.commands.version_cmd import app as version_app

    app.add_typer(scan_app, name="scan", help="Check applications for chart updates")
    app.add_typer(configure_app, name="configure", help="Interactively write a config file")
    app.add_typer(version_app, name="version", help="Print version information")


_register_commands()


def main() -> None:
    app()
