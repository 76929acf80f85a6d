"""argazer version - Print version information."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as dist_version

import typer

app = typer.Typer()


def get_version() -> str:
    try:
        return dist_version("argazer")
    except PackageNotFoundError:
        return "dev"


@app.callback(invoke_without_command=True)
def version() -> None:
    """Print the installed Argazer version."""
    typer.echo(f"argazer version {get_version()}")
