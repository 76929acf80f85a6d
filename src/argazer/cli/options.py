"""Shared CLI options."""

from __future__ import annotations

import typer

ConfigOption = typer.Option(None, "--config", "-c", help="Configuration file path")
OutputOption = typer.Option(None, "--output-format", "-o", help="Output format: table, json, markdown, yaml")
LogFormatOption = typer.Option(None, "--log-format", "-l", help="Log format: json or text")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable verbose logging")
