"""Root logger configuration for the CLI."""

from __future__ import annotations

import logging

import structlog
from rich.console import Console
from rich.logging import RichHandler


def json_formatter() -> structlog.stdlib.ProcessorFormatter:
    """Render stdlib records, ``extra`` fields included, as one JSON object per line."""
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="time"),
            structlog.stdlib.ExtraAdder(),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(default=str),
        ],
    )


def setup_logging(verbose: bool = False, log_format: str = "json") -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    if log_format == "text":
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(json_formatter())

    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    # urllib3 and kubernetes are noisy at DEBUG
    for name in ("urllib3", "kubernetes"):
        logging.getLogger(name).setLevel(logging.WARNING)
