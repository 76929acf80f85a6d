"""argazer scan - Check Argo CD applications for chart updates."""

from __future__ import annotations

import logging
import signal
import threading
from typing import Optional, Protocol

import typer
from rich.console import Console

from argazer.cli.options import ConfigOption, LogFormatOption, OutputOption, VerboseOption
from argazer.config.settings import Settings, load_settings
from argazer.core.argocd_client import ArgoCDClient, FilterOptions
from argazer.core.backend_router import BackendRouter
from argazer.core.chart_checker import ChartChecker
from argazer.core.credentials import CredentialStore
from argazer.core.errors import ConfigError, ControlPlaneError, NotificationError
from argazer.core.k8s_client import K8sClient, KubernetesApplicationLister
from argazer.core.scanner import categorize_results, scan_applications
from argazer.logging_setup import setup_logging
from argazer.models.application import Application
from argazer.models.result import CategorizedResults
from argazer.notification.notifiers import create_notifier, send_notifications
from argazer.output.formatters import render_results

logger = logging.getLogger(__name__)

app = typer.Typer()
console = Console()
status_console = Console(stderr=True)


class ApplicationLister(Protocol):
    def list_applications(self, filters: FilterOptions | None = None) -> list[Application]:
        ...


def build_lister(settings: Settings) -> ApplicationLister:
    if settings.argocd_url:
        return ArgoCDClient(
            settings.argocd_url,
            settings.argocd_username,
            settings.argocd_password,
            insecure=settings.argocd_insecure,
        )
    logger.info("No argocd_url configured, reading Applications from the cluster")
    return KubernetesApplicationLister(
        K8sClient(context=settings.kube_context or None),
        namespace=settings.argocd_namespace or None,
    )


def run_scan(
    settings: Settings,
    lister: ApplicationLister,
    checker: ChartChecker,
    cancel: threading.Event | None = None,
    out: Console | None = None,
) -> CategorizedResults:
    """List applications, check them, render the results and notify."""
    filters = FilterOptions(
        projects=settings.projects,
        app_names=settings.app_names,
        labels=settings.labels,
    )
    apps = lister.list_applications(filters)

    with status_console.status("[bold cyan]Checking applications…") as status:
        def on_progress(i: int, total: int, name: str) -> None:
            status.update(f"[bold cyan]Checking applications… [dim]({i}/{total})[/dim] {name}")

        results = scan_applications(
            apps,
            checker,
            concurrency=settings.concurrency,
            constraint=settings.constraint,
            source_name=settings.source_name,
            cancel=cancel,
            on_progress=on_progress,
        )

    categorized = categorize_results(results)
    render_results(categorized, settings.output, out=out or console)

    notifier = create_notifier(settings)
    if notifier is not None:
        try:
            send_notifications(notifier, results)
        except NotificationError as exc:
            logger.warning("Failed to send notifications: %s", exc)

    logger.info("Argazer completed, %d applications checked", categorized.stats.total)
    return categorized


def _install_signal_handlers(cancel: threading.Event) -> None:
    def handler(signum, frame):
        logger.warning("Received signal %s, cancelling scan", signal.Signals(signum).name)
        cancel.set()

    signal.signal(signal.SIGINT, handler)
    signal.signal(signal.SIGTERM, handler)


@app.callback(invoke_without_command=True)
def scan(
    config: Optional[str] = ConfigOption,
    argocd_url: Optional[str] = typer.Option(None, "--argocd-url", help="Argo CD server URL"),
    argocd_username: Optional[str] = typer.Option(None, "--argocd-username", help="Argo CD username"),
    argocd_password: Optional[str] = typer.Option(None, "--argocd-password", help="Argo CD password"),
    argocd_insecure: bool = typer.Option(False, "--argocd-insecure", help="Skip TLS verification"),
    projects: Optional[str] = typer.Option(None, "--projects", help="Comma-separated projects, or '*' for all"),
    app_names: Optional[str] = typer.Option(None, "--app-names", help="Comma-separated app names, or '*' for all"),
    notification_channel: Optional[str] = typer.Option(
        None, "--notification-channel", help="telegram, email, slack, teams, webhook"
    ),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", help="Number of concurrent workers"),
    version_constraint: Optional[str] = typer.Option(
        None, "--version-constraint", help="major (all), minor (same major), patch (same major.minor)"
    ),
    output_format: Optional[str] = OutputOption,
    log_format: Optional[str] = LogFormatOption,
    verbose: bool = VerboseOption,
) -> None:
    """Check all Helm-based Argo CD applications for newer chart versions."""
    overrides = {
        "argocd_url": argocd_url,
        "argocd_username": argocd_username,
        "argocd_password": argocd_password,
        "argocd_insecure": True if argocd_insecure else None,
        "projects": projects,
        "app_names": app_names,
        "notification_channel": notification_channel,
        "concurrency": concurrency,
        "version_constraint": version_constraint,
        "output_format": output_format,
        "log_format": log_format,
        "verbose": True if verbose else None,
    }
    try:
        settings = load_settings(config, overrides=overrides)
    except ConfigError as exc:
        typer.echo(f"Failed to load configuration: {exc}", err=True)
        raise typer.Exit(code=1)

    setup_logging(settings.verbose, settings.log_format)

    credentials = CredentialStore.from_sources(settings.repository_auth)
    checker = ChartChecker(BackendRouter(credentials))

    cancel = threading.Event()
    _install_signal_handlers(cancel)

    try:
        run_scan(settings, build_lister(settings), checker, cancel=cancel)
    except ControlPlaneError as exc:
        logger.error("%s", exc)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
