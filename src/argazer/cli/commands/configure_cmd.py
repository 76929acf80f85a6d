"""argazer configure - Interactively write a config file."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from rich.console import Console

from argazer.config.settings import CONFIG_FILE_NAME, Settings
from argazer.core.errors import ConfigError, NotificationError
from argazer.models import NotificationChannel, VersionConstraint
from argazer.notification.notifiers import create_notifier

app = typer.Typer()
console = Console()

_CHANNEL_PROMPTS: dict[NotificationChannel, list[tuple[str, str]]] = {
    NotificationChannel.TELEGRAM: [("telegram_webhook", "Telegram webhook URL"), ("telegram_chat_id", "Telegram chat ID")],
    NotificationChannel.EMAIL: [
        ("email_smtp_host", "SMTP host"),
        ("email_smtp_port", "SMTP port"),
        ("email_smtp_username", "SMTP username"),
        ("email_smtp_password", "SMTP password"),
        ("email_from", "Sender address"),
        ("email_to", "Recipients (comma-separated)"),
    ],
    NotificationChannel.SLACK: [("slack_webhook", "Slack webhook URL")],
    NotificationChannel.TEAMS: [("teams_webhook", "Teams webhook URL")],
    NotificationChannel.WEBHOOK: [("webhook_url", "Webhook URL")],
}

_SECRET_KEYS = {"argocd_password", "email_smtp_password"}


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def build_config(answers: dict[str, Any]) -> dict[str, Any]:
    """Drop empty answers and normalize list-valued keys."""
    config: dict[str, Any] = {}
    for key, value in answers.items():
        if value in ("", None):
            continue
        if key in ("projects", "app_names", "email_to") and isinstance(value, str):
            value = _split(value)
        if key == "email_smtp_port":
            value = int(value)
        config[key] = value
    return config


def write_config(path: Path, config: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(config, default_flow_style=False, sort_keys=False), encoding="utf-8")
    path.chmod(0o600)


def _prompt_channel(answers: dict[str, Any]) -> None:
    choices = ", ".join(c.value for c in NotificationChannel)
    raw = typer.prompt(f"Notification channel ({choices}, empty for none)", default="", show_default=False)
    raw = raw.strip().lower()
    if not raw:
        return
    try:
        channel = NotificationChannel(raw)
    except ValueError:
        raise typer.BadParameter(f"unknown notification channel: {raw}")
    answers["notification_channel"] = channel.value
    for key, label in _CHANNEL_PROMPTS[channel]:
        default = "587" if key == "email_smtp_port" else ""
        answers[key] = typer.prompt(label, default=default, hide_input=key in _SECRET_KEYS, show_default=bool(default))


@app.callback(invoke_without_command=True)
def configure(
    path: Optional[str] = typer.Option(None, "--path", "-p", help="Where to write the config file"),
) -> None:
    """Ask for connection and notification settings and write config.yaml."""
    target = Path(path) if path else Path.cwd() / CONFIG_FILE_NAME
    if target.exists() and not typer.confirm(f"{target} exists. Overwrite?", default=False):
        raise typer.Exit()

    answers: dict[str, Any] = {}
    if typer.confirm("Connect through the Argo CD API server?", default=False):
        answers["argocd_url"] = typer.prompt("Argo CD URL")
        answers["argocd_username"] = typer.prompt("Argo CD username", default="admin")
        answers["argocd_password"] = typer.prompt("Argo CD password", hide_input=True)
        answers["argocd_insecure"] = typer.confirm("Skip TLS verification?", default=False)
    else:
        answers["argocd_namespace"] = typer.prompt("Namespace holding Applications (empty for all)", default="", show_default=False)
        answers["kube_context"] = typer.prompt("kubeconfig context (empty for current)", default="", show_default=False)

    answers["projects"] = typer.prompt("Projects (comma-separated or *)", default="*")
    answers["app_names"] = typer.prompt("Application names (comma-separated or *)", default="*")
    answers["version_constraint"] = typer.prompt(
        "Version constraint (major, minor, patch)", default=VersionConstraint.MAJOR.value
    )
    _prompt_channel(answers)

    try:
        config = build_config(answers)
        settings = Settings(**config).validate()
    except (ConfigError, ValueError) as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=1)

    write_config(target, config)
    console.print(f"[green]Configuration written to[/green] {target}")

    notifier = create_notifier(settings)
    if notifier is not None and typer.confirm("Send a test notification?", default=False):
        try:
            notifier.send("Argazer test notification", "Argazer is configured to send notifications here.")
        except NotificationError as exc:
            console.print(f"[red]Test notification failed:[/red] {exc}")
            raise typer.Exit(code=1)
        console.print("[green]Test notification sent[/green]")
