"""Application configuration and defaults."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from argazer.core.credentials import RepositoryAuth
from argazer.core.errors import ConfigError
from argazer.models import LogFormat, NotificationChannel, OutputFormat, VersionConstraint

ENV_PREFIX = "AG_"
CONFIG_FILE_NAME = "config.yaml"


def default_config_paths() -> list[Path]:
    return [
        Path.cwd() / CONFIG_FILE_NAME,
        Path("/etc/argazer") / CONFIG_FILE_NAME,
        Path.home() / ".argazer" / CONFIG_FILE_NAME,
    ]


@dataclass
class Settings:
    # Argo CD connection; without a URL applications are read from the cluster
    argocd_url: str = ""
    argocd_username: str = ""
    argocd_password: str = ""
    argocd_insecure: bool = False
    argocd_namespace: str = ""
    kube_context: str = ""

    # Search scope
    projects: list[str] = field(default_factory=lambda: ["*"])
    app_names: list[str] = field(default_factory=lambda: ["*"])
    labels: dict[str, str] = field(default_factory=dict)

    notification_channel: str = ""
    telegram_webhook: str = ""
    telegram_chat_id: str = ""
    email_smtp_host: str = ""
    email_smtp_port: int = 587
    email_smtp_username: str = ""
    email_smtp_password: str = ""
    email_from: str = ""
    email_to: list[str] = field(default_factory=list)
    email_use_tls: bool = True
    slack_webhook: str = ""
    teams_webhook: str = ""
    webhook_url: str = ""

    verbose: bool = False
    source_name: str = "chart-repo"
    concurrency: int = 10
    version_constraint: str = "major"
    output_format: str = "table"
    log_format: str = "json"

    repository_auth: list[RepositoryAuth] = field(default_factory=list)

    @property
    def constraint(self) -> VersionConstraint:
        return VersionConstraint.from_str(self.version_constraint)

    @property
    def output(self) -> OutputFormat:
        return OutputFormat(self.output_format)

    @property
    def channel(self) -> NotificationChannel | None:
        return NotificationChannel(self.notification_channel) if self.notification_channel else None

    def validate(self) -> Settings:
        """Normalize and check the loaded values, raising ConfigError on problems."""
        if self.argocd_url:
            if not self.argocd_username:
                raise ConfigError("argocd_username is required when argocd_url is set")
            if not self.argocd_password:
                raise ConfigError("argocd_password is required when argocd_url is set")

        self.version_constraint = (self.version_constraint or "major").lower()
        if self.version_constraint not in {c.value for c in VersionConstraint}:
            raise ConfigError(
                "version_constraint must be one of: 'major', 'minor', 'patch' "
                f"(got: {self.version_constraint!r})"
            )

        self.output_format = (self.output_format or "table").lower()
        if self.output_format not in {f.value for f in OutputFormat}:
            raise ConfigError(
                "output_format must be one of: 'table', 'json', 'markdown', 'yaml' "
                f"(got: {self.output_format!r})"
            )

        self.log_format = (self.log_format or "json").lower()
        if self.log_format not in {f.value for f in LogFormat}:
            raise ConfigError(f"log_format must be 'json' or 'text' (got: {self.log_format!r})")

        self.notification_channel = (self.notification_channel or "").lower()
        if self.notification_channel:
            if self.notification_channel not in {c.value for c in NotificationChannel}:
                raise ConfigError(f"unknown notification_channel: {self.notification_channel!r}")
            self._validate_channel()
        return self

    def _validate_channel(self) -> None:
        required = {
            NotificationChannel.TELEGRAM: ("telegram_webhook", "telegram_chat_id"),
            NotificationChannel.EMAIL: ("email_smtp_host", "email_from", "email_to"),
            NotificationChannel.SLACK: ("slack_webhook",),
            NotificationChannel.TEAMS: ("teams_webhook",),
            NotificationChannel.WEBHOOK: ("webhook_url",),
        }
        for key in required[self.channel]:
            if not getattr(self, key):
                raise ConfigError(
                    f"{key} is required when notification_channel is '{self.notification_channel}'"
                )


_FIELDS = {f.name: f for f in dataclasses.fields(Settings)}


def parse_labels(value: str) -> dict[str, str]:
    """Parse "key1=value1,key2=value2" into a dict."""
    labels: dict[str, str] = {}
    for pair in value.split(","):
        key, sep, val = pair.strip().partition("=")
        if sep and key.strip():
            labels[key.strip()] = val.strip()
    return labels


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw file/env/CLI value to the field's type."""
    default = Settings()
    current = getattr(default, name)
    try:
        if name == "repository_auth":
            return [RepositoryAuth.from_dict(entry) for entry in value or [] if isinstance(entry, dict)]
        if name == "labels":
            if isinstance(value, str):
                return parse_labels(value)
            return {str(k): str(v) for k, v in (value or {}).items()}
        if isinstance(current, bool):
            return _parse_bool(value)
        if isinstance(current, int):
            return int(value)
        if isinstance(current, list):
            if isinstance(value, str):
                return [item.strip() for item in value.split(",") if item.strip()]
            return [str(item) for item in value or []]
        return "" if value is None else str(value)
    except (TypeError, ValueError, AttributeError) as exc:
        raise ConfigError(f"invalid value for {name}: {value!r}") from exc


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"error reading config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"error parsing config file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    return data


def find_config_file(config_path: str | Path | None = None) -> Path | None:
    if config_path:
        path = Path(config_path)
        if not path.is_file():
            raise ConfigError(f"config file not found: {path}")
        return path
    for candidate in default_config_paths():
        if candidate.is_file():
            return candidate
    return None


def load_settings(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Defaults, then config file, then AG_* environment, then CLI overrides."""
    environ = os.environ if environ is None else environ
    values: dict[str, Any] = {}

    path = find_config_file(config_path)
    if path is not None:
        for key, value in _read_config_file(path).items():
            key = key.replace("-", "_")
            if key in _FIELDS:
                values[key] = _coerce(key, value)

    for name in _FIELDS:
        if name == "repository_auth":
            continue  # AG_AUTH_* groups are read by the credential store
        env_value = environ.get(ENV_PREFIX + name.upper())
        if env_value is not None:
            values[name] = _coerce(name, env_value)

    for key, value in (overrides or {}).items():
        if value is not None and key in _FIELDS:
            values[key] = _coerce(key, value)

    return Settings(**values).validate()
