"""Data models for Argazer."""

from __future__ import annotations

import enum


class BackendKind(enum.Enum):
    INDEX = "index"
    REGISTRY_API = "registry-api"
    VCS = "vcs"


class VersionConstraint(enum.Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    @classmethod
    def from_str(cls, s: str | None) -> VersionConstraint:
        """Parse a constraint name; empty means no restriction (major)."""
        if not s:
            return cls.MAJOR
        for member in cls:
            if member.value == s.lower():
                return member
        raise ValueError(f"unknown version constraint: {s!r}")


class OutputFormat(enum.Enum):
    TABLE = "table"
    JSON = "json"
    MARKDOWN = "markdown"
    YAML = "yaml"


class LogFormat(enum.Enum):
    JSON = "json"
    TEXT = "text"


class NotificationChannel(enum.Enum):
    TELEGRAM = "telegram"
    EMAIL = "email"
    SLACK = "slack"
    TEAMS = "teams"
    WEBHOOK = "webhook"
