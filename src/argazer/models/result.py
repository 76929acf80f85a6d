"""Version resolution and scan result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import semver


@dataclass(frozen=True)
class VersionCandidate:
    raw: str
    parsed: semver.Version | None = None

    @property
    def valid(self) -> bool:
        return self.parsed is not None


@dataclass(frozen=True)
class ConstraintResult:
    latest_within_constraint: str
    latest_unconstrained: str
    has_update_outside_constraint: bool = False


@dataclass(frozen=True)
class ChartSource:
    repository_url: str
    package_name: str
    pinned_version: str


@dataclass(frozen=True)
class ApplicationCheckResult:
    app_name: str = ""
    project: str = ""
    chart_name: str = ""
    current_version: str = ""
    latest_version: str = ""
    repo_url: str = ""
    has_update: bool = False
    error: str = ""
    constraint_applied: str = ""
    has_update_outside_constraint: bool = False
    latest_version_all: str = ""

    @classmethod
    def empty(cls) -> ApplicationCheckResult:
        """Placeholder for an application without a chart source."""
        return cls()

    @property
    def is_sentinel(self) -> bool:
        return not self.app_name

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "app_name": self.app_name,
            "project": self.project,
            "chart_name": self.chart_name,
            "current_version": self.current_version,
            "latest_version": self.latest_version,
            "repo_url": self.repo_url,
            "has_update": self.has_update,
            "constraint_applied": self.constraint_applied,
            "has_update_outside_constraint": self.has_update_outside_constraint,
        }
        if self.error:
            data["error"] = self.error
        if self.latest_version_all:
            data["latest_version_all"] = self.latest_version_all
        return data


@dataclass(frozen=True)
class ScanStatistics:
    total: int = 0
    up_to_date: int = 0
    updates_available: int = 0
    skipped: int = 0


@dataclass
class CategorizedResults:
    updates_available: list[ApplicationCheckResult] = field(default_factory=list)
    up_to_date_with_constraint: list[ApplicationCheckResult] = field(default_factory=list)
    up_to_date: list[ApplicationCheckResult] = field(default_factory=list)
    errors: list[ApplicationCheckResult] = field(default_factory=list)
    stats: ScanStatistics = field(default_factory=ScanStatistics)
