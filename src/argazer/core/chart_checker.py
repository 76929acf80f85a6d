"""Resolve the latest available version of a chart."""

from __future__ import annotations

import logging
import threading

from argazer.core.backend_router import BackendRouter
from argazer.models import VersionConstraint
from argazer.models.result import ConstraintResult
from argazer.utils.version_compare import select_latest, select_latest_with_constraint

logger = logging.getLogger(__name__)


class ChartChecker:
    """Routes a repository reference to its backend and picks the latest version."""

    def __init__(self, router: BackendRouter):
        self.router = router

    def list_versions(
        self, repo_url: str, chart_name: str, cancel: threading.Event | None = None
    ) -> list[str]:
        _, backend = self.router.backend_for(repo_url)
        return backend.list_versions(repo_url, chart_name, cancel=cancel)

    def get_latest_version(
        self, repo_url: str, chart_name: str, cancel: threading.Event | None = None
    ) -> str:
        versions = self.list_versions(repo_url, chart_name, cancel=cancel)
        latest = select_latest(versions)
        logger.debug("Latest version of %s in %s is %s", chart_name, repo_url, latest)
        return latest

    def get_latest_version_with_constraint(
        self,
        repo_url: str,
        chart_name: str,
        current_version: str,
        constraint: VersionConstraint | str | None = VersionConstraint.MAJOR,
        cancel: threading.Event | None = None,
    ) -> ConstraintResult:
        versions = self.list_versions(repo_url, chart_name, cancel=cancel)
        result = select_latest_with_constraint(versions, current_version, constraint)
        logger.debug(
            "Resolved %s: current=%s within=%s all=%s outside=%s",
            chart_name,
            current_version,
            result.latest_within_constraint,
            result.latest_unconstrained,
            result.has_update_outside_constraint,
        )
        return result

    def get_declared_version(
        self, repo_url: str, chart_path: str, cancel: threading.Event | None = None
    ) -> str:
        """Version committed in Chart.yaml for git-hosted charts."""
        return self.router.vcs.read_chart_version(repo_url, chart_path, cancel=cancel)
