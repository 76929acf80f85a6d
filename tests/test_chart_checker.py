"""Tests for the version resolution facade."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from argazer.core.backend_router import BackendRouter
from argazer.core.chart_checker import ChartChecker
from argazer.core.errors import NoValidVersionsError
from argazer.models import BackendKind, VersionConstraint


def _checker(versions):
    backend = MagicMock()
    backend.list_versions.return_value = versions
    router = MagicMock(spec=BackendRouter)
    router.backend_for.return_value = (BackendKind.INDEX, backend)
    return ChartChecker(router), router, backend


class TestChartChecker:
    def test_latest(self):
        checker, router, backend = _checker(["1.0.0", "1.0.2", "1.0.1"])
        assert checker.get_latest_version("https://charts.example.com", "nginx") == "1.0.2"
        router.backend_for.assert_called_once_with("https://charts.example.com")
        backend.list_versions.assert_called_once_with("https://charts.example.com", "nginx", cancel=None)

    def test_with_constraint(self):
        checker, _, _ = _checker(["1.0.0", "1.5.0", "2.0.0", "2.1.0"])
        result = checker.get_latest_version_with_constraint(
            "https://charts.example.com", "nginx", "1.2.0", VersionConstraint.MINOR
        )
        assert result.latest_within_constraint == "1.5.0"
        assert result.latest_unconstrained == "2.1.0"
        assert result.has_update_outside_constraint

    def test_no_valid_versions(self):
        checker, _, _ = _checker(["latest", "edge"])
        with pytest.raises(NoValidVersionsError):
            checker.get_latest_version("https://charts.example.com", "nginx")

    def test_declared_version_goes_to_vcs(self):
        router = MagicMock(spec=BackendRouter)
        router.vcs = MagicMock()
        router.vcs.read_chart_version.return_value = "0.4.0"
        checker = ChartChecker(router)
        assert checker.get_declared_version("https://github.com/o/r.git", "charts/x") == "0.4.0"
        router.vcs.read_chart_version.assert_called_once_with("https://github.com/o/r.git", "charts/x", cancel=None)
