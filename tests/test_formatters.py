"""Tests for result rendering."""
from __future__ import annotations

import io
import json

import yaml
from rich.console import Console

from argazer.core.scanner import categorize_results
from argazer.models.result import ApplicationCheckResult
from argazer.output.formatters import render_markdown, render_results, results_to_dict


def _categorized():
    return categorize_results([
        ApplicationCheckResult(
            app_name="web", project="default", chart_name="nginx", current_version="1.0.0",
            latest_version="1.2.0", repo_url="https://charts.example.com", has_update=True,
            constraint_applied="minor", has_update_outside_constraint=True, latest_version_all="2.0.0",
        ),
        ApplicationCheckResult(
            app_name="db", project="data", chart_name="postgresql", current_version="12.1.0",
            latest_version="12.1.0", repo_url="oci://registry.example.com/charts",
            constraint_applied="major", latest_version_all="12.1.0",
        ),
        ApplicationCheckResult(
            app_name="cache", project="data", chart_name="redis", current_version="17.0.0",
            repo_url="ghcr.io/org", constraint_applied="major", error="chart redis not found",
        ),
    ])


def _console():
    buf = io.StringIO()
    return Console(file=buf, width=200, force_terminal=False, color_system=None), buf


class TestResultsToDict:
    def test_summary_and_buckets(self):
        data = results_to_dict(_categorized())
        assert data["summary"] == {"total": 3, "up_to_date": 1, "updates_available": 1, "skipped": 1}
        assert data["updates_available"][0]["latest_version_all"] == "2.0.0"
        assert data["errors"][0]["error"] == "chart redis not found"
        assert "error" not in data["up_to_date"][0]


class TestRender:
    def test_json(self):
        console, buf = _console()
        render_results(_categorized(), "json", out=console)
        data = json.loads(buf.getvalue())
        assert data["summary"]["total"] == 3
        assert data["updates_available"][0]["app_name"] == "web"

    def test_yaml(self):
        console, buf = _console()
        render_results(_categorized(), "yaml", out=console)
        data = yaml.safe_load(buf.getvalue())
        assert data["summary"]["skipped"] == 1

    def test_markdown(self):
        text = render_markdown(_categorized())
        assert text.startswith("# Argazer Scan Results")
        assert "## Applications with Updates Available" in text
        assert "| **Version Constraint** | minor |" in text
        assert "| **Latest Version (all)** | 2.0.0 |" in text
        assert "## Applications Skipped" in text
        assert "chart redis not found" in text

    def test_table(self):
        console, buf = _console()
        render_results(_categorized(), "table", out=console)
        out = buf.getvalue()
        assert "web" in out
        assert "1.2.0" in out
        assert "chart redis not found" in out
        assert "1 update(s) available" in out


class TestLongValues:
    LONG_REPO = "oci://registry.example.com/" + "/".join(["platform-team-helm-charts"] * 4)
    LONG_ERROR = (
        "OCI registry requires authentication (status 401). No credentials found for ghcr.io. "
        "Add a repository_auth entry or set AG_AUTH_URL_<ID>/AG_AUTH_USER_<ID>/AG_AUTH_PASS_<ID>"
    )

    def _categorized(self):
        return categorize_results([
            ApplicationCheckResult(
                app_name="web", project="default", chart_name="nginx", current_version="1.0.0",
                latest_version="1.2.0", repo_url=self.LONG_REPO, has_update=True, constraint_applied="major",
            ),
            ApplicationCheckResult(
                app_name="cache", project="data", chart_name="redis", current_version="17.0.0",
                repo_url="ghcr.io/org", constraint_applied="major", error=self.LONG_ERROR,
            ),
        ])

    def _narrow_console(self):
        buf = io.StringIO()
        return Console(file=buf, width=80, force_terminal=False, color_system=None), buf

    def test_yaml_is_not_wrapped(self):
        console, buf = self._narrow_console()
        render_results(self._categorized(), "yaml", out=console)
        data = yaml.safe_load(buf.getvalue())
        assert data["updates_available"][0]["repo_url"] == self.LONG_REPO
        assert data["errors"][0]["error"] == self.LONG_ERROR

    def test_markdown_rows_stay_on_one_line(self):
        console, buf = self._narrow_console()
        render_results(self._categorized(), "markdown", out=console)
        lines = buf.getvalue().splitlines()
        assert f"| **Repository** | {self.LONG_REPO} |" in lines
        assert f"| **Error** | {self.LONG_ERROR} |" in lines
