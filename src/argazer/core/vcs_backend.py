"""Charts kept in git repositories, versioned by tags or by Chart.yaml."""

from __future__ import annotations

import logging
import os
import posixpath
import subprocess
import tempfile
import threading
import time
from pathlib import Path
from urllib.parse import quote, urlsplit, urlunsplit

import yaml

from argazer.core.credentials import Credentials, CredentialStore
from argazer.core.errors import (
    ChartNotFoundError,
    NoValidVersionsError,
    RepositoryUnavailableError,
    ScanCancelledError,
)
from argazer.utils.version_compare import parse_version

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 300
_POLL_INTERVAL = 0.2
_GENERIC_PREFIXES = ("release-", "chart-")


def with_basic_auth(repo_url: str, creds: Credentials | None) -> str:
    """Embed credentials into an http(s) clone URL; other URLs are returned as-is."""
    if creds is None:
        return repo_url
    parts = urlsplit(repo_url)
    if parts.scheme not in ("http", "https"):
        return repo_url
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    netloc = f"{quote(creds.username, safe='')}:{quote(creds.password, safe='')}@{host}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


def redact_url(url: str) -> str:
    parts = urlsplit(url)
    if "@" not in parts.netloc or parts.scheme not in ("http", "https"):
        return url
    host = parts.netloc.rsplit("@", 1)[1]
    return urlunsplit((parts.scheme, f"***@{host}", parts.path, parts.query, parts.fragment))


def normalize_tag(tag: str, chart_path: str = "") -> str | None:
    """Turn a git tag into a version string, or None when it is not one.

    With a chart path, "<chart>-v1.2.3" style tags are tried first; otherwise
    (or when that does not match) a leading "v" and the "release-"/"chart-"
    prefixes are stripped.
    """
    if chart_path:
        base = posixpath.basename(chart_path.strip("/"))
        prefix = base + "-"
        if base and tag.startswith(prefix):
            candidate = tag[len(prefix):]
            if candidate.startswith("v"):
                candidate = candidate[1:]
            if parse_version(candidate) is not None:
                return candidate

    candidate = tag[1:] if tag.startswith("v") else tag
    for prefix in _GENERIC_PREFIXES:
        if candidate.startswith(prefix):
            candidate = candidate[len(prefix):]
    if parse_version(candidate) is None:
        return None
    return candidate


class GitRunner:
    """Runs the git CLI with a deadline and cooperative cancellation."""

    def __init__(self, git_binary: str = "git", timeout: float = GIT_TIMEOUT):
        self.git_binary = git_binary
        self.timeout = timeout

    def run(
        self,
        args: list[str],
        cwd: str | None = None,
        cancel: threading.Event | None = None,
        secret: str = "",
    ) -> str:
        env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
        safe_args = [redact_url(a) for a in args]
        logger.debug("Running git %s", " ".join(safe_args))
        try:
            proc = subprocess.Popen(
                [self.git_binary, *args],
                cwd=cwd,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except FileNotFoundError as exc:
            raise RepositoryUnavailableError("git executable not found") from exc

        deadline = time.monotonic() + self.timeout
        while True:
            try:
                out, err = proc.communicate(timeout=_POLL_INTERVAL)
                break
            except subprocess.TimeoutExpired:
                if cancel is not None and cancel.is_set():
                    proc.kill()
                    proc.communicate()
                    raise ScanCancelledError("cancelled: git " + safe_args[0])
                if time.monotonic() > deadline:
                    proc.kill()
                    proc.communicate()
                    raise RepositoryUnavailableError(
                        f"git {safe_args[0]} timed out after {self.timeout}s"
                    )

        if proc.returncode != 0:
            message = (err or out or "").strip()
            if secret:
                message = message.replace(secret, "***")
            raise RepositoryUnavailableError(f"git {safe_args[0]} failed: {message}")
        return out


class VcsBackend:
    """Lists chart versions from git tags."""

    def __init__(self, credentials: CredentialStore, runner: GitRunner | None = None):
        self.credentials = credentials
        self.runner = runner or GitRunner()

    def _clone_url(self, repository_ref: str) -> tuple[str, str]:
        creds = self.credentials.get_credentials(repository_ref)
        return with_basic_auth(repository_ref, creds), creds.password if creds else ""

    def list_tags(self, repository_ref: str, cancel: threading.Event | None = None) -> list[str]:
        url, secret = self._clone_url(repository_ref)
        with tempfile.TemporaryDirectory(prefix="argazer-git-") as tmp:
            dest = os.path.join(tmp, "repo")
            self.runner.run(
                ["clone", "--quiet", "--bare", "--filter=blob:none", url, dest],
                cancel=cancel,
                secret=secret,
            )
            out = self.runner.run(["tag", "--list"], cwd=dest, cancel=cancel)
        return [line.strip() for line in out.splitlines() if line.strip()]

    def list_versions(
        self,
        repository_ref: str,
        package_name: str,
        cancel: threading.Event | None = None,
    ) -> list[str]:
        """``package_name`` is the chart path inside the repository (may be empty)."""
        tags = self.list_tags(repository_ref, cancel=cancel)

        versions = []
        for tag in tags:
            version = normalize_tag(tag, package_name)
            if version is None:
                logger.debug("Skipping non-semver tag %s", tag)
                continue
            versions.append(version)

        if not versions:
            raise NoValidVersionsError("no valid semantic version tags found in repository")

        logger.debug("Found %d version tags in %s", len(versions), redact_url(repository_ref))
        return versions

    def read_chart_version(
        self,
        repository_ref: str,
        chart_path: str,
        cancel: threading.Event | None = None,
    ) -> str:
        """Read ``version`` from <chart_path>/Chart.yaml at HEAD (shallow clone)."""
        url, secret = self._clone_url(repository_ref)
        with tempfile.TemporaryDirectory(prefix="argazer-git-") as tmp:
            root = Path(tmp) / "repo"
            self.runner.run(
                ["clone", "--quiet", "--depth", "1", url, str(root)],
                cancel=cancel,
                secret=secret,
            )
            chart_yaml = (root / chart_path / "Chart.yaml").resolve()
            if root.resolve() not in chart_yaml.parents or not chart_yaml.is_file():
                raise ChartNotFoundError(f"Chart.yaml not found at {chart_path or '.'}")
            try:
                data = yaml.safe_load(chart_yaml.read_text(encoding="utf-8")) or {}
            except yaml.YAMLError as exc:
                raise RepositoryUnavailableError(f"failed to parse Chart.yaml: {exc}") from exc

        version = str(data.get("version", "") or "") if isinstance(data, dict) else ""
        if not version:
            raise NoValidVersionsError("no version found in Chart.yaml")
        logger.debug("Chart.yaml in %s declares version %s", redact_url(repository_ref), version)
        return version
