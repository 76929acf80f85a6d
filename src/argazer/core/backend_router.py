"""Decide which backend serves a repository reference."""

from __future__ import annotations

import logging

import requests

from argazer.core.backends import RepositoryBackend, new_session
from argazer.core.credentials import CredentialStore
from argazer.core.index_backend import IndexBackend
from argazer.core.registry_backend import RegistryBackend
from argazer.core.vcs_backend import GitRunner, VcsBackend
from argazer.models import BackendKind

logger = logging.getLogger(__name__)

# Hosted git platforms recognised for http(s) references. Self-hosted git
# servers under other domains need an explicit ".git" suffix.
GIT_HOSTS: tuple[str, ...] = ("github.com", "gitlab.com", "bitbucket.org", "gitea")


def resolve_backend_kind(repo_url: str) -> BackendKind:
    lower = repo_url.strip().lower()
    is_http = lower.startswith(("http://", "https://"))

    if lower.rstrip("/").endswith(".git") or lower.startswith(("git@", "ssh://")):
        return BackendKind.VCS
    if not is_http:
        return BackendKind.REGISTRY_API
    if any(host in lower for host in GIT_HOSTS):
        return BackendKind.VCS
    return BackendKind.INDEX


class BackendRouter:
    """Holds one backend per kind and hands out the right one for a reference."""

    def __init__(
        self,
        credentials: CredentialStore,
        session: requests.Session | None = None,
        git_runner: GitRunner | None = None,
    ):
        session = session or new_session()
        self.credentials = credentials
        self.vcs = VcsBackend(credentials, runner=git_runner)
        self._backends: dict[BackendKind, RepositoryBackend] = {
            BackendKind.INDEX: IndexBackend(credentials, session=session),
            BackendKind.REGISTRY_API: RegistryBackend(credentials, session=session),
            BackendKind.VCS: self.vcs,
        }

    def backend_for(self, repo_url: str) -> tuple[BackendKind, RepositoryBackend]:
        kind = resolve_backend_kind(repo_url)
        logger.debug("Repository %s handled by %s backend", repo_url, kind.value)
        return kind, self._backends[kind]
