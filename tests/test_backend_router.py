"""Tests for repository reference classification and backend dispatch."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from argazer.core.backend_router import BackendRouter, resolve_backend_kind
from argazer.core.credentials import CredentialStore
from argazer.core.index_backend import IndexBackend
from argazer.core.registry_backend import RegistryBackend
from argazer.core.vcs_backend import VcsBackend
from argazer.models import BackendKind


class TestResolveBackendKind:
    @pytest.mark.parametrize(
        "ref",
        [
            "https://charts.bitnami.com/bitnami",
            "https://prometheus-community.github.io/helm-charts",
            "http://charts.internal:8080",
        ],
    )
    def test_index(self, ref):
        assert resolve_backend_kind(ref) is BackendKind.INDEX

    @pytest.mark.parametrize(
        "ref",
        [
            "ghcr.io/myorg/charts",
            "registry-1.docker.io/bitnamicharts",
            "oci://harbor.company.com/helm",
            "localhost:5000/charts",
        ],
    )
    def test_registry(self, ref):
        assert resolve_backend_kind(ref) is BackendKind.REGISTRY_API

    @pytest.mark.parametrize(
        "ref",
        [
            "https://github.com/org/charts",
            "https://gitlab.com/org/charts",
            "https://bitbucket.org/org/charts",
            "https://gitea.example.com/org/charts",
            "https://git.example.com/org/charts.git",
            "git@github.com:org/charts.git",
            "ssh://git@git.example.com/org/charts",
        ],
    )
    def test_vcs(self, ref):
        assert resolve_backend_kind(ref) is BackendKind.VCS

    def test_github_pages_index_is_not_vcs(self):
        # *.github.io does not contain "github.com"
        assert resolve_backend_kind("https://org.github.io/charts") is BackendKind.INDEX


class TestBackendRouter:
    def test_dispatch_reuses_backends(self):
        router = BackendRouter(CredentialStore(), session=MagicMock())

        kind, backend = router.backend_for("https://charts.example.com")
        assert kind is BackendKind.INDEX
        assert isinstance(backend, IndexBackend)

        kind, backend = router.backend_for("ghcr.io/org/charts")
        assert kind is BackendKind.REGISTRY_API
        assert isinstance(backend, RegistryBackend)

        kind, backend = router.backend_for("https://github.com/org/charts.git")
        assert kind is BackendKind.VCS
        assert isinstance(backend, VcsBackend)
        assert backend is router.vcs

        assert router.backend_for("https://a.example.com")[1] is router.backend_for("https://b.example.com")[1]
