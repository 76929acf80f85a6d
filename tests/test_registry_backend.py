"""Tests for the OCI registry tag list backend."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from argazer.core.credentials import CredentialStore, RepositoryAuth
from argazer.core.errors import (
    AuthenticationFailedError,
    ChartNotFoundError,
    NoValidVersionsError,
    RepositoryUnavailableError,
)
from argazer.core.registry_backend import (
    RegistryBackend,
    filter_tags,
    is_loopback,
    parse_registry_reference,
    tags_url_for,
)
from argazer.utils.version_compare import select_latest


def _response(status=200, tags=None):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = {"name": "x", "tags": tags}
    return resp


def _backend(response, store=None):
    session = MagicMock()
    session.get.return_value = response
    return RegistryBackend(store or CredentialStore(), session=session), session


class TestHelpers:
    @pytest.mark.parametrize(
        "ref,expected",
        [
            ("ghcr.io/myorg/charts", ("ghcr.io", "myorg/charts")),
            ("oci://harbor.company.com/helm/", ("harbor.company.com", "helm")),
            ("registry.example.com", ("registry.example.com", "")),
            ("localhost:5000/charts", ("localhost:5000", "charts")),
        ],
    )
    def test_parse_reference(self, ref, expected):
        assert parse_registry_reference(ref) == expected

    @pytest.mark.parametrize(
        "host,expected",
        [("localhost:5000", True), ("127.0.0.1", True), ("127.1.2.3:5000", True), ("ghcr.io", False)],
    )
    def test_is_loopback(self, host, expected):
        assert is_loopback(host) is expected

    def test_tags_url_scheme(self):
        assert tags_url_for("ghcr.io", "org/nginx") == "https://ghcr.io/v2/org/nginx/tags/list"
        assert tags_url_for("localhost:5000", "nginx") == "http://localhost:5000/v2/nginx/tags/list"

    def test_filter_tags(self):
        assert filter_tags(["1.0.0", "latest", "main", "", "stable", "1.1.0"]) == ["1.0.0", "1.1.0"]


class TestRegistryBackend:
    def test_excluded_tags_removed_before_selection(self):
        backend, session = _backend(_response(tags=["1.21.0", "1.20.0", "latest", "dev"]))
        versions = backend.list_versions("ghcr.io/myorg/charts", "nginx")
        assert versions == ["1.21.0", "1.20.0"]
        assert select_latest(versions) == "1.21.0"
        assert session.get.call_args[0][0] == "https://ghcr.io/v2/myorg/charts/nginx/tags/list"

    def test_no_prefix(self):
        backend, session = _backend(_response(tags=["1.0.0"]))
        backend.list_versions("registry.example.com", "nginx")
        assert session.get.call_args[0][0] == "https://registry.example.com/v2/nginx/tags/list"

    def test_auth_required_without_credentials(self):
        backend, _ = _backend(_response(status=401))
        with pytest.raises(AuthenticationFailedError, match="No credentials found"):
            backend.list_versions("ghcr.io/org", "nginx")

    def test_auth_rejected_with_credentials(self):
        store = CredentialStore.from_sources([RepositoryAuth("ghcr.io", "bot", "bad")], environ={})
        backend, session = _backend(_response(status=403), store)
        with pytest.raises(AuthenticationFailedError, match="Check credentials"):
            backend.list_versions("ghcr.io/org", "nginx")
        assert session.get.call_args[1]["auth"] == ("bot", "bad")

    def test_not_found(self):
        backend, _ = _backend(_response(status=404))
        with pytest.raises(ChartNotFoundError):
            backend.list_versions("ghcr.io/org", "nginx")

    def test_server_error(self):
        backend, _ = _backend(_response(status=502))
        with pytest.raises(RepositoryUnavailableError):
            backend.list_versions("ghcr.io/org", "nginx")

    def test_only_excluded_tags(self):
        backend, _ = _backend(_response(tags=["latest", "main"]))
        with pytest.raises(NoValidVersionsError):
            backend.list_versions("ghcr.io/org", "nginx")

    def test_null_tags(self):
        backend, _ = _backend(_response(tags=None))
        with pytest.raises(NoValidVersionsError):
            backend.list_versions("ghcr.io/org", "nginx")
