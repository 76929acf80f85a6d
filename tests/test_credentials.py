"""Tests for host normalization and the credential store."""
from __future__ import annotations

import pytest

from argazer.core.credentials import CredentialStore, RepositoryAuth, normalize_host


class TestNormalizeHost:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://charts.example.com", "charts.example.com"),
            ("http://charts.example.com:8080/path", "charts.example.com"),
            ("oci://ghcr.io/org/charts", "ghcr.io"),
            ("ghcr.io/org/charts", "ghcr.io"),
            ("git@github.com:org/repo.git", "github.com"),
            ("ssh://git@gitlab.com/org/repo", "gitlab.com"),
            ("https://user@Registry.Example.com/x", "registry.example.com"),
            ("http://[::1]:5000/charts", "::1"),
        ],
    )
    def test_normalize(self, url, expected):
        assert normalize_host(url) == expected


class TestCredentialStore:
    def test_config_entries(self):
        store = CredentialStore.from_sources(
            [RepositoryAuth("https://charts.example.com", "alice", "s3cret")], environ={}
        )
        creds = store.get_credentials("https://charts.example.com/stable")
        assert creds.username == "alice"
        assert creds.password == "s3cret"
        assert creds.source == "config"
        assert store.get_credentials("https://other.example.com") is None

    def test_env_groups(self):
        environ = {
            "AG_AUTH_URL_GHCR": "ghcr.io",
            "AG_AUTH_USER_GHCR": "bot",
            "AG_AUTH_PASS_GHCR": "token",
            "UNRELATED": "x",
        }
        store = CredentialStore.from_sources([], environ=environ)
        creds = store.get_credentials("oci://ghcr.io/org/charts")
        assert creds.username == "bot"
        assert creds.source == "env:GHCR"
        assert len(store) == 1

    def test_env_overrides_config(self):
        environ = {
            "AG_AUTH_URL_1": "https://charts.example.com",
            "AG_AUTH_USER_1": "env-user",
            "AG_AUTH_PASS_1": "env-pass",
        }
        store = CredentialStore.from_sources(
            [RepositoryAuth("charts.example.com", "cfg-user", "cfg-pass")], environ=environ
        )
        assert store.get_credentials("charts.example.com").username == "env-user"

    def test_incomplete_entries_skipped(self):
        environ = {"AG_AUTH_URL_X": "ghcr.io", "AG_AUTH_USER_X": "bot"}
        store = CredentialStore.from_sources(
            [RepositoryAuth("charts.example.com", "alice", "")], environ=environ
        )
        assert len(store) == 0

    def test_repr_masks_password(self):
        store = CredentialStore.from_sources(
            [RepositoryAuth("charts.example.com", "alice", "s3cret")], environ={}
        )
        assert "s3cret" not in repr(store.get_credentials("charts.example.com"))

    def test_store_is_read_only(self):
        store = CredentialStore.from_sources([], environ={})
        with pytest.raises(TypeError):
            store._credentials["x"] = None
