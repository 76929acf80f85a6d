"""Repository and registry credentials, keyed by normalized host."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

logger = logging.getLogger(__name__)

ENV_PREFIX = "AG_AUTH_"

_SCHEMES = ("https://", "http://", "oci://", "ssh://", "git://")


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str
    source: str = ""

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***', source={self.source!r})"


@dataclass(frozen=True)
class RepositoryAuth:
    url: str = ""
    username: str = ""
    password: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> RepositoryAuth:
        return cls(
            url=str(d.get("url", "") or ""),
            username=str(d.get("username", "") or ""),
            password=str(d.get("password", "") or ""),
        )


def normalize_host(repo_url: str) -> str:
    """Reduce a repository reference to its bare host name.

    "https://charts.example.com" -> "charts.example.com"
    "ghcr.io/myorg/charts"       -> "ghcr.io"
    "git@github.com:org/x.git"   -> "github.com"
    """
    ref = repo_url.strip()
    lower = ref.lower()
    for scheme in _SCHEMES:
        if lower.startswith(scheme):
            ref = ref[len(scheme):]
            break

    host = ref.split("/", 1)[0]
    if "@" in host:
        host = host.rsplit("@", 1)[1]
    if host.startswith("["):
        # bracketed IPv6 literal
        return host[1:].split("]", 1)[0].lower()
    return host.split(":", 1)[0].lower()


class CredentialStore:
    """Immutable host -> credentials lookup.

    Built once from config file entries and ``AG_AUTH_*`` environment
    groups; environment entries win over config entries for the same host.
    """

    def __init__(self, credentials: Mapping[str, Credentials] | None = None):
        self._credentials: Mapping[str, Credentials] = MappingProxyType(dict(credentials or {}))

    @classmethod
    def from_sources(
        cls,
        config_auth: Iterable[RepositoryAuth] = (),
        environ: Mapping[str, str] | None = None,
    ) -> CredentialStore:
        merged: dict[str, Credentials] = {}
        merged.update(_load_config_auth(config_auth))
        merged.update(_load_env_auth(os.environ if environ is None else environ))
        logger.debug("Loaded authentication credentials for %d host(s)", len(merged))
        return cls(merged)

    def get_credentials(self, repo_url: str) -> Credentials | None:
        normalized = normalize_host(repo_url)
        creds = self._credentials.get(normalized)
        if creds is None:
            logger.debug("No credentials for %s, will try anonymous access", normalized)
        else:
            logger.debug("Found credentials for %s (source: %s)", normalized, creds.source)
        return creds

    def __len__(self) -> int:
        return len(self._credentials)


def _load_config_auth(config_auth: Iterable[RepositoryAuth]) -> dict[str, Credentials]:
    result: dict[str, Credentials] = {}
    for auth in config_auth:
        if not auth.url or not auth.username or not auth.password:
            logger.warning("Incomplete repository_auth entry for %r, skipping", auth.url)
            continue
        result[normalize_host(auth.url)] = Credentials(auth.username, auth.password, "config")
    return result


def _load_env_auth(environ: Mapping[str, str]) -> dict[str, Credentials]:
    """Collect ``AG_AUTH_{URL,USER,PASS}_<ID>`` groups."""
    groups: dict[str, dict[str, str]] = {}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        parts = key.split("_", 3)  # AG, AUTH, TYPE, ID
        if len(parts) != 4 or not parts[3]:
            continue
        groups.setdefault(parts[3], {})[parts[2]] = value

    result: dict[str, Credentials] = {}
    for group_id in sorted(groups):
        group = groups[group_id]
        url, user, password = group.get("URL"), group.get("USER"), group.get("PASS")
        if not url or not user or not password:
            logger.warning(
                "Incomplete auth group %s in environment (url=%s user=%s pass=%s)",
                group_id, bool(url), bool(user), bool(password),
            )
            continue
        result[normalize_host(url)] = Credentials(user, password, f"env:{group_id}")
    return result
