"""OCI registries queried through the Docker Registry v2 tag list API."""

from __future__ import annotations

import ipaddress
import logging
import threading

import requests

from argazer.core.backends import http_get, new_session
from argazer.core.credentials import CredentialStore, normalize_host
from argazer.core.errors import (
    AuthenticationFailedError,
    ChartNotFoundError,
    NoValidVersionsError,
    RepositoryUnavailableError,
)

logger = logging.getLogger(__name__)

EXCLUDED_TAGS: frozenset[str] = frozenset({"latest", "dev", "main", "master", "stable"})


def parse_registry_reference(repo_url: str) -> tuple[str, str]:
    """Split a registry reference into (host, path prefix).

    "ghcr.io/myorg/charts"     -> ("ghcr.io", "myorg/charts")
    "harbor.company.com/helm"  -> ("harbor.company.com", "helm")
    "registry.example.com"     -> ("registry.example.com", "")
    """
    ref = repo_url.strip()
    if ref.startswith("oci://"):
        ref = ref[len("oci://"):]
    ref = ref.strip("/")
    host, _, path = ref.partition("/")
    return host, path


def is_loopback(host: str) -> bool:
    name = normalize_host(host)
    if name == "localhost":
        return True
    try:
        return ipaddress.ip_address(name).is_loopback
    except ValueError:
        return False


def tags_url_for(host: str, repository: str) -> str:
    scheme = "http" if is_loopback(host) else "https"
    return f"{scheme}://{host}/v2/{repository}/tags/list"


def filter_tags(tags: list[str]) -> list[str]:
    return [t for t in tags if t and t not in EXCLUDED_TAGS]


class RegistryBackend:
    """Lists chart versions stored as tags in an OCI registry."""

    def __init__(self, credentials: CredentialStore, session: requests.Session | None = None):
        self.credentials = credentials
        self.session = session or new_session()

    def list_versions(
        self,
        repository_ref: str,
        package_name: str,
        cancel: threading.Event | None = None,
    ) -> list[str]:
        host, prefix = parse_registry_reference(repository_ref)
        repository = f"{prefix}/{package_name}" if prefix else package_name
        url = tags_url_for(host, repository)

        creds = self.credentials.get_credentials(host)
        auth = None
        if creds:
            auth = (creds.username, creds.password)
            logger.debug("Using %s credentials for registry %s", creds.source, host)

        response = http_get(
            self.session,
            url,
            context="oci registry",
            cancel=cancel,
            headers={"Accept": "application/json"},
            auth=auth,
        )

        status = response.status_code
        if status in (401, 403):
            if creds:
                raise AuthenticationFailedError(
                    f"OCI registry authentication failed (status {status}). "
                    f"Check credentials for {host}"
                )
            raise AuthenticationFailedError(
                f"OCI registry requires authentication (status {status}). "
                f"No credentials found for {host}. Add a repository_auth entry "
                f"or set AG_AUTH_URL_<ID>/AG_AUTH_USER_<ID>/AG_AUTH_PASS_<ID>"
            )
        if status == 404:
            raise ChartNotFoundError(f"chart {repository} not found in registry {host}")
        if status != 200:
            raise RepositoryUnavailableError(f"OCI registry returned status {status}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise RepositoryUnavailableError(f"failed to parse tags response: {exc}") from exc

        tags = (payload or {}).get("tags") or []
        logger.debug("Retrieved %d tags for %s from %s", len(tags), repository, host)

        versions = filter_tags([str(t) for t in tags])
        if not versions:
            raise NoValidVersionsError(f"no version tags found for chart {package_name} in OCI registry")
        return versions
