"""Argo CD application listing over the REST API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import requests
import urllib3

from argazer.core.backends import REQUEST_TIMEOUT, new_session
from argazer.core.errors import ControlPlaneError
from argazer.models.application import Application

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterOptions:
    projects: list[str] = field(default_factory=lambda: ["*"])
    app_names: list[str] = field(default_factory=lambda: ["*"])
    labels: dict[str, str] = field(default_factory=dict)

    @property
    def all_projects(self) -> bool:
        return not self.projects or "*" in self.projects

    @property
    def all_names(self) -> bool:
        return not self.app_names or "*" in self.app_names

    @property
    def label_selector(self) -> str:
        return ",".join(f"{k}={v}" for k, v in sorted(self.labels.items()))

    def matches(self, app: Application) -> bool:
        """Client-side equivalent of the server-side filters."""
        if not self.all_projects and app.project not in self.projects:
            return False
        if not self.all_names and app.name not in self.app_names:
            return False
        return all(app.labels.get(k) == v for k, v in self.labels.items())


class ArgoCDClient:
    """Thin wrapper around the Argo CD server API (session login + application list)."""

    def __init__(
        self,
        server_url: str,
        username: str,
        password: str,
        insecure: bool = False,
        session: requests.Session | None = None,
    ):
        if not server_url.startswith(("http://", "https://")):
            server_url = "https://" + server_url
        self.server_url = server_url.rstrip("/")
        self.username = username
        self.password = password
        self.session = session or new_session()
        if insecure:
            self.session.verify = False
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        self._token: str | None = None

    def _login(self) -> str:
        if self._token:
            return self._token
        logger.info("Authenticating to Argo CD at %s as %s", self.server_url, self.username)
        try:
            response = self.session.post(
                f"{self.server_url}/api/v1/session",
                json={"username": self.username, "password": self.password},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as exc:
            raise ControlPlaneError(f"failed to reach Argo CD: {exc}") from exc
        if response.status_code in (401, 403):
            raise ControlPlaneError("failed to authenticate with Argo CD: invalid credentials")
        if not response.ok:
            raise ControlPlaneError(f"failed to authenticate with Argo CD: status {response.status_code}")
        token = (response.json() or {}).get("token")
        if not token:
            raise ControlPlaneError("Argo CD session response did not contain a token")
        self._token = token
        return token

    def list_applications(self, filters: FilterOptions | None = None) -> list[Application]:
        filters = filters or FilterOptions()
        token = self._login()

        params: dict[str, object] = {}
        if not filters.all_projects:
            params["projects"] = list(filters.projects)
        if not filters.all_names and len(filters.app_names) == 1:
            params["name"] = filters.app_names[0]
        if filters.labels:
            params["selector"] = filters.label_selector

        logger.debug("Listing Argo CD applications with %s", params)
        try:
            response = self.session.get(
                f"{self.server_url}/api/v1/applications",
                params=params,
                headers={"Authorization": f"Bearer {token}"},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as exc:
            raise ControlPlaneError(f"failed to list applications: {exc}") from exc
        if not response.ok:
            raise ControlPlaneError(f"failed to list applications: status {response.status_code}")

        items = (response.json() or {}).get("items") or []
        apps = [Application.from_dict(item) for item in items]
        # multiple names cannot be expressed in one query
        if not filters.all_names and len(filters.app_names) > 1:
            apps = [a for a in apps if a.name in filters.app_names]

        logger.info("Found %d applications", len(apps))
        return apps
