"""Shared contract and HTTP helpers for chart repository backends."""

from __future__ import annotations

import logging
import threading
from typing import Protocol

import requests

from argazer.core.errors import RepositoryUnavailableError, ScanCancelledError

logger = logging.getLogger(__name__)

USER_AGENT = "argazer/1.0"
REQUEST_TIMEOUT = 30


class RepositoryBackend(Protocol):
    def list_versions(
        self,
        repository_ref: str,
        package_name: str,
        cancel: threading.Event | None = None,
    ) -> list[str]:
        """Return candidate version strings for ``package_name``."""
        ...


def check_cancelled(cancel: threading.Event | None, what: str = "") -> None:
    if cancel is not None and cancel.is_set():
        raise ScanCancelledError(f"cancelled{': ' + what if what else ''}")


def new_session() -> requests.Session:
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    return session


def http_get(
    session: requests.Session,
    url: str,
    *,
    context: str,
    cancel: threading.Event | None = None,
    **kwargs,
) -> requests.Response:
    """GET with cancellation checks around the call and uniform error mapping."""
    check_cancelled(cancel, context)
    logger.debug("%s: GET %s", context, url)
    kwargs.setdefault("timeout", REQUEST_TIMEOUT)
    try:
        response = session.get(url, **kwargs)
    except requests.Timeout as exc:
        raise RepositoryUnavailableError(
            f"{context}: request timed out after {kwargs['timeout']}s"
        ) from exc
    except requests.RequestException as exc:
        raise RepositoryUnavailableError(f"{context}: {exc}") from exc
    check_cancelled(cancel, context)
    logger.debug("%s: HTTP %s from %s", context, response.status_code, url)
    return response
