"""Error kinds raised while resolving chart versions and running scans."""

from __future__ import annotations

import enum


class ErrorKind(enum.Enum):
    CHART_NOT_FOUND = "chart-not-found"
    AUTHENTICATION_FAILED = "authentication-failed"
    NO_VALID_VERSIONS = "no-valid-versions"
    EMPTY_INPUT = "empty-input"
    REPOSITORY_UNAVAILABLE = "repository-unavailable"
    NOT_A_HELM_REPOSITORY = "not-a-helm-repository"
    CANCELLED = "cancelled"
    CONFIGURATION = "configuration"
    CONTROL_PLANE = "control-plane"
    NOTIFICATION = "notification"


class ArgazerError(Exception):
    """Base class; ``kind`` identifies the failure category."""

    kind: ErrorKind = ErrorKind.REPOSITORY_UNAVAILABLE

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind.value.replace("-", " "))


class ChartNotFoundError(ArgazerError):
    kind = ErrorKind.CHART_NOT_FOUND


class AuthenticationFailedError(ArgazerError):
    kind = ErrorKind.AUTHENTICATION_FAILED


class NoValidVersionsError(ArgazerError):
    kind = ErrorKind.NO_VALID_VERSIONS


class EmptyInputError(ArgazerError):
    kind = ErrorKind.EMPTY_INPUT


class RepositoryUnavailableError(ArgazerError):
    kind = ErrorKind.REPOSITORY_UNAVAILABLE


class NotAHelmRepositoryError(ArgazerError):
    kind = ErrorKind.NOT_A_HELM_REPOSITORY


class ScanCancelledError(ArgazerError):
    kind = ErrorKind.CANCELLED


class ConfigError(ArgazerError):
    kind = ErrorKind.CONFIGURATION


class ControlPlaneError(ArgazerError):
    kind = ErrorKind.CONTROL_PLANE


class NotificationError(ArgazerError):
    kind = ErrorKind.NOTIFICATION
