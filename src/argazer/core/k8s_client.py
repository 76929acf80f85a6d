"""Kubernetes API wrapper for reading Argo CD Application resources."""

from __future__ import annotations

import logging

from kubernetes import client, config
from kubernetes.client import ApiException

from argazer.core.argocd_client import FilterOptions
from argazer.core.errors import ControlPlaneError
from argazer.models.application import Application

logger = logging.getLogger(__name__)

ARGOCD_GROUP = "argoproj.io"
ARGOCD_VERSION = "v1alpha1"
ARGOCD_PLURAL = "applications"


class K8sClient:
    """Thin wrapper around the Kubernetes Python client."""

    def __init__(self, context: str | None = None):
        self.context = context
        self._custom: client.CustomObjectsApi | None = None
        self._api_client: client.ApiClient | None = None

    def _load_config(self) -> client.ApiClient:
        if self._api_client is not None:
            return self._api_client
        try:
            cfg = client.Configuration()
            config.load_kube_config(
                context=self.context,
                client_configuration=cfg,
            )
            # Prevent indefinite hangs on unreachable clusters
            cfg.retries = 1
            self._api_client = client.ApiClient(configuration=cfg)
        except config.ConfigException:
            config.load_incluster_config()
            self._api_client = client.ApiClient()
        return self._api_client

    @property
    def custom(self) -> client.CustomObjectsApi:
        if self._custom is None:
            self._custom = client.CustomObjectsApi(api_client=self._load_config())
        return self._custom

    def list_custom_resources(
        self,
        group: str,
        version: str,
        plural: str,
        namespace: str | None = None,
        label_selector: str = "",
    ) -> list[dict]:
        kwargs = {"_request_timeout": 30}
        if label_selector:
            kwargs["label_selector"] = label_selector
        if namespace:
            result = self.custom.list_namespaced_custom_object(
                group=group, version=version, namespace=namespace, plural=plural, **kwargs,
            )
        else:
            result = self.custom.list_cluster_custom_object(
                group=group, version=version, plural=plural, **kwargs,
            )
        return result.get("items", [])


class KubernetesApplicationLister:
    """Lists Argo CD Applications straight from the cluster's custom resources."""

    def __init__(self, k8s: K8sClient, namespace: str | None = None):
        self.k8s = k8s
        self.namespace = namespace

    def list_applications(self, filters: FilterOptions | None = None) -> list[Application]:
        filters = filters or FilterOptions()
        try:
            items = self.k8s.list_custom_resources(
                group=ARGOCD_GROUP,
                version=ARGOCD_VERSION,
                plural=ARGOCD_PLURAL,
                namespace=self.namespace,
                label_selector=filters.label_selector,
            )
        except ApiException as e:
            raise ControlPlaneError(f"failed to list Argo CD applications: {e.status} {e.reason}") from e
        except config.ConfigException as e:
            raise ControlPlaneError(f"no usable Kubernetes configuration: {e}") from e

        apps = [Application.from_dict(item) for item in items]
        apps = [a for a in apps if filters.matches(a)]
        logger.info("Found %d applications", len(apps))
        return apps
