"""Argo CD application models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ApplicationSource:
    name: str = ""
    repo_url: str = ""
    chart: str = ""
    path: str = ""
    target_revision: str = ""
    helm: dict | None = None

    @property
    def is_chart_bearing(self) -> bool:
        """True for sources that reference a Helm chart rather than plain manifests."""
        return bool(self.chart) or self.helm is not None

    @classmethod
    def from_dict(cls, d: dict) -> ApplicationSource:
        if not d:
            return cls()
        return cls(
            name=d.get("name", "") or "",
            repo_url=d.get("repoURL", "") or "",
            chart=d.get("chart", "") or "",
            path=d.get("path", "") or "",
            target_revision=d.get("targetRevision", "") or "",
            helm=d.get("helm"),
        )


@dataclass(frozen=True)
class Application:
    name: str = ""
    project: str = ""
    sources: list[ApplicationSource] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)
    multi_source: bool = False

    @classmethod
    def from_dict(cls, d: dict) -> Application:
        """Build from an Argo CD Application object (REST or custom resource)."""
        metadata = d.get("metadata", {}) or {}
        spec = d.get("spec", {}) or {}

        multi = spec.get("sources")
        if multi:
            sources = [ApplicationSource.from_dict(s) for s in multi]
        elif spec.get("source"):
            sources = [ApplicationSource.from_dict(spec["source"])]
        else:
            sources = []

        return cls(
            name=metadata.get("name", ""),
            project=spec.get("project", ""),
            sources=sources,
            labels=dict(metadata.get("labels", {}) or {}),
            multi_source=bool(multi),
        )
