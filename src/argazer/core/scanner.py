"""Check Argo CD applications for chart updates with a bounded worker pool."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable

import requests

from argazer.core.backend_router import resolve_backend_kind
from argazer.core.chart_checker import ChartChecker
from argazer.core.errors import ArgazerError
from argazer.models import BackendKind, VersionConstraint
from argazer.models.application import Application, ApplicationSource
from argazer.models.result import (
    ApplicationCheckResult,
    CategorizedResults,
    ChartSource,
    ScanStatistics,
)
from argazer.utils.version_compare import parse_version

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 10

ProgressCallback = Callable[[int, int, str], None]


def find_chart_source(app: Application, source_name: str = "") -> ApplicationSource | None:
    """Pick the source that carries the Helm chart, or None for non-Helm apps."""
    if not app.multi_source:
        if app.sources and app.sources[0].is_chart_bearing:
            return app.sources[0]
        return None

    if source_name:
        for source in app.sources:
            if source.name == source_name and source.is_chart_bearing:
                logger.debug("%s: using Helm source %r (matched by name)", app.name, source.name)
                return source

    for source in app.sources:
        if source.is_chart_bearing:
            logger.debug("%s: using Helm source %r (fallback)", app.name, source.name)
            return source
    return None


def chart_source_for(source: ApplicationSource) -> ChartSource:
    # git-hosted charts have no chart name, the path identifies them
    return ChartSource(
        repository_url=source.repo_url,
        package_name=source.chart or source.path,
        pinned_version=source.target_revision,
    )


def check_application(
    app: Application,
    checker: ChartChecker,
    constraint: VersionConstraint = VersionConstraint.MAJOR,
    source_name: str = "",
    cancel: threading.Event | None = None,
) -> ApplicationCheckResult:
    """Resolve one application; backend failures end up in ``error``."""
    source = find_chart_source(app, source_name)
    if source is None:
        logger.info("%s: application does not use Helm charts, skipping", app.name)
        return ApplicationCheckResult.empty()

    chart = chart_source_for(source)
    base = dict(
        app_name=app.name,
        project=app.project,
        chart_name=chart.package_name,
        current_version=chart.pinned_version,
        repo_url=chart.repository_url,
        constraint_applied=constraint.value,
    )
    logger.info(
        "%s: checking chart %s %s from %s",
        app.name, chart.package_name, chart.pinned_version, chart.repository_url,
    )

    try:
        current = chart.pinned_version
        if (
            parse_version(current) is None
            and resolve_backend_kind(chart.repository_url) is BackendKind.VCS
        ):
            # branch-tracking git source, compare against the committed Chart.yaml
            current = checker.get_declared_version(chart.repository_url, source.path, cancel=cancel)
            base["current_version"] = current
        resolved = checker.get_latest_version_with_constraint(
            chart.repository_url,
            chart.package_name,
            current,
            constraint,
            cancel=cancel,
        )
    except (ArgazerError, requests.RequestException, OSError) as exc:
        logger.error("%s: failed to check Helm version: %s", app.name, exc)
        return ApplicationCheckResult(**base, error=str(exc))

    has_update = resolved.latest_within_constraint != current
    if has_update:
        logger.warning(
            "%s: update available %s -> %s",
            app.name, current, resolved.latest_within_constraint,
        )
    elif resolved.has_update_outside_constraint:
        logger.info(
            "%s: up to date within %s constraint, %s available outside it",
            app.name, constraint.value, resolved.latest_unconstrained,
        )
    else:
        logger.info("%s: up to date", app.name)

    return ApplicationCheckResult(
        **base,
        latest_version=resolved.latest_within_constraint,
        has_update=has_update,
        has_update_outside_constraint=resolved.has_update_outside_constraint,
        latest_version_all=resolved.latest_unconstrained,
    )


def scan_applications(
    apps: list[Application],
    checker: ChartChecker,
    concurrency: int = DEFAULT_CONCURRENCY,
    constraint: VersionConstraint = VersionConstraint.MAJOR,
    source_name: str = "",
    cancel: threading.Event | None = None,
    on_progress: ProgressCallback | None = None,
) -> list[ApplicationCheckResult]:
    """Check all applications in parallel.

    Results come back in completion order, not input order.
    """
    if not apps:
        return []

    workers = concurrency if concurrency > 0 else DEFAULT_CONCURRENCY
    logger.debug("Checking %d applications with %d workers", len(apps), workers)

    results: list[ApplicationCheckResult] = []
    total = len(apps)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="argazer-worker") as pool:
        futures = {
            pool.submit(check_application, app, checker, constraint, source_name, cancel): app
            for app in apps
        }
        for done, future in enumerate(as_completed(futures), 1):
            app = futures[future]
            try:
                result = future.result()
            except Exception as exc:
                logger.exception("%s: unexpected failure while checking", app.name)
                result = ApplicationCheckResult(
                    app_name=app.name,
                    project=app.project,
                    constraint_applied=constraint.value,
                    error=f"internal error: {exc}",
                )
            results.append(result)
            if on_progress:
                on_progress(done, total, app.name)

    return results


def categorize_results(results: list[ApplicationCheckResult]) -> CategorizedResults:
    """Split results into buckets; placeholder results are ignored."""
    cat = CategorizedResults()
    for result in results:
        if result.is_sentinel:
            continue
        if result.error:
            cat.errors.append(result)
        elif result.has_update:
            cat.updates_available.append(result)
        elif result.has_update_outside_constraint:
            cat.up_to_date_with_constraint.append(result)
        else:
            cat.up_to_date.append(result)

    up_to_date = len(cat.up_to_date) + len(cat.up_to_date_with_constraint)
    cat.stats = ScanStatistics(
        total=up_to_date + len(cat.updates_available) + len(cat.errors),
        up_to_date=up_to_date,
        updates_available=len(cat.updates_available),
        skipped=len(cat.errors),
    )
    return cat
