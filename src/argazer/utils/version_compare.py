"""Semver parsing, comparison and latest-version selection."""

from __future__ import annotations

import logging
from functools import cmp_to_key

import semver

from argazer.core.errors import EmptyInputError, NoValidVersionsError
from argazer.models import VersionConstraint
from argazer.models.result import ConstraintResult, VersionCandidate

logger = logging.getLogger(__name__)


def parse_version(v: str) -> semver.Version | None:
    """Parse a version string, returning None on failure.

    A leading 'v' is accepted and missing minor/patch parts count as zero,
    so "v1.2" parses as 1.2.0.
    """
    if not isinstance(v, str):
        return None
    raw = v.strip()
    if raw[:1] in ("v", "V"):
        raw = raw[1:]
    if not raw:
        return None
    try:
        return semver.Version.parse(raw, optional_minor_and_patch=True)
    except (ValueError, TypeError):
        return None


def compare_versions(a: semver.Version, b: semver.Version) -> int:
    """Semver precedence; build metadata does not take part."""
    return a.compare(b)


def to_candidates(versions: list[str]) -> list[VersionCandidate]:
    candidates = []
    for v in versions:
        parsed = parse_version(v)
        if parsed is None:
            logger.debug("Skipping invalid semantic version %r", v)
        candidates.append(VersionCandidate(raw=v, parsed=parsed))
    return candidates


def _sorted_desc(candidates: list[VersionCandidate]) -> list[VersionCandidate]:
    # sorted() is stable under reverse=True, so equal versions keep input order
    return sorted(
        candidates,
        key=cmp_to_key(lambda x, y: compare_versions(x.parsed, y.parsed)),
        reverse=True,
    )


def _valid_candidates(versions: list[str]) -> list[VersionCandidate]:
    if not versions:
        raise EmptyInputError("no versions provided")
    valid = [c for c in to_candidates(versions) if c.valid]
    if not valid:
        raise NoValidVersionsError("no valid semantic versions found")
    return valid


def select_latest(versions: list[str]) -> str:
    """Return the original string of the highest valid semantic version.

    Raises EmptyInputError for an empty list and NoValidVersionsError when
    nothing parses.
    """
    valid = _valid_candidates(versions)
    return _sorted_desc(valid)[0].raw


def _matches_constraint(
    candidate: semver.Version, current: semver.Version, constraint: VersionConstraint
) -> bool:
    if constraint is VersionConstraint.PATCH:
        return candidate.major == current.major and candidate.minor == current.minor
    if constraint is VersionConstraint.MINOR:
        return candidate.major == current.major
    return True


def select_latest_with_constraint(
    versions: list[str],
    current_version: str,
    constraint: VersionConstraint | str | None = VersionConstraint.MAJOR,
) -> ConstraintResult:
    """Find the latest version that respects ``constraint`` relative to ``current_version``.

    ``patch`` keeps major.minor, ``minor`` keeps major, ``major`` (or empty)
    allows anything. The within-constraint result never goes below the
    current version. If the current version is not valid semver the
    constraint is ignored.
    """
    if not isinstance(constraint, VersionConstraint):
        constraint = VersionConstraint.from_str(constraint)

    valid = _valid_candidates(versions)

    current = parse_version(current_version)
    if current is None:
        logger.warning(
            "Current version %r is not valid semver, checking all versions without constraint",
            current_version,
        )
        latest = _sorted_desc(valid)[0].raw
        return ConstraintResult(
            latest_within_constraint=latest,
            latest_unconstrained=latest,
            has_update_outside_constraint=False,
        )

    all_sorted = _sorted_desc(valid)
    latest_all = all_sorted[0]

    constrained = [c for c in all_sorted if _matches_constraint(c.parsed, current, constraint)]
    if not constrained:
        return ConstraintResult(
            latest_within_constraint=current_version,
            latest_unconstrained=latest_all.raw,
            has_update_outside_constraint=latest_all.raw != current_version,
        )

    latest_constrained = constrained[0]
    if compare_versions(latest_constrained.parsed, current) > 0:
        within = latest_constrained.raw
    else:
        within = current_version

    outside = False
    if constraint is not VersionConstraint.MAJOR:
        outside = (
            compare_versions(latest_all.parsed, current) > 0
            and compare_versions(latest_all.parsed, latest_constrained.parsed) > 0
        )

    return ConstraintResult(
        latest_within_constraint=within,
        latest_unconstrained=latest_all.raw,
        has_update_outside_constraint=outside,
    )


def classify_update(current: str, latest: str) -> str:
    """Classify the update type between two version strings.

    Returns: "major", "minor", "patch", "up-to-date", or "unknown".
    """
    cur = parse_version(current)
    lat = parse_version(latest)

    if cur is None or lat is None:
        return "unknown"
    if lat.compare(cur) <= 0:
        return "up-to-date"
    if lat.major > cur.major:
        return "major"
    if lat.minor > cur.minor:
        return "minor"
    return "patch"
