"""Pick the newest usable version from registry records."""

from __future__ import annotations

from typing import Iterable

from crategate.errors import NoVersionsAvailableError
from crategate.models import CrateVersionRecord, DependencyDescriptor


def version_is_stable(record: CrateVersionRecord) -> bool:
    """Return True when the record is not a prerelease."""
    return not record.is_prerelease


def read_latest_version(
    versions: Iterable[CrateVersionRecord],
    flag_allow_prerelease: bool,
) -> DependencyDescriptor:
    """Read the latest version from a list of registry records.

    Yanked records are always skipped; prereleases only when
    flag_allow_prerelease is False.

    Args:
        versions: Records of one crate (possibly several fuzzy spellings).
        flag_allow_prerelease: Whether prerelease versions are candidates.

    Returns:
        DependencyDescriptor: Named after the record, with the exact version
        string and the record's features.

    Raises:
        NoVersionsAvailableError: If no record survives filtering.
    """
    candidates = [
        v for v in versions
        if (flag_allow_prerelease or version_is_stable(v)) and not v.yanked
    ]
    if not candidates:
        raise NoVersionsAvailableError()

    latest = max(candidates, key=lambda v: v.version)
    return (
        DependencyDescriptor(latest.name)
        .set_version(str(latest.version))
        .set_available_features(list(latest.available_features))
    )
