"""Resolve a crate specifier into a dependency descriptor.

Entry points:

- get_latest_dependency: newest usable registry version of a crate name.
- get_features_from_registry: features of the version matching a requirement.
- resolve: full pipeline over any specifier (name, name@req, name+features,
  git URL or path).
"""
from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import List, Optional, Union

from crategate.common.logging_utils import extra_context, is_debug_enabled, Timer
from crategate.crate_name import CrateName
from crategate.errors import (
    CrateNameMismatchWarning,
    EmptyCrateNameError,
    InvalidVersionRequirementError,
    NoCrateError,
    ParseVersionError,
)
from crategate.models import DependencyDescriptor
from crategate.registry.base import RegistryClient
from crategate.registry.index import LocalIndexClient
from crategate.registry.query import fuzzy_query_registry_index
from crategate.registry.source import registry_url
from crategate.registry.update import update_registry_index
from crategate.versioning.requirement import parse_version_req
from crategate.versioning.selector import read_latest_version

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def default_client(manifest_path: PathLike, registry: Optional[str] = None) -> RegistryClient:
    """Local index client for the registry configured for manifest_path."""
    url = registry_url(Path(manifest_path), registry)
    return LocalIndexClient.for_registry(url)


def get_latest_dependency(
    crate_name: str,
    flag_allow_prerelease: bool,
    manifest_path: PathLike,
    registry: Optional[str] = None,
    client: Optional[RegistryClient] = None,
) -> DependencyDescriptor:
    """Query the latest version of a crate from a registry index.

    The registry argument must be specified for crates from alternative
    registries. This will fail when the index entries have an incorrect
    format or when no spelling of the crate exists in the registry.

    A CrateNameMismatchWarning is emitted when the index knows the crate
    under a different hyphen/underscore spelling; the descriptor carries
    the registry's spelling.

    Args:
        crate_name: Crate to look up.
        flag_allow_prerelease: Whether prerelease versions may be selected.
        manifest_path: Project directory, used to find the registry.
        registry: Optional registry name or index URL.
        client: Registry client; defaults to the local index of the registry.

    Returns:
        DependencyDescriptor: name, exact version and available features.

    Raises:
        EmptyCrateNameError, NoCrateError, NoVersionsAvailableError,
        ParseVersionError.
    """
    if not crate_name:
        raise EmptyCrateNameError()

    if client is None:
        client = default_client(manifest_path, registry)

    with Timer() as t:
        crate_versions = fuzzy_query_registry_index(crate_name, client)
        dep = read_latest_version(crate_versions, flag_allow_prerelease)

    if is_debug_enabled(logger):
        logger.debug(
            "Resolved latest version",
            extra=extra_context(
                event="resolve",
                component="resolver",
                crate=dep.name,
                version=dep.version,
                allow_prerelease=flag_allow_prerelease,
                duration_ms=t.duration_ms(),
            )
        )

    if dep.name != crate_name:
        logger.warning("Added `%s` instead of `%s`", dep.name, crate_name)
        warnings.warn(CrateNameMismatchWarning(crate_name, dep.name), stacklevel=2)

    return dep


def get_features_from_registry(crate_name: str, version: str, client: RegistryClient) -> List[str]:
    """Get the features of a crate from the registry.

    The newest version matching the requirement is used; when none matches,
    the highest published version is.

    Raises:
        ParseVersionError: If version is not a valid requirement.
        NoCrateError: If the crate is not in the registry.
    """
    try:
        req = parse_version_req(version)
    except InvalidVersionRequirementError as exc:
        raise ParseVersionError(version, crate_name) from exc

    versions = client.crate_versions(crate_name)
    if not versions:
        raise NoCrateError(crate_name)

    for record in reversed(versions):
        if req.match(record.version):
            return list(record.available_features)
    highest = max(versions, key=lambda v: v.version)
    return list(highest.available_features)


def resolve(
    specifier: str,
    flag_allow_prerelease: bool = False,
    manifest_path: PathLike = ".",
    registry: Optional[str] = None,
    client: Optional[RegistryClient] = None,
    update_index: bool = False,
    quiet: bool = False,
) -> DependencyDescriptor:
    """Resolve any crate specifier into a descriptor.

    - ``name@req`` keeps the requirement; available features come from the
      registry version matching it.
    - ``name+f1,f2`` resolves the latest version and keeps the features.
    - URLs of recognized git hosts and paths are resolved from their manifest.
    - Anything else is a crate name looked up in the registry.

    Args:
        specifier: Text as typed by the user.
        flag_allow_prerelease: Whether prerelease versions may be selected.
        manifest_path: Project directory, used to find the registry.
        registry: Optional registry name or index URL.
        client: Registry client; defaults to the local index of the registry.
        update_index: Refresh the index before any registry lookup.
        quiet: Suppress the index "Updating" notice.

    Returns:
        DependencyDescriptor: Fully resolved descriptor.
    """
    crate = CrateName(specifier)
    requested = crate.parse_version_or_features()

    if requested is None:
        from_uri = crate.parse_crate_name_from_uri()
        if from_uri is not None:
            return from_uri

    if client is None:
        client = default_client(manifest_path, registry)
    if update_index:
        update_registry_index(client, quiet=quiet)

    if requested is None:
        return get_latest_dependency(specifier, flag_allow_prerelease, manifest_path, registry, client)

    if not requested.name:
        raise EmptyCrateNameError()

    if requested.version is not None:
        features = get_features_from_registry(requested.name, requested.version, client)
        return requested.set_available_features(features)

    latest = get_latest_dependency(requested.name, flag_allow_prerelease, manifest_path, registry, client)
    return latest.set_features(list(requested.features or ()))
