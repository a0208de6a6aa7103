"""Crate specifier parsing.

A specifier is a plain name (``docopt``), a name with a version requirement
(``docopt@^0.8``), a name with features (``serde+derive,rc``), both
(``serde@1+derive``), a git URL or a local path.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from crategate.common.logging_utils import extra_context, is_debug_enabled
from crategate.errors import ManifestIoError
from crategate.models import DependencyDescriptor
from crategate.repository.fetch import get_manifest_from_url
from crategate.repository.manifest import get_manifest_from_path
from crategate.versioning.requirement import parse_version_req

logger = logging.getLogger(__name__)


class CrateName:
    """A crate specifier as typed by the user."""

    def __init__(self, name: str):
        self._raw = name

    def __repr__(self) -> str:
        return f"CrateName({self._raw!r})"

    @property
    def name(self) -> str:
        """The raw specifier text."""
        return self._raw

    def has_version(self) -> bool:
        """Does this specify a versionreq?"""
        return "@" in self._raw

    def is_path(self) -> bool:
        """Loose check for path or URL input; crate names containing dots match too."""
        return any(ch in self._raw for ch in (".", "/", "\\"))

    def parse_version_or_features(self) -> Optional[DependencyDescriptor]:
        """Extract an inline version requirement and/or feature list.

        Returns:
            DependencyDescriptor or None: None when the specifier has neither
            ``+`` nor ``@``; otherwise a descriptor carrying the name, the
            requested features and, if given, the version requirement.

        Raises:
            InvalidVersionRequirementError: If the text after ``@`` is not a
                valid version requirement.
        """
        name = self._raw
        features: Optional[str] = None
        version: Optional[str] = None
        if "+" in name:
            name, features = name.split("+", 1)
        if "@" in name:
            name, version = name.split("@", 1)
        elif features is not None and "@" in features:
            features, version = features.split("@", 1)

        if version is not None:
            parse_version_req(version)

        if features is None and version is None:
            return None

        dep = DependencyDescriptor(name)
        if features is not None:
            dep = dep.set_features(_split_features(features))
        if version is not None:
            dep = dep.set_version(version)
        if is_debug_enabled(logger):
            logger.debug(
                "Parsed inline specifier",
                extra=extra_context(
                    event="parse",
                    component="crate_name",
                    crate=name,
                    version=version,
                    features=features,
                )
            )
        return dep

    def parse_crate_name_from_uri(self) -> Optional[DependencyDescriptor]:
        """Resolve the specifier as a git URL or a local path.

        Returns:
            DependencyDescriptor or None: None when the text is neither a
            recognized repository URL nor path-like.

        Raises:
            UnrecognizedRepositoryUrlError, RemoteFetchError, ManifestParseError:
                For recognized hosts whose manifest cannot be retrieved.
            ManifestIoError: For paths without a readable Cargo.toml.
        """
        manifest = get_manifest_from_url(self._raw)
        if manifest is not None:
            return (
                DependencyDescriptor(manifest.require_package_name(self._raw))
                .set_git(self._raw, None)
                .set_available_features(manifest.features())
            )
        if self.is_path():
            path = Path(self._raw)
            manifest = get_manifest_from_path(path)
            crate_name = manifest.require_package_name(str(path))
            try:
                canonical = path.resolve(strict=True)
            except OSError as exc:
                raise ManifestIoError(str(path), str(exc)) from exc
            return (
                DependencyDescriptor(crate_name)
                .set_path(canonical)
                .set_available_features(manifest.features())
            )
        return None


def _split_features(text: str) -> List[str]:
    return [f.strip() for f in text.split(",") if f.strip()]
