"""Data model for dependency resolution."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import semantic_version

from crategate.errors import ManifestParseError


@dataclass(frozen=True)
class GitSource:
    """Dependency fetched from a git repository."""

    url: str
    revision: Optional[str] = None


@dataclass(frozen=True)
class PathSource:
    """Dependency located in a local directory."""

    path: Path


Source = Union[str, GitSource, PathSource]


@dataclass(frozen=True)
class DependencyDescriptor:
    """A resolved (or partially resolved) dependency.

    ``source`` holds at most one of: a version requirement string, a
    GitSource or a PathSource. The ``set_*`` helpers return a copy with the
    source replaced, so a descriptor never carries two sources at once.
    """

    name: str
    source: Optional[Source] = None
    features: Optional[Tuple[str, ...]] = None
    available_features: Optional[Tuple[str, ...]] = None

    def set_version(self, version: str) -> "DependencyDescriptor":
        return replace(self, source=version)

    def set_git(self, url: str, revision: Optional[str] = None) -> "DependencyDescriptor":
        return replace(self, source=GitSource(url, revision))

    def set_path(self, path: Path) -> "DependencyDescriptor":
        return replace(self, source=PathSource(Path(path)))

    def set_features(self, features: Optional[List[str]]) -> "DependencyDescriptor":
        return replace(self, features=None if features is None else tuple(features))

    def set_available_features(self, features: List[str]) -> "DependencyDescriptor":
        return replace(self, available_features=tuple(features))

    @property
    def version(self) -> Optional[str]:
        """The version requirement, if the source is a registry version."""
        return self.source if isinstance(self.source, str) else None

    @property
    def git(self) -> Optional[GitSource]:
        return self.source if isinstance(self.source, GitSource) else None

    @property
    def path(self) -> Optional[Path]:
        return self.source.path if isinstance(self.source, PathSource) else None


@dataclass(frozen=True)
class CrateVersionRecord:
    """One published version of a crate, as read from the registry index."""

    name: str
    version: semantic_version.Version
    yanked: bool = False
    available_features: Tuple[str, ...] = ()

    @property
    def is_prerelease(self) -> bool:
        return bool(self.version.prerelease)


@dataclass(frozen=True)
class Manifest:
    """The parts of a Cargo.toml needed to describe a dependency."""

    package_name: Optional[str]
    feature_table: Dict[str, List[str]] = field(default_factory=dict)
    optional_dependencies: Tuple[str, ...] = ()

    def features(self) -> List[str]:
        """Feature names, including optional dependencies (implicit features)."""
        names = list(self.feature_table)
        names.extend(d for d in self.optional_dependencies if d not in self.feature_table)
        return names

    def require_package_name(self, source: str) -> str:
        """Return the package name or raise ManifestParseError naming source."""
        if not self.package_name:
            raise ManifestParseError(source, "missing `package.name`")
        return self.package_name
