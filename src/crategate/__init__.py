"""crategate - resolve crate specifiers into dependency descriptors."""

from crategate.crate_name import CrateName
from crategate.models import (
    CrateVersionRecord,
    DependencyDescriptor,
    GitSource,
    Manifest,
    PathSource,
)
from crategate.resolver import get_features_from_registry, get_latest_dependency, resolve

__version__ = "0.1.0"

__all__ = [
    "CrateName",
    "CrateVersionRecord",
    "DependencyDescriptor",
    "GitSource",
    "Manifest",
    "PathSource",
    "get_features_from_registry",
    "get_latest_dependency",
    "resolve",
]
