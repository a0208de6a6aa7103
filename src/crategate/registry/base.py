"""Registry client interface and an in-memory implementation."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

import semantic_version

from crategate.models import CrateVersionRecord


class RegistryClient(ABC):
    """Read access to a registry index plus a way to refresh it."""

    registry_url: str

    @abstractmethod
    def crate_versions(self, name: str) -> Optional[List[CrateVersionRecord]]:
        """Return every published version of name, oldest first, or None if unknown.

        Implementations match the name exactly as given; fuzzy spelling is
        handled by fuzzy_query_registry_index.
        """

    @abstractmethod
    def update(self) -> None:
        """Refresh the index from its remote source.

        Raises:
            IndexLockedError: When another process holds the index lock.
            IndexUpdateError: On any other synchronization failure.
        """


class InMemoryRegistryClient(RegistryClient):
    """Deterministic registry backed by a dict, for tests and offline use."""

    def __init__(
        self,
        crates: Optional[Dict[str, Iterable[CrateVersionRecord]]] = None,
        registry_url: str = "memory://registry",
    ):
        self.registry_url = registry_url
        self._crates: Dict[str, List[CrateVersionRecord]] = {
            name: list(records) for name, records in (crates or {}).items()
        }
        self.update_count = 0

    def add(self, name: str, version: str, yanked: bool = False, features: Iterable[str] = ()) -> None:
        """Publish a version; the record keeps name as its canonical spelling."""
        self._crates.setdefault(name, []).append(
            CrateVersionRecord(
                name=name,
                version=semantic_version.Version(version),
                yanked=yanked,
                available_features=tuple(features),
            )
        )

    def crate_versions(self, name: str) -> Optional[List[CrateVersionRecord]]:
        records = self._crates.get(name)
        return list(records) if records is not None else None

    def update(self) -> None:
        self.update_count += 1
