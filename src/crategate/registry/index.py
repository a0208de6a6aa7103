"""Local, git-backed registry index in the crates.io layout.

Each crate has one file whose path is derived from its lowercased name::

    1/a            one-letter names
    2/ab           two-letter names
    3/a/abc        three-letter names, bucketed by first letter
    se/rd/serde    everything else, by first and second letter pairs

Every line of the file is a JSON object describing one published version.
"""
from __future__ import annotations

import json
import logging
import re
import subprocess
from pathlib import Path
from typing import List, Optional

import semantic_version

from crategate.common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from crategate.constants import Constants
from crategate.errors import IndexLockedError, IndexUpdateError, ParseVersionError
from crategate.models import CrateVersionRecord
from crategate.registry.base import RegistryClient
from crategate.registry.source import index_path_for

logger = logging.getLogger(__name__)

# git reports a held lock as "Unable to create '<...>.lock': File exists."
_LOCKED_RE = re.compile(r"\.lock'?:?\s*File exists|Unable to create '[^']*\.lock'|cannot lock ref", re.IGNORECASE)


def crate_path(name: str) -> Path:
    """Relative path of a crate's file inside the index."""
    lower = name.lower()
    if len(lower) == 1:
        return Path("1") / lower
    if len(lower) == 2:
        return Path("2") / lower
    if len(lower) == 3:
        return Path("3") / lower[0] / lower
    return Path(lower[0:2]) / lower[2:4] / lower


def parse_index_line(line: str, crate_name: str) -> Optional[CrateVersionRecord]:
    """Parse one JSON line of an index file.

    Returns:
        CrateVersionRecord or None for blank or malformed lines.

    Raises:
        ParseVersionError: If the ``vers`` field is not a semantic version.
    """
    line = line.strip()
    if not line:
        return None
    try:
        entry = json.loads(line)
    except json.JSONDecodeError:
        logger.warning("Skipping malformed index entry for %s", crate_name)
        return None
    if not isinstance(entry, dict) or "vers" not in entry:
        logger.warning("Skipping index entry without version for %s", crate_name)
        return None

    vers = str(entry["vers"])
    try:
        version = semantic_version.Version(vers)
    except ValueError as exc:
        raise ParseVersionError(vers, crate_name) from exc

    features = list((entry.get("features") or {}).keys())
    for extra in (entry.get("features2") or {}).keys():
        if extra not in features:
            features.append(extra)

    return CrateVersionRecord(
        name=str(entry.get("name") or crate_name),
        version=version,
        yanked=bool(entry.get("yanked", False)),
        available_features=tuple(features),
    )


class LocalIndexClient(RegistryClient):
    """Registry client reading a local checkout of a git index."""

    def __init__(self, index_path: Path, registry_url: str = Constants.CRATES_IO_INDEX):
        self.index_path = Path(index_path)
        self.registry_url = registry_url

    @classmethod
    def for_registry(cls, registry_url: str, cargo_home: Optional[Path] = None) -> "LocalIndexClient":
        """Client for the default checkout location of registry_url."""
        return cls(index_path_for(registry_url, cargo_home), registry_url)

    def crate_versions(self, name: str) -> Optional[List[CrateVersionRecord]]:
        if not name:
            return None
        path = self.index_path / crate_path(name)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Unable to read index file %s: %s", path, exc)
            return None

        records = []
        for line in text.splitlines():
            record = parse_index_line(line, name)
            if record is not None:
                records.append(record)
        return records or None

    def update(self) -> None:
        """Clone the index if absent, otherwise fetch and fast-forward to the remote head."""
        if (self.index_path / ".git").exists():
            self._git("fetch", "--quiet", self.registry_url, "HEAD", cwd=self.index_path)
            self._git("reset", "--quiet", "--hard", "FETCH_HEAD", cwd=self.index_path)
        else:
            self.index_path.parent.mkdir(parents=True, exist_ok=True)
            self._git("clone", "--quiet", self.registry_url, str(self.index_path))

    def _git(self, *args: str, cwd: Optional[Path] = None) -> None:
        cmd = [Constants.GIT_COMMAND, *args]
        with Timer() as t:
            try:
                result = subprocess.run(
                    cmd,
                    cwd=str(cwd) if cwd else None,
                    capture_output=True,
                    text=True,
                    check=False,
                )
            except OSError as exc:
                raise IndexUpdateError(self.registry_url, f"unable to run git: {exc}") from exc

        if is_debug_enabled(logger):
            logger.debug(
                "git command finished",
                extra=extra_context(
                    event="subprocess",
                    component="registry_index",
                    action=args[0],
                    returncode=result.returncode,
                    duration_ms=t.duration_ms(),
                    target=safe_url(self.registry_url),
                )
            )
        if result.returncode == 0:
            return
        stderr = (result.stderr or "").strip()
        if _LOCKED_RE.search(stderr):
            raise IndexLockedError(self.registry_url, stderr[:300])
        raise IndexUpdateError(
            self.registry_url,
            f"git {args[0]} failed (rc={result.returncode}): {stderr[:300]}",
        )
