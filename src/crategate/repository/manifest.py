"""Cargo.toml parsing: package name, feature table and optional dependencies."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

try:
    import tomllib as toml  # type: ignore
except ImportError:  # Python < 3.11
    import tomli as toml  # type: ignore

from crategate.constants import Constants
from crategate.errors import ManifestIoError, ManifestParseError
from crategate.models import Manifest

logger = logging.getLogger(__name__)

DEPENDENCY_SECTIONS = ("dependencies", "dev-dependencies", "build-dependencies")


def _optional_dependencies(data: Dict[str, Any]) -> List[str]:
    """Collect optional dependencies, including target-specific tables."""
    tables = [data]
    target = data.get("target")
    if isinstance(target, dict):
        tables.extend(t for t in target.values() if isinstance(t, dict))

    found: List[str] = []
    for table in tables:
        for section in DEPENDENCY_SECTIONS:
            deps = table.get(section)
            if not isinstance(deps, dict):
                continue
            for name, spec in deps.items():
                if isinstance(spec, dict) and spec.get("optional") is True and name not in found:
                    found.append(name)
    return found


def parse_manifest(text: str, source: str) -> Manifest:
    """Parse manifest text.

    Args:
        text: TOML document.
        source: URL or path the text came from, used in error messages.

    Returns:
        Manifest: package name (None for virtual manifests) and features.

    Raises:
        ManifestParseError: If the text is not TOML or the tables are malformed.
    """
    try:
        data = toml.loads(text)
    except toml.TOMLDecodeError as exc:
        raise ManifestParseError(source, str(exc)) from exc

    package = data.get("package", {})
    if not isinstance(package, dict):
        raise ManifestParseError(source, "`package` is not a table")
    name = package.get("name")
    if name is not None and not isinstance(name, str):
        raise ManifestParseError(source, "`package.name` is not a string")

    features = data.get("features", {})
    if not isinstance(features, dict):
        raise ManifestParseError(source, "`features` is not a table")
    feature_table = {
        str(k): [str(x) for x in v] if isinstance(v, list) else []
        for k, v in features.items()
    }

    return Manifest(
        package_name=name,
        feature_table=feature_table,
        optional_dependencies=tuple(_optional_dependencies(data)),
    )


def get_manifest_from_path(path: Path) -> Manifest:
    """Load Cargo.toml in a local directory.

    This will fail when Cargo.toml is not present in the root of the path.

    Raises:
        ManifestIoError: If the file is missing, unreadable or unparseable.
    """
    cargo_file = Path(path) / Constants.MANIFEST_FILE
    logger.debug("Loading local manifest %s", cargo_file)
    try:
        text = cargo_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestIoError(str(cargo_file), str(exc)) from exc
    try:
        return parse_manifest(text, str(cargo_file))
    except ManifestParseError as exc:
        raise ManifestIoError(str(cargo_file), exc.reason) from exc
