"""Work out which registry index a project uses and where it is checked out.

Cargo configuration is read from ``.cargo/config.toml`` (or the legacy
``.cargo/config``) in the manifest directory and each of its parents, then
from ``$CARGO_HOME``. Closer files take precedence.
"""
from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

try:
    import tomllib as toml  # type: ignore
except ImportError:  # Python < 3.11
    import tomli as toml  # type: ignore

from crategate.constants import Constants
from crategate.errors import ConfigError, RegistryNotFoundError

logger = logging.getLogger(__name__)


def cargo_home() -> Path:
    """$CARGO_HOME, or the configured default (``~/.cargo``)."""
    return Path(os.path.expanduser(os.environ.get(Constants.ENV_CARGO_HOME) or Constants.DEFAULT_CARGO_HOME))


def index_path_for(registry_url: str, home: Optional[Path] = None) -> Path:
    """Directory holding the local checkout of a registry index.

    The name is ``<host>-<digest>``, the digest being a prefix of the
    SHA-256 of the URL so that different indexes on one host do not clash.
    """
    host = urlsplit(registry_url).hostname or "local"
    digest = hashlib.sha256(registry_url.encode("utf-8")).hexdigest()[:Constants.INDEX_DIR_HASH_LEN]
    return Path(home or cargo_home()) / "registry" / "index" / f"{host}-{digest}"


def _config_files(manifest_path: Path) -> List[Path]:
    """Candidate cargo config files, highest precedence first."""
    start = Path(manifest_path).resolve()
    if start.is_file() or start.name == Constants.MANIFEST_FILE:
        start = start.parent

    dirs = [start, *start.parents]
    home = cargo_home()
    files = []
    for d in dirs:
        for name in Constants.CARGO_CONFIG_FILES:
            files.append(d / ".cargo" / name)
    for name in Constants.CARGO_CONFIG_FILES:
        files.append(home / name)

    seen = []
    for f in files:
        if f not in seen:
            seen.append(f)
    return seen


def load_cargo_configs(manifest_path: Path) -> List[Dict[str, Any]]:
    """Parse every existing cargo config file, highest precedence first.

    Raises:
        ConfigError: If a config file exists but is not valid TOML.
    """
    configs = []
    for path in _config_files(manifest_path):
        if not path.is_file():
            continue
        try:
            configs.append(toml.loads(path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError, toml.TOMLDecodeError) as exc:
            raise ConfigError(str(path), str(exc)) from exc
        logger.debug("Loaded cargo config %s", path)
    return configs


def _lookup(configs: List[Dict[str, Any]], *keys: str) -> Optional[Any]:
    """First value found at the dotted key path across configs."""
    for cfg in configs:
        node: Any = cfg
        for key in keys:
            if not isinstance(node, dict) or key not in node:
                node = None
                break
            node = node[key]
        if node is not None:
            return node
    return None


def registry_url(manifest_path: Path, registry: Optional[str] = None) -> str:
    """Find the URL of the registry index for a project.

    Args:
        manifest_path: Project directory or its Cargo.toml.
        registry: Optional registry name (from ``[registries]``) or index URL.

    Returns:
        str: Index URL. Source replacement of crates-io is honored.

    Raises:
        RegistryNotFoundError: If a named registry is not configured.
        ConfigError: If a cargo config file cannot be parsed.
    """
    if registry and "://" in registry:
        return registry

    configs = load_cargo_configs(Path(manifest_path))

    if registry:
        index = _lookup(configs, "registries", registry, "index")
        if not index:
            raise RegistryNotFoundError(registry)
        return str(index)

    source = Constants.CRATES_IO_SOURCE
    visited = []
    while True:
        replacement = _lookup(configs, "source", source, "replace-with")
        if not replacement or replacement in visited:
            break
        visited.append(replacement)
        source = str(replacement)

    if source != Constants.CRATES_IO_SOURCE:
        url = _lookup(configs, "source", source, "registry")
        if url:
            logger.debug("crates-io replaced by source %s (%s)", source, url)
            return str(url)
        logger.warning("Source `%s` has no registry URL; using crates.io", source)
    return Constants.CRATES_IO_INDEX
