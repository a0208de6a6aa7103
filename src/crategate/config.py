"""Runtime configuration: YAML file and environment overrides onto Constants.

Precedence (highest first): environment variables, the file named by
$CRATEGATE_CONFIG, ./crategate.yml, ./crategate.yaml, then
~/.config/crategate/crategate.yml. Only the first file found is read.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import yaml

from crategate.constants import Constants
from crategate.errors import ConfigError

logger = logging.getLogger(__name__)

# YAML key -> (Constants attribute, converter)
_KEYS = {
    "request_timeout": ("REQUEST_TIMEOUT", float),
    "registry_backoff_sec": ("REGISTRY_BACKOFF_SEC", float),
    "index_lock_retry_max": ("INDEX_LOCK_RETRY_MAX", int),
    "default_branch": ("DEFAULT_BRANCH", str),
    "crates_io_index": ("CRATES_IO_INDEX", str),
    "cargo_home": ("DEFAULT_CARGO_HOME", str),
    "git_command": ("GIT_COMMAND", str),
    "fuzzy_max_separators": ("FUZZY_MAX_SEPARATORS", int),
}

_ENV = {
    "CRATEGATE_REQUEST_TIMEOUT": "request_timeout",
    "CRATEGATE_INDEX_LOCK_RETRY_MAX": "index_lock_retry_max",
    "CRATEGATE_REGISTRY_BACKOFF_SEC": "registry_backoff_sec",
}


def _candidate_paths():
    env_path = os.environ.get(Constants.CONFIG_ENV)
    if env_path:
        yield env_path
    for name in Constants.CONFIG_FILES:
        yield name
    yield os.path.join(os.path.expanduser(Constants.USER_CONFIG_DIR), Constants.CONFIG_FILES[0])


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML configuration.

    Args:
        path: Explicit file; when None the default locations are searched.

    Returns:
        dict: Parsed mapping, empty when no file is found.

    Raises:
        ConfigError: If an explicit file is missing, or a file is not valid YAML
            or not a mapping.
    """
    if path is not None and not os.path.isfile(path):
        raise ConfigError(path, "file not found")

    for candidate in ([path] if path else _candidate_paths()):
        if not os.path.isfile(candidate):
            continue
        try:
            with open(candidate, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(candidate, str(exc)) from exc
        if not isinstance(data, dict):
            raise ConfigError(candidate, "top level is not a mapping")
        logger.debug("Loaded configuration from %s", candidate)
        return data
    return {}


def _set(key: str, raw: Any, origin: str) -> None:
    attr, convert = _KEYS[key]
    if raw is None:
        if key == "index_lock_retry_max":
            setattr(Constants, attr, None)
        return
    try:
        value = convert(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid %s value %r from %s", key, raw, origin)
        return
    setattr(Constants, attr, value)


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply known keys of cfg onto Constants; unknown keys are logged and ignored."""
    for key, raw in cfg.items():
        if key not in _KEYS:
            logger.warning("Unknown configuration key: %s", key)
            continue
        _set(key, raw, "config file")


def apply_env_overrides(environ: Optional[Dict[str, str]] = None) -> None:
    """Apply CRATEGATE_* environment variables onto Constants."""
    env = os.environ if environ is None else environ
    for var, key in _ENV.items():
        if var in env:
            _set(key, env[var], var)


def configure(path: Optional[str] = None) -> None:
    """Load the configuration file, then environment overrides."""
    apply_config(load_config(path))
    apply_env_overrides()
