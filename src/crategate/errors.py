"""Exceptions raised while resolving crate specifiers."""

from __future__ import annotations

from typing import Optional


class CrateGateError(Exception):
    """Base class for every resolution failure."""


class EmptyCrateNameError(CrateGateError):
    """Raised when an empty crate name is looked up."""

    def __init__(self) -> None:
        super().__init__("Found empty crate name")


class InvalidVersionRequirementError(CrateGateError):
    """Raised when the text after '@' is not a valid version requirement."""

    def __init__(self, requirement: str, reason: Optional[str] = None):
        self.requirement = requirement
        msg = f"Invalid crate version requirement `{requirement}`"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class NoCrateError(CrateGateError):
    """Raised when no fuzzy variant of a name exists in the registry."""

    def __init__(self, crate_name: str):
        self.crate_name = crate_name
        super().__init__(f"The crate `{crate_name}` could not be found in registry index.")


class NoVersionsAvailableError(CrateGateError):
    """Raised when every version was filtered out (yanked or prerelease)."""

    def __init__(self) -> None:
        super().__init__("No available versions exist. Either all were yanked or only prerelease versions exist.")


class ParseVersionError(CrateGateError):
    """Raised when a version string read from the registry cannot be parsed."""

    def __init__(self, version: str, crate_name: str):
        self.version = version
        self.crate_name = crate_name
        super().__init__(f"Failed to parse the version `{version}` for crate `{crate_name}`")


class ManifestParseError(CrateGateError):
    """Raised when manifest text is not valid TOML or lacks a package name."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Unable to parse Cargo.toml from `{source}`: {reason}")


class ManifestIoError(CrateGateError):
    """Raised when a local manifest cannot be opened."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        msg = f"Unable to open local Cargo.toml at `{path}`"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class RemoteFetchError(CrateGateError):
    """Raised when a remote manifest download fails."""

    def __init__(self, url: str, cause: str):
        self.url = url
        self.cause = cause
        super().__init__(f"HTTP request `{url}` failed: {cause}")


class UnrecognizedRepositoryUrlError(CrateGateError):
    """Raised when a github/gitlab URL does not have an owner/repo shape."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Unable to parse git repo URL `{url}`")


class IndexUpdateError(CrateGateError):
    """Raised when the local registry index cannot be synchronized."""

    def __init__(self, registry_url: str, cause: str):
        self.registry_url = registry_url
        self.cause = cause
        super().__init__(f"Failed to update registry index `{registry_url}`: {cause}")


class IndexLockedError(IndexUpdateError):
    """Raised when another process holds the registry index lock."""


class IndexLockTimeoutError(CrateGateError):
    """Raised when the retry budget runs out while the index stays locked."""

    def __init__(self, registry_url: str, attempts: int):
        self.registry_url = registry_url
        self.attempts = attempts
        super().__init__(
            f"Registry index `{registry_url}` still locked after {attempts} attempts"
        )


class RegistryNotFoundError(CrateGateError):
    """Raised when a named registry is not declared in any cargo config."""

    def __init__(self, registry: str):
        self.registry = registry
        super().__init__(f"The registry `{registry}` could not be found")


class ConfigError(CrateGateError):
    """Raised when a configuration file exists but cannot be loaded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Unable to load configuration `{path}`: {reason}")


class CrateNameMismatchWarning(UserWarning):
    """Emitted when fuzzy matching resolved a differently spelled crate."""

    def __init__(self, requested: str, resolved: str):
        self.requested = requested
        self.resolved = resolved
        super().__init__(f"Added `{resolved}` instead of `{requested}`")
