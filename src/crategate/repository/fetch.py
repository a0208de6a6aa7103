"""Fetch Cargo.toml from a github or gitlab repository.

Only the root manifest on the default branch is considered; there is no
branch discovery and no retry on HTTP failure.
"""
from __future__ import annotations

import logging
import re
from typing import Optional

from crategate.common.http_client import get_text
from crategate.common.logging_utils import extra_context, is_debug_enabled, safe_url
from crategate.constants import Constants, RepositoryHosts
from crategate.errors import ManifestParseError, UnrecognizedRepositoryUrlError
from crategate.models import Manifest
from crategate.repository.manifest import parse_manifest

logger = logging.getLogger(__name__)

_REPO_TAIL = r"/([-_0-9a-zA-Z]+)/([-_0-9a-zA-Z]+)(/|\.git)?$"
GITHUB_REPO_RE = re.compile(r"^" + re.escape(RepositoryHosts.GITHUB.value) + _REPO_TAIL)
GITLAB_REPO_RE = re.compile(r"^" + re.escape(RepositoryHosts.GITLAB.value) + _REPO_TAIL)


def is_github_url(url: str) -> bool:
    return url.startswith(RepositoryHosts.GITHUB.value)


def is_gitlab_url(url: str) -> bool:
    return url.startswith(RepositoryHosts.GITLAB.value)


def raw_manifest_url(url: str) -> str:
    """Build the raw-content URL of the repository's root Cargo.toml.

    Args:
        url: Repository URL, e.g. ``https://github.com/owner/repo.git``.

    Returns:
        str: URL of Cargo.toml on the default branch.

    Raises:
        UnrecognizedRepositoryUrlError: If the URL lacks an owner/repo shape
            or belongs to an unsupported host.
    """
    if is_github_url(url):
        pattern, template = GITHUB_REPO_RE, Constants.RAW_URL_GITHUB
    elif is_gitlab_url(url):
        pattern, template = GITLAB_REPO_RE, Constants.RAW_URL_GITLAB
    else:
        raise UnrecognizedRepositoryUrlError(url)

    m = pattern.match(url)
    if not m:
        raise UnrecognizedRepositoryUrlError(url)
    return template.format(
        owner=m.group(1),
        repo=m.group(2),
        branch=Constants.DEFAULT_BRANCH,
        manifest=Constants.MANIFEST_FILE,
    )


def get_cargo_toml_from_git_url(url: str) -> str:
    """Download manifest text; failures raise RemoteFetchError with the URL."""
    return get_text(url, context="git-manifest")


def get_manifest_from_url(url: str) -> Optional[Manifest]:
    """Load Cargo.toml from a github or gitlab repository.

    This will fail when:
    - there is no Internet connection,
    - Cargo.toml is not present in the root of the default branch,
    - the response from the server is an error or in an incorrect format.

    Returns:
        Manifest or None: None when the URL is not on a recognized host.

    Raises:
        UnrecognizedRepositoryUrlError: Recognized host, malformed repository path.
        RemoteFetchError: Transport failure or non-2xx response.
        ManifestParseError: The body is not a valid manifest.
    """
    if not (is_github_url(url) or is_gitlab_url(url)):
        return None

    manifest_url = raw_manifest_url(url)
    if is_debug_enabled(logger):
        logger.debug(
            "Fetching remote manifest",
            extra=extra_context(
                event="function_entry",
                component="fetch",
                action="get_manifest_from_url",
                target=safe_url(manifest_url),
            )
        )
    text = get_cargo_toml_from_git_url(manifest_url)
    try:
        return parse_manifest(text, manifest_url)
    except ManifestParseError:
        logger.warning("Remote manifest at %s could not be parsed", safe_url(manifest_url))
        raise
