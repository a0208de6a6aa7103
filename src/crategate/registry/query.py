"""Fuzzy lookup of a crate across hyphen/underscore spellings."""
from __future__ import annotations

import logging
from typing import List

from crategate.common.logging_utils import extra_context, is_debug_enabled
from crategate.errors import NoCrateError
from crategate.models import CrateVersionRecord
from crategate.registry.base import RegistryClient
from crategate.versioning.fuzzy import gen_fuzzy_crate_names

logger = logging.getLogger(__name__)


def fuzzy_query_registry_index(crate_name: str, client: RegistryClient) -> List[CrateVersionRecord]:
    """Fuzzy query a crate from the registry index.

    Spellings are tried in gen_fuzzy_crate_names order (exact name first);
    the first one the index knows wins.

    Args:
        crate_name: Name as requested.
        client: Registry to query.

    Returns:
        list: Version records of the first matching spelling.

    Raises:
        NoCrateError: If no spelling exists in the index.
    """
    names = gen_fuzzy_crate_names(crate_name)
    for the_name in names:
        versions = client.crate_versions(the_name)
        if versions is None:
            continue
        if is_debug_enabled(logger):
            logger.debug(
                "Registry match",
                extra=extra_context(
                    event="decision",
                    component="registry",
                    action="fuzzy_query",
                    requested=crate_name,
                    matched=the_name,
                    count=len(versions),
                )
            )
        return versions
    logger.debug("No registry entry for any of %d spellings of %s", len(names), crate_name)
    raise NoCrateError(crate_name)
