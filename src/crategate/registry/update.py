"""Refresh the registry index, waiting out a concurrent holder of its lock.

Each round either succeeds, hits lock contention (report, sleep, try again)
or fails fatally. Lock contention never surfaces unless the caller's retry
budget runs out; every other error propagates on the first occurrence.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from crategate.common.logging_utils import extra_context, safe_url
from crategate.constants import Constants
from crategate.errors import IndexLockedError, IndexLockTimeoutError
from crategate.registry.base import RegistryClient

logger = logging.getLogger(__name__)


def need_retry(client: RegistryClient) -> bool:
    """Run one update; True means the index was locked and should be retried."""
    try:
        client.update()
    except IndexLockedError as exc:
        logger.debug("Registry index locked: %s", exc.cause)
        return True
    return False


def registry_blocked_message(attempt: int) -> None:
    """Report that the registry is locked."""
    logger.info(
        "%12s waiting for lock on registry index",
        "Blocking",
        extra=extra_context(event="index_locked", component="registry_update", attempt=attempt),
    )


def update_registry_index(
    client: RegistryClient,
    quiet: bool = False,
    retry_budget: Optional[int] = None,
    backoff: Optional[float] = None,
    on_blocked: Optional[Callable[[int], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Update the registry index behind client.

    Args:
        client: Registry whose index is refreshed.
        quiet: Suppress the "Updating" notice.
        retry_budget: Maximum number of retries after lock contention.
            Defaults to Constants.INDEX_LOCK_RETRY_MAX; None there means
            retry until the lock is released.
        backoff: Seconds between attempts; defaults to Constants.REGISTRY_BACKOFF_SEC.
        on_blocked: Called with the attempt number each time the index is found locked.
        sleep: Blocking delay function.

    Raises:
        IndexLockTimeoutError: If the budget is exhausted while still locked.
        IndexUpdateError: On any failure other than lock contention.
    """
    budget = retry_budget if retry_budget is not None else Constants.INDEX_LOCK_RETRY_MAX
    delay = backoff if backoff is not None else Constants.REGISTRY_BACKOFF_SEC

    if not quiet:
        logger.info("%12s '%s' index", "Updating", safe_url(client.registry_url))

    attempts = 0
    while need_retry(client):
        attempts += 1
        if budget is not None and attempts > budget:
            logger.error(
                "Registry index still locked after %d attempts",
                attempts,
                extra=extra_context(event="index_locked", outcome="retry_budget_exhausted"),
            )
            raise IndexLockTimeoutError(client.registry_url, attempts)
        registry_blocked_message(attempts)
        if on_blocked is not None:
            on_blocked(attempts)
        sleep(delay)

    logger.debug("Registry index %s up to date after %d retries", safe_url(client.registry_url), attempts)
