"""Shared HTTP helpers used by the manifest fetcher.

Encapsulates request/timeout error handling so callers only deal with
RemoteFetchError. Proxies are resolved from the environment (HTTP_PROXY,
HTTPS_PROXY, NO_PROXY) for every request.
"""
from __future__ import annotations

import logging
from typing import Any

import requests

from crategate.constants import Constants
from crategate.errors import RemoteFetchError
from crategate.common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def get_text(url: str, *, context: str, **kwargs: Any) -> str:
    """Perform a single GET and return the body as text.

    No retries are attempted; any failure is surfaced to the caller.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "github").
        **kwargs: Passed through to requests.get.

    Returns:
        str: The UTF-8 decoded response body.

    Raises:
        RemoteFetchError: On transport errors, non-2xx status or undecodable body.
    """
    safe_target = safe_url(url)
    proxies = requests.utils.get_environ_proxies(url)
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context,
                    proxied=bool(proxies) or None,
                )
            )
        try:
            res = requests.get(
                url,
                timeout=Constants.REQUEST_TIMEOUT,
                proxies=proxies or None,
                **kwargs
            )
        except requests.Timeout as exc:
            logger.error(
                "%s request timed out after %s seconds",
                context,
                Constants.REQUEST_TIMEOUT,
            )
            raise RemoteFetchError(url, f"timed out after {Constants.REQUEST_TIMEOUT} seconds") from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", context, exc)
            raise RemoteFetchError(url, str(exc)) from exc

    if not 200 <= res.status_code < 300:
        logger.warning(
            "HTTP non-2xx received",
            extra=extra_context(
                event="http_response",
                component="http_client",
                outcome="non_2xx",
                status_code=res.status_code,
                duration_ms=t.duration_ms(),
                target=safe_target,
            )
        )
        raise RemoteFetchError(url, f"status code {res.status_code}")

    if is_debug_enabled(logger):
        logger.debug(
            "HTTP response ok",
            extra=extra_context(
                event="http_response",
                component="http_client",
                action="GET",
                outcome="success",
                status_code=res.status_code,
                duration_ms=t.duration_ms(),
                target=safe_target,
                context=context
            )
        )
    try:
        return res.content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RemoteFetchError(url, "response body is not valid UTF-8") from exc
