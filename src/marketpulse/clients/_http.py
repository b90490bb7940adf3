"""
Shared GET helper for the source clients.

Keeps timeouts and the optional transport retry in one place so the clients
only deal with URLs, params and payloads.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from marketpulse import __version__

log = logging.getLogger(__name__)


def default_headers() -> Dict[str, str]:
    return {"User-Agent": f"market-pulse/{__version__}"}


@contextmanager
def client_scope(client: Optional[httpx.Client], timeout: float) -> Iterator[httpx.Client]:
    """Yield `client` as-is, or a short-lived one closed on exit."""
    if client is not None:
        yield client
        return
    with httpx.Client(timeout=timeout, headers=default_headers(), follow_redirects=True) as owned:
        yield owned


def _log_retry(retry_state) -> None:
    log.warning(
        f"GET attempt {retry_state.attempt_number} failed "
        f"({retry_state.outcome.exception()!r}); retrying"
    )


def get(
    client: httpx.Client,
    url: str,
    *,
    params: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
    attempts: int = 1,
) -> httpx.Response:
    """
    One GET with raise_for_status.

    Only transport errors (connect/read timeouts, resets) are retried, and only
    when attempts > 1. 4xx/5xx raise httpx.HTTPStatusError straight away.
    """

    def _once() -> httpx.Response:
        resp = client.get(url, params=params, headers=headers)
        resp.raise_for_status()
        return resp

    retrying = Retrying(
        wait=wait_exponential(min=1, max=16),
        stop=stop_after_attempt(max(1, attempts)),
        retry=retry_if_exception_type(httpx.TransportError),
        before_sleep=_log_retry,
        reraise=True,
    )
    return retrying(_once)
