"""Retry policy for upstream HTTP fetches."""

from __future__ import annotations

import logging
from typing import Any, Callable

import httpx
from tenacity import RetryCallState, retry, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from fplsquad.config import http_retries


logger = logging.getLogger(__name__)


def is_retryable(exc: BaseException) -> bool:
    """Transport failures, rate limiting and 5xx responses are retried; other 4xx are final."""

    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


def default_http_retry(
    label: str, retries: int | None = None
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Return a tenacity decorator making ``retries`` extra attempts with jittered backoff.

    ``retries`` defaults to ``FPLSQUAD_HTTP_RETRIES``.
    """

    attempts = (http_retries() if retries is None else max(0, retries)) + 1

    def _log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning("Retrying %s (attempt %d): %s", label, retry_state.attempt_number, error)

    return retry(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential_jitter(initial=1, max=10),
        retry=retry_if_exception(is_retryable),
        before_sleep=_log_retry,
        reraise=True,
    )
