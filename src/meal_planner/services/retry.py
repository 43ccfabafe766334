"""Retry with linear backoff for upstream model calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import httpx

from meal_planner.errors import MealPlannerError, status_code_from_exception

_RETRYABLE_MARKERS = (
    "network",
    "connection error",
    "timeout",
    "timed out",
    "rate limit",
    "429",
    "500",
    "503",
)
_RETRYABLE_STATUS_CODES = {429, 500, 503}

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(exc: Exception) -> bool:
    """Return True for transport-class failures worth another attempt."""
    if isinstance(exc, MealPlannerError):
        return False
    if isinstance(exc, httpx.TransportError):
        return True
    if status_code_from_exception(exc) in _RETRYABLE_STATUS_CODES:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _RETRYABLE_MARKERS)


@dataclass
class RetryPolicy:
    """Re-issues a call on retryable failures, waiting ``base_delay * attempt``."""

    max_retries: int = 3
    base_delay_seconds: float = 1.0
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    async def call(self, func: Callable[[], Awaitable[T]], *, action: str) -> T:
        """Run ``func`` until it succeeds, fails fatally, or retries run out."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                if not is_retryable(exc) or attempt >= self.max_retries:
                    raise
                attempt += 1
                delay = self.base_delay_seconds * attempt
                _logger.warning(
                    "%s failed (retry %s/%s in %.1fs, status=%s): %s",
                    action,
                    attempt,
                    self.max_retries,
                    delay,
                    status_code_from_exception(exc) or "n/a",
                    exc,
                )
                await self.sleep(delay)
