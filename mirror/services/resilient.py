"""Bounded, degrade-on-failure wrapper for outbound data sources."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from mirror.services.fetcher import describe_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AdapterUnavailable(Exception):
    """Raised when a data source cannot be used (missing key, nothing configured)."""


async def resilient_fetch(
    name: str,
    fetch: Callable[[], Awaitable[T]],
    fallback: T | Callable[[], T],
    timeout: float,
) -> T:
    """Run *fetch* under a timeout and return *fallback* on any failure.

    *fallback* may be a value or a zero-argument factory. Never raises.
    """
    try:
        return await asyncio.wait_for(fetch(), timeout=timeout)
    except AdapterUnavailable as exc:
        logger.info("%s unavailable, using fallback: %s", name, exc)
    except asyncio.TimeoutError:
        logger.warning("%s timed out after %.1fs, using fallback", name, timeout)
    except Exception as exc:
        logger.warning("%s failed, using fallback: %s", name, describe_error(exc))
    return _resolve(fallback)


def _resolve(fallback: Any) -> Any:
    return fallback() if callable(fallback) else fallback
