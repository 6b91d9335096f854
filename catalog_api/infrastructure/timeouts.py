"""Bounded calls into external stores."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

import structlog

from catalog_api.domain.exceptions import DomainError, TransientStoreError

logger = structlog.get_logger()

T = TypeVar("T")


async def call_with_timeout(
    operation: str,
    awaitable: Awaitable[T],
    timeout: float | None,
) -> T:
    """Await a store call, bounding it by a timeout.

    Domain errors pass through untouched. Timeouts and any other failure of
    the store are reported as ``TransientStoreError`` with the original
    exception chained.

    Args:
        operation: Name of the store operation, for diagnostics.
        awaitable: The pending store call.
        timeout: Seconds to wait, or None for no bound.

    Returns:
        The store call's result.

    Raises:
        TransientStoreError: On timeout or store failure.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except DomainError:
        raise
    except asyncio.TimeoutError as e:
        logger.warning("Store call timed out", operation=operation, timeout=timeout)
        raise TransientStoreError(operation, e) from e
    except Exception as e:
        logger.warning(
            "Store call failed",
            operation=operation,
            error_type=type(e).__name__,
            error=str(e),
        )
        raise TransientStoreError(operation, e) from e
