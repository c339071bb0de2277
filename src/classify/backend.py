"""
Shared guard for backend calls
Applies the per-operation timeout and wraps backend exceptions in the service taxonomy
"""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from .errors import ClassifyError, StorageError, StorageTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def guarded_call(
    coro: Awaitable[T],
    backend: str,
    operation: str,
    timeout: Optional[float] = None,
) -> T:
    """
    Await a backend coroutine under the service error contract.

    Args:
        coro: The backend call
        backend: Backend name used in error context (e.g. "redis")
        operation: Operation name used in error context (e.g. "store")
        timeout: Seconds before StorageTimeoutError is raised; None disables it

    Returns:
        Whatever the backend call returns

    Raises:
        StorageTimeoutError: The call did not finish within the timeout
        StorageError: Any non-taxonomy exception raised by the backend
    """
    try:
        if timeout:
            return await asyncio.wait_for(coro, timeout)
        return await coro
    except ClassifyError:
        raise
    except asyncio.TimeoutError:
        logger.error(f"[{backend}] {operation} timed out after {timeout}s")
        raise StorageTimeoutError(f"timed out after {timeout}s", backend, operation)
    except Exception as e:
        logger.error(f"[{backend}] {operation} failed: {e}")
        raise StorageError(str(e), backend, operation) from e
