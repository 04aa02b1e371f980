"""
Base Repository for local database operations.

Provides session access, retry and logging decorators and a health check
shared by the merchant, ledger and activity repositories.
"""

import asyncio
import functools
import logging
from typing import Any, AsyncContextManager, Callable, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from printavo_sync.db.connection import ConnDB
from printavo_sync.utils.error_handler import DatabaseException

logger = logging.getLogger(__name__)


def with_retry(
    max_attempts: int = 3,
    delay: float = 0.2,
    backoff: float = 2.0,
    exceptions: tuple = (DatabaseException,),
) -> Callable:
    """
    Decorator for retrying database reads with exponential backoff.

    Writes are not decorated: a retried insert could mask a unique-key
    conflict as a transient failure.

    Args:
        max_attempts: Maximum number of attempts
        delay: Initial delay between retries in seconds
        backoff: Multiplier for exponential backoff
        exceptions: Tuple of exceptions to catch and retry
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            current_delay = delay
            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        logger.error(f"All {max_attempts} attempts failed for {func.__name__}")
                        raise
                    logger.warning(
                        f"Attempt {attempt}/{max_attempts} failed for {func.__name__}: {e}. "
                        f"Retrying in {current_delay:.1f}s..."
                    )
                    await asyncio.sleep(current_delay)
                    current_delay *= backoff

        return wrapper

    return decorator


def log_operation(operation_name: Optional[str] = None) -> Callable:
    """
    Decorator for logging database operations.

    Args:
        operation_name: Optional custom name for the operation
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            op_name = operation_name or f"{self.__class__.__name__}.{func.__name__}"
            logger.debug(f"Starting operation: {op_name}")
            try:
                result = await func(self, *args, **kwargs)
                logger.debug(f"Operation successful: {op_name}")
                return result
            except Exception as e:
                logger.error(f"Operation failed: {op_name} - {e}")
                raise

        return wrapper

    return decorator


class BaseRepository:
    """
    Base repository over a shared ConnDB.

    Derived repositories write raw SQL with `text()` and convert driver
    errors to DatabaseException.
    """

    def __init__(self, conn_db: ConnDB):
        self.conn_db = conn_db
        self._repository_name: str = self.__class__.__name__

    def get_session(self) -> AsyncContextManager[AsyncSession]:
        """
        Get a database session.

        Raises:
            DatabaseException: If the connection is not initialized
        """
        return self.conn_db.get_session()

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform a health check on the repository.

        Returns:
            Dict containing health status information
        """
        try:
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                result.scalar()
            return {"status": "healthy", "repository": self._repository_name}
        except Exception as e:
            return {"status": "unhealthy", "repository": self._repository_name, "error": str(e)}

    def __repr__(self) -> str:
        return f"<{self._repository_name}(initialized={self.conn_db.is_initialized()})>"
