"""
Base service class for the rating and tournament engine.

Provides access to the injected document store and the bounded retry loop
used by every transactional operation.
"""

import asyncio
from typing import Awaitable, Callable, TypeVar

from rackt.config import Config
from rackt.utils.exceptions import ConflictError, RetryExhaustedError
from rackt.utils.logger import setup_logger

logger = setup_logger(__name__)

T = TypeVar('T')

class BaseService:
    """Base class for all services that write through the document store."""
    
    def __init__(self, store, max_retries: int = None):
        """
        Initialize base service with a document store.
        
        Args:
            store: DocumentStore implementation
            max_retries: Attempts per transaction, defaults to Config.TRANSACTION_MAX_RETRIES
        """
        self.store = store
        self.max_retries = Config.TRANSACTION_MAX_RETRIES if max_retries is None else max_retries
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int) or self.max_retries < 1:
            raise ValueError(f"max_retries must be a positive integer, got {self.max_retries!r}")
    
    async def execute_with_retry(self, func: Callable[[], Awaitable[T]], operation: str) -> T:
        """
        Execute a transaction, retrying on write conflicts.
        
        Only ConflictError is retried; every other error propagates at once.
        
        Raises:
            RetryExhaustedError: If every attempt conflicted
        """
        for attempt in range(self.max_retries):
            try:
                return await func()
            except ConflictError as e:
                if attempt == self.max_retries - 1:
                    logger.error(f"{operation} failed after {self.max_retries} attempts: {e}")
                    raise RetryExhaustedError(operation, self.max_retries) from e
                logger.warning(f"Retry attempt {attempt + 1} for {operation}: {e}")
                # Exponential backoff with cap
                await asyncio.sleep(min(
                    Config.TRANSACTION_RETRY_DELAY * (2 ** attempt),
                    Config.TRANSACTION_RETRY_MAX_DELAY,
                ))
