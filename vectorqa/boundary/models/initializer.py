"""
One-time async initialization barrier.

Model backends are expensive to construct and must be initialized exactly
once per process. Concurrent callers await the same initialization; a
failed initialization is not cached, so a later call retries it.

Dependencies: asyncio
System role: Shared write-once state for model backends
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from vectorqa.core.exceptions import ModelUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OnceInitializer(Generic[T]):
    """Lazily build a value once, guarded by an asyncio.Lock."""

    def __init__(self, factory: Callable[[], Awaitable[T]], name: str) -> None:
        """
        Args:
            factory: Coroutine function producing the value
            name: Backend name used in logs and errors
        """
        self._factory = factory
        self._name = name
        self._lock = asyncio.Lock()
        self._value: T | None = None
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def get(self) -> T:
        """
        Return the initialized value, building it on first use.

        Raises:
            ModelUnavailableError: When the factory fails
        """
        if self._initialized:
            return self._value  # type: ignore[return-value]

        async with self._lock:
            if not self._initialized:
                logger.info(f"{__name__}:get - Initializing {self._name} backend")
                try:
                    self._value = await self._factory()
                except ModelUnavailableError:
                    raise
                except Exception as e:
                    raise ModelUnavailableError(
                        f"Failed to initialize {self._name} backend: {type(e).__name__}",
                        backend=self._name,
                    ) from e
                self._initialized = True
                logger.info(f"{__name__}:get - {self._name} backend ready")
        return self._value  # type: ignore[return-value]

    def reset(self) -> None:
        """Forget the initialized value (used on shutdown and in tests)."""
        self._value = None
        self._initialized = False
