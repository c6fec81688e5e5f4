"""
Error Handler
Global error handling and reporting
"""

import asyncio
import functools
import time
import traceback
from typing import Any, Callable, Dict, Optional

from macrobot.utils.logger import get_logger


class ErrorHandler:
    """Global error handler for the bot."""

    def __init__(self, max_errors_per_minute: int = 10):
        self.logger = get_logger("ErrorHandler")
        self.error_counts: Dict[str, int] = {}
        self.circuit_breakers: Dict[str, float] = {}
        self.max_errors_per_minute = max_errors_per_minute
        self._cleanup_task: Optional[asyncio.Task] = None

    def initialize(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Install the loop exception handler and start periodic cleanup."""
        if loop is None:
            loop = asyncio.get_running_loop()

        loop.set_exception_handler(self._async_exception_handler)
        self._cleanup_task = loop.create_task(self._periodic_cleanup())

        self.logger.info("Error handlers initialized")

    def _async_exception_handler(self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        """Handle async exceptions."""
        exception = context.get("exception")
        if exception:
            self.handle_exception(exception)
        else:
            message = context.get("message", "Unknown async error")
            self.logger.error(f"Async error: {message}")

    def handle_exception(self, error: BaseException, context: str = "") -> bool:
        """
        Handle an exception.

        Args:
            error: The exception that occurred
            context: Optional context string

        Returns:
            True if error count exceeded threshold (circuit broken)
        """
        if context:
            self.logger.error(f"[{context}] {error}")
        else:
            self.logger.error(f"{error}")

        self.logger.debug(
            "Traceback:\n" + "".join(traceback.format_exception(type(error), error, error.__traceback__))
        )

        count = self.error_counts.get(context, 0) + 1
        self.error_counts[context] = count

        if count >= self.max_errors_per_minute:
            self.logger.warning(f"Circuit breaker triggered for: {context or 'global'}")
            self.circuit_breakers[context] = self._now() + 60
            return True

        return False

    def is_circuit_broken(self, context: str) -> bool:
        """Check if a context is circuit broken."""
        break_until = self.circuit_breakers.get(context)
        if not break_until:
            return False

        if self._now() > break_until:
            del self.circuit_breakers[context]
            self.error_counts.pop(context, None)
            return False

        return True

    async def _periodic_cleanup(self) -> None:
        """Reset error counts every minute."""
        while True:
            await asyncio.sleep(60)
            self._cleanup_error_counts()

    def _cleanup_error_counts(self) -> None:
        if self.error_counts:
            self.logger.debug("Error counts cleaned up")
        self.error_counts.clear()

    def wrap(self, context: str):
        """
        Decorator that logs and swallows errors of an async handler.

        Calls are skipped while the context's circuit breaker is active.
        """
        def decorator(func: Callable) -> Callable:
            @functools.wraps(func)
            async def wrapper(*args, **kwargs):
                if self.is_circuit_broken(context):
                    self.logger.debug(f"Circuit breaker active for: {context}")
                    return None

                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    self.handle_exception(e, context)
                    return None
            return wrapper
        return decorator

    async def shutdown(self) -> None:
        """Clean shutdown."""
        self.logger.info("Shutting down error handler...")

        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None

        self.error_counts.clear()
        self.circuit_breakers.clear()

    @staticmethod
    def _now() -> float:
        return time.monotonic()


_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    global _error_handler
    if _error_handler is None:
        _error_handler = ErrorHandler()
    return _error_handler


def setup_error_handler(loop: Optional[asyncio.AbstractEventLoop] = None) -> ErrorHandler:
    """Set up the global error handler."""
    handler = get_error_handler()
    handler.initialize(loop)
    return handler
