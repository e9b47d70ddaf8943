"""Error-handling policies applied at component boundaries.

Indexing is a side effect of the write path and must never fail it, so it
runs under BestEffortPolicy. Search is user-facing and synchronous, so it
runs under PropagatePolicy.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from meeting_search.exceptions import MeetingSearchError, RetrievalError
from meeting_search.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ErrorPolicy(ABC):
    """Decides what happens when a boundary operation raises."""

    @abstractmethod
    async def execute(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
        *,
        fallback: T | None = None,
        context: dict[str, Any] | None = None,
    ) -> T | None:
        """Run ``call`` under this policy.

        Args:
            operation: Short name used in log messages.
            call: Zero-argument coroutine function to run.
            fallback: Value returned when the policy absorbs a failure.
            context: Extra fields attached to log records.
        """
        ...


class BestEffortPolicy(ErrorPolicy):
    """Log failures and return the fallback instead of raising."""

    async def execute(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
        *,
        fallback: T | None = None,
        context: dict[str, Any] | None = None,
    ) -> T | None:
        try:
            return await call()
        except Exception as e:
            extra = dict(context or {})
            if isinstance(e, MeetingSearchError):
                extra["error_code"] = e.code.value
            logger.error(f"{operation} failed: {e}", extra=extra, exc_info=True)
            return fallback


class PropagatePolicy(ErrorPolicy):
    """Log failures and re-raise them as platform errors.

    Platform errors pass through unchanged; anything else is wrapped in
    ``error_type``.
    """

    def __init__(self, error_type: type[MeetingSearchError] = RetrievalError) -> None:
        self._error_type = error_type

    async def execute(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
        *,
        fallback: T | None = None,
        context: dict[str, Any] | None = None,
    ) -> T | None:
        extra = dict(context or {})
        try:
            return await call()
        except MeetingSearchError as e:
            logger.error(
                f"{operation} failed: {e.message}",
                extra={**extra, "error_code": e.code.value},
            )
            raise
        except Exception as e:
            logger.error(f"{operation} failed: {e}", extra=extra)
            raise self._error_type(
                f"{operation} failed: {e}",
                details={**extra, "error": str(e)},
            ) from e
