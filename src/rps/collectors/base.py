"""Abstract base class for data collectors.

A collector fetches one model asynchronously. DataCollector wraps each
attempt in a CollectionResult carrying timing and error details, and
handles timeouts and retries so concrete collectors only implement
collect().
"""

from abc import ABC, abstractmethod
import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
import logging
import time
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


class CollectionError(Exception):
    """Base class for collector failures.

    Attributes:
        retryable: Whether another attempt may succeed
    """

    retryable: bool = True


@dataclass
class CollectionResult(Generic[T]):
    """Outcome of one collection (or of the last of several attempts).

    Attributes:
        success: True when data holds the collected model
        data: The collected model (None on failure)
        error: Failure description (None on success)
        exception: The exception behind the failure, if any
        attempts: Attempts made, including this one
        collection_time_ms: Duration of the last attempt in milliseconds
        timestamp: When the last attempt started
        collector_name: Name of the collector that produced this result
    """

    success: bool
    data: T | None = None
    error: str | None = None
    exception: Exception | None = None
    attempts: int = 1
    collection_time_ms: float = 0.0
    timestamp: datetime = field(default_factory=_utcnow)
    collector_name: str = ""

    def __post_init__(self) -> None:
        if self.success and self.data is None:
            raise ValueError("Successful collection must include data")
        if not self.success and self.error is None:
            raise ValueError("Failed collection must include error message")


class DataCollector(ABC, Generic[T]):
    """Base class for async collectors.

    Subclasses set ``name`` and ``timeout`` and implement collect(), raising
    CollectionError (or a subclass) on expected failures. Anything else is
    a bug and propagates out of safe_collect().

    Example:
        class AgentCollector(DataCollector[ProcessTable]):
            name = "agent"

            async def collect(self) -> ProcessTable:
                ...
    """

    name: str = "unnamed_collector"
    timeout: float = 5.0

    def __init__(self) -> None:
        self._attempts = 0
        self._failures = 0
        self._last_success: datetime | None = None

    @property
    def last_collection(self) -> datetime | None:
        """When the last successful collection finished."""
        return self._last_success

    @property
    def stats(self) -> dict[str, object]:
        """Attempt and failure counts plus the last successful collection time."""
        return {
            "name": self.name,
            "total_collections": self._attempts,
            "total_failures": self._failures,
            "last_collection": self._last_success,
        }

    @abstractmethod
    async def collect(self) -> T:
        """Collect data once.

        Raises:
            CollectionError: On an expected failure
        """
        ...

    async def safe_collect(self) -> CollectionResult[T]:
        """Run collect() once under ``timeout``, capturing failures.

        Returns:
            CollectionResult with either data or error set
        """
        self._attempts += 1
        started_at = _utcnow()
        started = time.perf_counter()

        try:
            data = await asyncio.wait_for(self.collect(), timeout=self.timeout)
        except (CollectionError, TimeoutError) as e:
            self._failures += 1
            error = str(e) or f"timed out after {self.timeout:.1f}s"
            logger.debug("Collector '%s' failed: %s", self.name, error)
            return CollectionResult(
                success=False,
                error=error,
                exception=e,
                collection_time_ms=(time.perf_counter() - started) * 1000,
                timestamp=started_at,
                collector_name=self.name,
            )

        self._last_success = _utcnow()
        return CollectionResult(
            success=True,
            data=data,
            collection_time_ms=(time.perf_counter() - started) * 1000,
            timestamp=started_at,
            collector_name=self.name,
        )

    async def collect_with_retry(
        self,
        max_retries: int = 3,
        base_delay: float = 0.5,
    ) -> CollectionResult[T]:
        """Call safe_collect() up to ``max_retries`` times.

        Sleeps ``base_delay * attempt`` seconds between attempts. A failure
        whose exception has ``retryable = False`` ends the loop at once.

        Args:
            max_retries: Maximum number of attempts
            base_delay: Delay unit in seconds between attempts

        Returns:
            The first successful result, or the last failed one
        """
        if max_retries < 1:
            return CollectionResult(
                success=False,
                error="No collection attempts made",
                attempts=0,
                collector_name=self.name,
            )

        for attempt in range(1, max_retries + 1):
            result = await self.safe_collect()
            result.attempts = attempt
            if result.success:
                return result

            exc = result.exception
            if isinstance(exc, CollectionError) and not exc.retryable:
                logger.debug("Collector '%s': not retrying: %s", self.name, result.error)
                return result

            if attempt < max_retries:
                delay = base_delay * attempt
                logger.debug(
                    "Collector '%s': attempt %d/%d failed (%s), retrying in %.1fs",
                    self.name,
                    attempt,
                    max_retries,
                    result.error,
                    delay,
                )
                await asyncio.sleep(delay)

        if max_retries > 1:
            logger.warning(
                "Collector '%s': giving up after %d attempts: %s",
                self.name,
                max_retries,
                result.error,
            )
        return result
