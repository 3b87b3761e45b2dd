"""Shared retry/backoff policy for every upstream call."""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from burnledger.exceptions import UpstreamError, UpstreamRateLimitedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Capped retries with a growing delay: ``base_delay * multiplier ** attempt``.

    Only ``UpstreamError`` subclasses flagged ``retryable`` are retried; anything
    else propagates on the first failure.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 30.0
    rate_limit_delay: float = 10.0
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def delay_for(self, attempt: int) -> float:
        """Delay after the given zero-based failed attempt."""
        return min(self.base_delay * (self.multiplier ** attempt), self.max_delay)

    def call(self, func: Callable[[], T], description: str = "upstream call") -> T:
        last_error: UpstreamError | None = None
        for attempt in range(self.max_attempts):
            try:
                return func()
            except UpstreamError as exc:
                last_error = exc
                if not exc.retryable or attempt >= self.max_attempts - 1:
                    break
                backoff = self.delay_for(attempt)
                if isinstance(exc, UpstreamRateLimitedError):
                    backoff = max(backoff, self.rate_limit_delay)
                logger.warning(
                    "%s failed (attempt %d/%d): %s. Retrying in %.1fs...",
                    description, attempt + 1, self.max_attempts, exc, backoff,
                )
                self.sleep(backoff)
        raise last_error
