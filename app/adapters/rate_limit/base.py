"""Rate limiter interfaces.

The registration throttle depends on this abstraction (not the concrete
implementation) so the in-memory store can be replaced without touching the
HTTP layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit consume operation.

    Attributes:
        allowed: Whether the attempt is allowed to proceed.
        limit: Max attempts per window.
        remaining: Remaining attempts in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the current window resets.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for per-key attempt limiters."""

    @abstractmethod
    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Record an attempt for ``key`` if budget allows.

        A blocked attempt must not change the stored count.

        Args:
            key: Unique identifier (e.g., ``ip:203.0.113.7``).
            cost: Units to consume (default 1).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def usage(self, key: str) -> int:
        """Return attempts counted for ``key`` in the current window."""
        raise NotImplementedError

    @abstractmethod
    def reset(self, key: str | None = None) -> None:
        """Forget counters for ``key``, or for every key when None."""
        raise NotImplementedError
