"""Rate limiting adapters.

The registration throttle talks to ``AbstractRateLimiter`` only; the
in-memory fixed-window implementation is the one wired in by default.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

__all__ = ["AbstractRateLimiter", "InMemoryFixedWindowRateLimiter", "RateLimitResult"]
