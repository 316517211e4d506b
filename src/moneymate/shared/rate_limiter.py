# src/moneymate/shared/rate_limiter.py
"""
Rate Limiter - Abuse Prevention for Bot Commands

Sliding-window, per-user limiter for Telegram commands. A user who exceeds
the window limit is blocked for a cool-down period.

Files that USE this module:
- moneymate.adapters.telegram.handlers (checks every command before running it)

Files that this module USES:
- None (pure utility implementation)
"""
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Optional


@dataclass(frozen=True)
class RateLimitConfig:
    """Configuration for rate limiting."""
    max_requests: int
    time_window: int  # in seconds
    block_duration: int = 300  # 5 minutes default


class RateLimiter:
    """In-memory sliding-window rate limiter keyed by user identifier."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._blocked_until: Dict[str, float] = {}

    def _prune(self, key: str, window: int, now: float) -> Deque[float]:
        hits = self._hits[key]
        while hits and hits[0] <= now - window:
            hits.popleft()
        return hits

    def is_allowed(self, identifier: str, config: RateLimitConfig) -> bool:
        """
        Record a request and report whether it may proceed.

        Args:
            identifier: Unique identifier (e.g., Telegram user id)
            config: Limit to apply

        Returns:
            True if allowed, False if limited or blocked
        """
        now = self._clock()
        until = self._blocked_until.get(identifier)
        if until is not None:
            if now < until:
                return False
            del self._blocked_until[identifier]

        hits = self._prune(identifier, config.time_window, now)
        if len(hits) >= config.max_requests:
            self._blocked_until[identifier] = now + config.block_duration
            return False
        hits.append(now)
        return True

    def blocked_for(self, identifier: str) -> Optional[float]:
        """Seconds left on a block, or None if the identifier is not blocked."""
        until = self._blocked_until.get(identifier)
        if until is None:
            return None
        remaining = until - self._clock()
        return remaining if remaining > 0 else None


RATE_LIMITS = {
    "query": RateLimitConfig(max_requests=20, time_window=60),  # /rates, /convert
    "alert_edit": RateLimitConfig(max_requests=10, time_window=60),  # /alert, /delalert
}

# Global rate limiter instance
rate_limiter = RateLimiter()
