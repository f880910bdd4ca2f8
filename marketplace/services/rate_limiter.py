import logging

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage
from limits.strategies import FixedWindowRateLimiter

from marketplace.errors import RateLimitError

logger = logging.getLogger(__name__)


def rate_limit_key(action: str, identifier: str) -> str:
    return f"{action}:{identifier.strip().lower()}"


class RateLimiter:
    """
    Fixed-window attempt counter keyed by action and identifier.

    Owned by the application object (created at startup, gone on restart).
    Counters live in a `limits` storage; in-memory by default, expired
    windows are dropped by the storage itself.
    """

    def __init__(self, max_attempts: int, window_seconds: int, storage: Storage = None):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._item = RateLimitItemPerSecond(max_attempts, window_seconds)
        self._storage = storage or MemoryStorage()
        self._limiter = FixedWindowRateLimiter(self._storage)

    def hit(self, action: str, identifier: str) -> bool:
        """Count one attempt; False once the window's attempts are used up."""
        return self._limiter.hit(self._item, rate_limit_key(action, identifier))

    def check(self, action: str, identifier: str) -> None:
        if not self.hit(action, identifier):
            logger.warning(f"Rate limit exceeded for {rate_limit_key(action, identifier)}")
            raise RateLimitError("Too many attempts. Please try again later.")

    def remaining(self, action: str, identifier: str) -> int:
        stats = self._limiter.get_window_stats(self._item, rate_limit_key(action, identifier))
        return stats.remaining

    def reset(self, action: str, identifier: str) -> None:
        self._limiter.clear(self._item, rate_limit_key(action, identifier))

    def clear(self) -> None:
        self._storage.reset()
