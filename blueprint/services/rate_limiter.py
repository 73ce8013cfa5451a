import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

from blueprint.config import settings


@dataclass
class RateLimitRecord:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitStatus:
    remaining: int
    reset_at: float


class RateLimiter:
    """
    Fixed-window request counter keyed by client (usually the IP address).

    Records live in memory only, so a restart forgives everybody. That is
    acceptable for a courtesy throttle in front of a free-tier model.
    """

    def __init__(
        self,
        max_requests: int | None = None,
        window: float | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.max_requests = max_requests if max_requests is not None else settings.RATE_LIMIT_MAX_REQUESTS
        self.window = window if window is not None else settings.RATE_LIMIT_WINDOW
        self._clock = clock
        self._records: Dict[str, RateLimitRecord] = {}
        self._next_sweep = self._clock() + self.window
        self._lock = threading.Lock()

    def admit(self, key: str) -> bool:
        with self._lock:
            now = self._clock()
            # Expired records are purged at most once per window
            if now >= self._next_sweep:
                self._purge(now)

            record = self._records.get(key)

            if record is None or now > record.reset_at:
                self._records[key] = RateLimitRecord(count=1, reset_at=now + self.window)
                return True

            if record.count >= self.max_requests:
                return False

            record.count += 1
            return True

    def status(self, key: str) -> RateLimitStatus:
        with self._lock:
            now = self._clock()
            record = self._records.get(key)
            if record is None or now > record.reset_at:
                return RateLimitStatus(remaining=self.max_requests, reset_at=now + self.window)
            return RateLimitStatus(
                remaining=max(0, self.max_requests - record.count),
                reset_at=record.reset_at,
            )

    def retry_after(self, key: str) -> int:
        """Whole seconds until the key's window resets (never less than 1)."""
        info = self.status(key)
        return max(1, math.ceil(info.reset_at - self._clock()))

    def sweep(self) -> int:
        """Drop expired records. Returns how many were removed."""
        with self._lock:
            return self._purge(self._clock())

    def _purge(self, now: float) -> int:
        expired = [key for key, record in self._records.items() if now > record.reset_at]
        for key in expired:
            del self._records[key]
        self._next_sweep = now + self.window
        return len(expired)

    def __len__(self) -> int:
        return len(self._records)
