"""
Rate Limiter module for the domain finder system.

Fixed-window admission control per client identity. Counters live in the
shared key-value store under ratelimit:{identity}:{window_start} and expire
after one window, so they clear themselves.

Reads and writes are not atomic; a burst of concurrent requests may be
slightly over-admitted. If the store fails the limiter lets the request
through.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

from .audit_logger import AuditLogger
from .config import RateLimitRule
from .enums import LogLevel
from .kv_store import KeyValueStore


COMPONENT = "RateLimiter"


@dataclass
class RateLimitStatus:
    """Result of a rate limit check."""

    allowed: bool
    remaining: int
    retry_after_seconds: float = 0.0
    reason: Optional[str] = None


class RateLimiter:
    """Counts requests per identity in fixed windows of rule.window_seconds."""

    KEY_PREFIX = "ratelimit"

    def __init__(
        self,
        store: KeyValueStore,
        rule: Optional[RateLimitRule] = None,
        clock: Callable[[], float] = time.time,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._store = store
        self._rule = rule or RateLimitRule()
        self._clock = clock
        self._logger = logger

    @property
    def rule(self) -> RateLimitRule:
        return self._rule

    def window_start(self, now: float) -> int:
        """Current time rounded down to the window length."""
        window = self._rule.window_seconds
        return int(now // window) * window

    def key_for(self, identity: str, window_start: int) -> str:
        return f"{self.KEY_PREFIX}:{identity}:{window_start}"

    def check(self, identity: str) -> RateLimitStatus:
        """
        Check and consume one unit for identity.

        Returns:
            RateLimitStatus; allowed is False once the counter for the
            current window has reached max_requests
        """
        now = self._clock()
        window_start = self.window_start(now)
        key = self.key_for(identity, window_start)
        max_requests = self._rule.max_requests

        try:
            count = self._read_count(key)
            if count >= max_requests:
                retry_after = max(0.0, window_start + self._rule.window_seconds - now)
                self._log(LogLevel.INFO, "Request rejected", {
                    "identity": identity,
                    "count": count,
                    "max_requests": max_requests,
                })
                return RateLimitStatus(
                    allowed=False,
                    remaining=0,
                    retry_after_seconds=retry_after,
                    reason=f"Rate limit reached: {count}/{max_requests}",
                )

            self._store.put(key, count + 1, self._rule.window_seconds)
        except Exception as e:
            self._log(LogLevel.WARN, "Rate limit store failure, allowing request", {
                "identity": identity,
                "error_type": type(e).__name__,
                "error_message": str(e),
            })
            return RateLimitStatus(allowed=True, remaining=max_requests, reason="store_unavailable")

        return RateLimitStatus(allowed=True, remaining=max_requests - count - 1)

    def _read_count(self, key: str) -> int:
        value = self._store.get(key)
        if value is None:
            return 0
        return int(value)

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, COMPONENT, message, data)
