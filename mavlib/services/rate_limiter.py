"""Failed-login rate limiter.

Each instance owns its own counters and reads time from an injected clock,
so the authentication service can be tested with a fixed clock and two
services never share lockout state.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from mavlib.core.clock import Clock, utcnow

logger = logging.getLogger(__name__)


class LoginRateLimiter:
    """Locks an email after ``max_attempts`` failures inside ``window``."""

    def __init__(
        self,
        max_attempts: int = 5,
        window: timedelta = timedelta(minutes=15),
        clock: Clock = utcnow,
    ):
        self.max_attempts = max_attempts
        self.window = window
        self.clock = clock
        self._failures: dict[str, list[datetime]] = {}

    @staticmethod
    def _key(email: str) -> str:
        return email.strip().lower()

    def _recent(self, key: str) -> list[datetime]:
        cutoff = self.clock() - self.window
        recent = [t for t in self._failures.get(key, []) if t > cutoff]
        if recent:
            self._failures[key] = recent
        else:
            self._failures.pop(key, None)
        return recent

    def _prune(self) -> None:
        """Drop every key whose failures have all left the window."""
        for key in list(self._failures):
            self._recent(key)

    def is_locked(self, email: str) -> bool:
        return len(self._recent(self._key(email))) >= self.max_attempts

    def locked_until(self, email: str) -> Optional[datetime]:
        recent = self._recent(self._key(email))
        if len(recent) < self.max_attempts:
            return None
        return recent[-self.max_attempts] + self.window

    def record_failure(self, email: str) -> int:
        """Count a failed attempt; return the number of failures in the window."""
        key = self._key(email)
        self._prune()
        recent = self._recent(key)
        recent.append(self.clock())
        self._failures[key] = recent
        if len(recent) >= self.max_attempts:
            logger.warning("Login locked for %s after %d failures", key, len(recent))
        return len(recent)

    def reset(self, email: str) -> None:
        self._failures.pop(self._key(email), None)
