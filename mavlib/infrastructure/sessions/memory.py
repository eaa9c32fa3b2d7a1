"""In-process session store."""

import logging
from datetime import datetime, timedelta
from typing import Optional

from mavlib.core.clock import Clock, utcnow
from mavlib.domain.repositories import ISessionStore

logger = logging.getLogger(__name__)


class MemorySessionStore(ISessionStore):
    """Keeps session records in a dict.

    Expired records are dropped on load and pruned on every save.
    """

    def __init__(self, clock: Clock = utcnow):
        self.clock = clock
        self._records: dict[str, tuple[dict, datetime]] = {}

    async def save(self, token: str, record: dict, ttl_seconds: int) -> None:
        now = self.clock()
        self._prune(now)
        self._records[token] = (dict(record), now + timedelta(seconds=ttl_seconds))

    def _prune(self, now: datetime) -> None:
        expired = [token for token, (_, expires_at) in self._records.items() if expires_at <= now]
        for token in expired:
            del self._records[token]
        if expired:
            logger.debug("Pruned %d expired sessions", len(expired))

    async def load(self, token: str) -> Optional[dict]:
        entry = self._records.get(token)
        if entry is None:
            return None
        record, expires_at = entry
        if expires_at <= self.clock():
            logger.debug("Session expired")
            self._records.pop(token, None)
            return None
        return dict(record)

    async def delete(self, token: str) -> bool:
        return self._records.pop(token, None) is not None
