"""Base classes for data providers.

Batch analysis calls providers from worker threads, so every piece of
mutable provider state (call window, cache, audit trail) is lock-guarded.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from datetime import datetime
from typing import Any

from ..core.models import AuditEntry
from ..core.types import DataSource

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window limiter: at most `calls` acquisitions per `period` seconds."""

    def __init__(self, calls: int, period: float):
        self.calls = calls
        self.period = period
        self._stamps: deque[float] = deque()
        self._lock = threading.Lock()

    def acquire(self) -> float:
        """Block until a call is allowed. Returns the seconds spent waiting."""
        with self._lock:
            now = time.monotonic()
            while self._stamps and now - self._stamps[0] >= self.period:
                self._stamps.popleft()

            waited = 0.0
            if len(self._stamps) >= self.calls:
                waited = self._stamps[0] + self.period - now
                if waited > 0:
                    time.sleep(waited)

            self._stamps.append(time.monotonic())
            return max(waited, 0.0)


class TTLCache:
    """Thread-safe key/value store whose entries expire after `ttl` seconds."""

    def __init__(self, ttl: float):
        self.ttl = ttl
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, stored_at = entry
            if time.monotonic() - stored_at >= self.ttl:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (value, time.monotonic())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class BaseProvider(ABC):
    """Abstract base class for all data providers."""

    # Subclasses must define their data source
    SOURCE: DataSource = DataSource.UNKNOWN

    def __init__(
        self,
        rate_limit_calls: int = 60,
        rate_limit_period: int = 60,
    ):
        """
        Initialize provider with rate limiting.

        Args:
            rate_limit_calls: Maximum calls per period
            rate_limit_period: Period in seconds
        """
        self.rate_limiter = RateLimiter(rate_limit_calls, rate_limit_period)
        self._audit_entries: list[AuditEntry] = []
        self._audit_lock = threading.Lock()

    def _wait_for_rate_limit(self) -> None:
        waited = self.rate_limiter.acquire()
        if waited:
            logger.debug(f"[{self.SOURCE.value}] Rate limited for {waited:.1f}s")

    def _record_audit(
        self,
        action: str,
        endpoint: str | None = None,
        success: bool = True,
        error_message: str | None = None,
        duration_ms: int | None = None,
        notes: str | None = None,
    ) -> AuditEntry:
        """Append an audit entry for one provider action."""
        entry = AuditEntry(
            timestamp=datetime.utcnow(),
            source=self.SOURCE,
            action=action,
            endpoint=endpoint,
            success=success,
            error_message=error_message,
            duration_ms=duration_ms,
            notes=notes,
        )
        with self._audit_lock:
            self._audit_entries.append(entry)
        return entry

    def get_audit_trail(self) -> list[AuditEntry]:
        """Copy of the entries recorded so far."""
        with self._audit_lock:
            return list(self._audit_entries)

    def clear_audit_trail(self) -> None:
        with self._audit_lock:
            self._audit_entries.clear()

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is available and configured."""
        pass


class CachedProvider(BaseProvider):
    """Provider whose lookups are cached for `cache_ttl_seconds`."""

    def __init__(
        self,
        cache_ttl_seconds: int = 1800,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.cache = TTLCache(cache_ttl_seconds)

    def _get_from_cache(self, key: str) -> Any | None:
        value = self.cache.get(key)
        if value is not None:
            logger.debug(f"[{self.SOURCE.value}] Cache hit: {key}")
        return value

    def _set_cache(self, key: str, value: Any) -> None:
        self.cache.set(key, value)

    def clear_cache(self) -> None:
        self.cache.clear()
