"""Fixed-window rate limiter for contact form submissions.

State lives behind a ``RateLimitStore`` so a multi-instance deployment can
swap in a shared store.  The default store is process-local and
non-persistent: counters reset on restart and are not shared between
workers.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from typing import Protocol

from site_api.models.contact import RateLimitResult
from site_api.services.clock import Clock, system_clock

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5
DEFAULT_WINDOW_MS = 60_000
UNKNOWN_IP_LIMIT = 10
CLEANUP_INTERVAL_MS = 300_000  # 5 minutes

UNKNOWN_IDENTIFIER = "unknown"
UNKNOWN_BUCKET = "global-unknown"


@dataclass(frozen=True)
class RateLimitRecord:
    count: int
    window_reset_at: float


class RateLimitStore(Protocol):
    """Key/value storage for rate limit records."""

    def get(self, key: str) -> RateLimitRecord | None: ...

    def set(self, key: str, record: RateLimitRecord) -> None: ...

    def delete(self, key: str) -> None:
        """Remove a record. Callers hold ``lock(key)``."""
        ...

    def keys(self) -> list[str]: ...

    def lock(self, key: str) -> AbstractContextManager[None]:
        """Serialize read-modify-write access to one key."""
        ...


@dataclass
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class InMemoryRateLimitStore:
    """Dict-backed store with one lock per key.

    A key's lock exists only while some thread holds or waits on it.
    """

    def __init__(self) -> None:
        self._records: dict[str, RateLimitRecord] = {}
        self._locks: dict[str, _KeyLock] = {}
        # Guards the lock registry and whole-map operations
        self._registry_lock = threading.Lock()

    def get(self, key: str) -> RateLimitRecord | None:
        return self._records.get(key)

    def set(self, key: str, record: RateLimitRecord) -> None:
        self._records[key] = record

    def delete(self, key: str) -> None:
        with self._registry_lock:
            self._records.pop(key, None)

    def keys(self) -> list[str]:
        with self._registry_lock:
            return list(self._records)

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        with self._registry_lock:
            entry = self._locks.setdefault(key, _KeyLock())
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._registry_lock:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        with self._registry_lock:
            self._records.clear()


class RateLimiter:
    """Per-identifier fixed-window counter.

    Usage::

        limiter = RateLimiter()
        result = limiter.check("203.0.113.7", limit=5, window_ms=60_000)
        if result.limited:
            ...
    """

    def __init__(
        self,
        store: RateLimitStore | None = None,
        clock: Clock = system_clock,
        cleanup_interval_ms: int = CLEANUP_INTERVAL_MS,
    ) -> None:
        self.store: RateLimitStore = (
            store if store is not None else InMemoryRateLimitStore()
        )
        self._clock = clock
        self._cleanup_interval_ms = cleanup_interval_ms
        self._last_cleanup = clock()
        self._cleanup_lock = threading.Lock()

    def cleanup_expired(self) -> int:
        """Evict records whose window has passed, at most once per interval.

        Runs inline on the request path.  Returns the number of evicted keys.
        """
        now = self._clock()
        with self._cleanup_lock:
            if now - self._last_cleanup < self._cleanup_interval_ms:
                return 0
            self._last_cleanup = now

        evicted = 0
        for key in self.store.keys():
            with self.store.lock(key):
                record = self.store.get(key)
                if record is not None and now > record.window_reset_at:
                    self.store.delete(key)
                    evicted += 1
        if evicted:
            logger.debug("Rate limiter evicted %d expired entries", evicted)
        return evicted

    def check(
        self,
        identifier: str,
        limit: int = DEFAULT_LIMIT,
        window_ms: int = DEFAULT_WINDOW_MS,
    ) -> RateLimitResult:
        """Count one request against *identifier* and report whether it is limited.

        A limited request does not increment the counter.
        """
        self.cleanup_expired()

        with self.store.lock(identifier):
            now = self._clock()
            record = self.store.get(identifier)

            if record is None or now > record.window_reset_at:
                fresh = RateLimitRecord(count=1, window_reset_at=now + window_ms)
                self.store.set(identifier, fresh)
                return RateLimitResult(limited=False, remaining=limit - 1)

            if record.count >= limit:
                return RateLimitResult(limited=True, remaining=0)

            count = record.count + 1
            self.store.set(
                identifier,
                RateLimitRecord(count=count, window_reset_at=record.window_reset_at),
            )
            return RateLimitResult(limited=False, remaining=limit - count)


def resolve_bucket(
    identifier: str | None,
    *,
    default_limit: int = DEFAULT_LIMIT,
    unknown_limit: int = UNKNOWN_IP_LIMIT,
) -> tuple[str, int]:
    """Map a caller identifier to its (bucket key, limit).

    Callers without a resolvable address share one bucket with a higher limit.
    """
    if not identifier or identifier == UNKNOWN_IDENTIFIER:
        return UNKNOWN_BUCKET, unknown_limit
    return identifier, default_limit
