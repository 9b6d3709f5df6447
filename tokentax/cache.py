"""
Versioned taxonomy snapshot cache.

Snapshots are keyed by taxonomy version and carry an absolute expiry.
Expiry is checked lazily on read; nothing sweeps in the background.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from .errors import Expired, NotFound
from .models import Taxonomy

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(days=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheEntry:
    taxonomy: Taxonomy
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class TaxonomyCache:
    """Thread-safe version → snapshot map with per-entry expiry."""

    def __init__(self, ttl: timedelta = DEFAULT_TTL, *, clock: Callable[[], datetime] | None = None):
        self.ttl = ttl
        self._clock = clock or _utcnow
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def now(self) -> datetime:
        return self._clock()

    def put(self, version: str, taxonomy: Taxonomy, expires_at: datetime | None = None) -> CacheEntry:
        """Store a snapshot, replacing any entry for the same version."""
        entry = CacheEntry(taxonomy=taxonomy, expires_at=expires_at or self.now() + self.ttl)
        with self._lock:
            self._entries[version] = entry
        logger.info("Cached taxonomy version %s until %s", version, entry.expires_at.isoformat())
        return entry

    def get(self, version: str) -> Taxonomy:
        """
        Fetch an unexpired snapshot.

        Raises:
            NotFound: If no snapshot exists for the version
            Expired: If the snapshot is past its expiry (it is evicted)
        """
        now = self.now()
        with self._lock:
            entry = self._entries.get(version)
            if entry is None:
                raise NotFound(f"No cached taxonomy for version {version!r}")
            if entry.is_expired(now):
                del self._entries[version]
                raise Expired(f"Cached taxonomy version {version!r} expired at {entry.expires_at.isoformat()}")
            return entry.taxonomy

    def evict(self, version: str) -> bool:
        with self._lock:
            return self._entries.pop(version, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def versions(self) -> list[str]:
        with self._lock:
            return sorted(self._entries)

    def __contains__(self, version: object) -> bool:
        now = self.now()
        with self._lock:
            entry = self._entries.get(version)  # type: ignore[arg-type]
            return entry is not None and not entry.is_expired(now)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
