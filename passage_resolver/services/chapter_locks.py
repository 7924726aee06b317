"""Per-chapter write locks for additive merges into the content store.

Merges triggered by remote fetches only ever touch one book/chapter pair at
a time, so writers lock that pair instead of the whole store. Readers never
lock.
"""

from __future__ import annotations

import threading
from time import time
from typing import Dict, Tuple

from passage_resolver.core.logging import get_logger

logger = get_logger(__name__)

ChapterKey = Tuple[str, str]

LOCK_TTL_SECONDS = 600  # 10 minutes


class ChapterLockRegistry:
    """Hands out one ``threading.Lock`` per ``(book, chapter)`` pair."""

    def __init__(self) -> None:
        self._locks: Dict[ChapterKey, threading.Lock] = {}
        self._last_used: Dict[ChapterKey, float] = {}
        self._meta_lock = threading.Lock()  # Protects the dictionaries

    def get_lock(self, book: str, chapter: str) -> threading.Lock:
        """Get or create the lock for a chapter.

        Args:
            book: Canonical book name.
            chapter: Chapter number as a string key.

        Returns:
            The lock guarding writes to that chapter.
        """
        key = (book, str(chapter))
        with self._meta_lock:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            self._last_used[key] = time()
            return self._locks[key]

    def cleanup_stale_locks(self, ttl_seconds: float = LOCK_TTL_SECONDS) -> int:
        """Remove idle locks older than ``ttl_seconds`` that are not held.

        Returns:
            The number of locks removed.
        """
        with self._meta_lock:
            now = time()
            stale = [
                key
                for key, last in self._last_used.items()
                if now - last > ttl_seconds and not self._locks[key].locked()
            ]
            for key in stale:
                del self._locks[key]
                del self._last_used[key]
        if stale:
            logger.debug("[store] cleaned up %d stale chapter locks", len(stale))
        return len(stale)

    def get_lock_stats(self) -> dict[str, int]:
        """Get current lock statistics for monitoring."""
        with self._meta_lock:
            return {
                "total_locks": len(self._locks),
                "held_locks": sum(1 for lock in self._locks.values() if lock.locked()),
            }

    def clear_all_locks(self) -> None:
        """Clear all locks. Only for testing purposes."""
        with self._meta_lock:
            self._locks.clear()
            self._last_used.clear()


__all__ = ["ChapterKey", "ChapterLockRegistry", "LOCK_TTL_SECONDS"]
