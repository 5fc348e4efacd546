"""Parse-once cache for 3D LUT files.

A LUT is parsed at most once per file identity. Concurrent requests for an
identity that is already being parsed wait on the same future instead of
parsing again. :meth:`LUTCache.cancel_pending` abandons every parse in flight:
waiters receive :class:`LUTLoadCancelled` and the late results are dropped.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable, Hashable
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from gradekit.errors import LUTLoadCancelled
from gradekit.lut.cube import LUTData, parse_cube_lut

if TYPE_CHECKING:
    from gradekit.protocols import FileOpener

logger = logging.getLogger(__name__)


@dataclass
class LUTCacheStats:
    """Statistics for the LUT cache.

    Attributes:
        hits: Requests served from a parsed entry
        misses: Requests that started a parse
        joined: Requests that waited on another caller's parse
        evictions: Entries dropped to stay within ``max_entries``
        cancelled: Parses discarded by :meth:`LUTCache.cancel_pending`
    """

    hits: int = 0
    misses: int = 0
    joined: int = 0
    evictions: int = 0
    cancelled: int = 0


class LUTCache:
    """Thread-safe LRU cache of parsed LUTs keyed by file identity.

    Example:
        >>> cache = LUTCache()
        >>> lut = cache.load("looks/film.cube", opener)
        >>> cache.load("looks/film.cube", opener) is lut
        True
    """

    def __init__(self, max_entries: int = 16):
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = max_entries
        self._entries: OrderedDict[Hashable, LUTData] = OrderedDict()
        self._pending: dict[Hashable, Future] = {}
        self._generation = 0
        self._lock = threading.RLock()
        self._stats = LUTCacheStats()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, identity: Hashable) -> bool:
        with self._lock:
            return identity in self._entries

    def get(self, identity: Hashable, read_text: Callable[[], str]) -> LUTData:
        """Get a parsed LUT, parsing it if needed.

        :param identity: File identity (path, or path plus modification time)
        :param read_text: Called without arguments to fetch the file content
        :returns: Parsed LUT
        :raises MalformedLUT: If the content fails to parse
        :raises UnsupportedLUTSize: If the LUT size is out of range
        :raises LUTLoadCancelled: If the request was cancelled while parsing
        """
        with self._lock:
            lut = self._entries.get(identity)
            if lut is not None:
                self._entries.move_to_end(identity)
                self._stats.hits += 1
                logger.debug("[LUTCache] Hit for %s", identity)
                return lut

            future = self._pending.get(identity)
            if future is not None:
                self._stats.joined += 1
                owner = False
            else:
                future = Future()
                self._pending[identity] = future
                self._stats.misses += 1
                owner = True
            generation = self._generation

        if not owner:
            return future.result()

        try:
            lut = parse_cube_lut(read_text())
        except Exception as exc:
            # cancel_pending takes over every future it removes from _pending
            with self._lock:
                owned = self._pending.get(identity) is future
                if owned:
                    del self._pending[identity]
            if owned:
                future.set_exception(exc)
            raise

        with self._lock:
            if generation != self._generation:
                self._stats.cancelled += 1
                logger.debug("[LUTCache] Discarded stale parse for %s", identity)
                raise LUTLoadCancelled(f"load of {identity} was cancelled")

            del self._pending[identity]
            self._entries[identity] = lut
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self._stats.evictions += 1
                logger.debug("[LUTCache] Evicted %s", evicted)

        future.set_result(lut)
        logger.info("[LUTCache] Loaded %s (size=%d)", identity, lut.size)
        return lut

    def load(self, path: str | Path, opener: FileOpener) -> LUTData:
        """Load a LUT file through the host's file opener.

        :param path: File path; its string form is the cache identity
        :param opener: Capability used to read the file
        :returns: Parsed LUT
        """
        return self.get(str(path), lambda: opener.read_text(path))

    def cancel_pending(self) -> int:
        """Abandon every parse in flight.

        :returns: Number of pending loads cancelled
        """
        with self._lock:
            self._generation += 1
            pending = list(self._pending.items())
            self._pending.clear()

        for identity, future in pending:
            future.set_exception(LUTLoadCancelled(f"load of {identity} was cancelled"))

        if pending:
            logger.info("[LUTCache] Cancelled %d pending load(s)", len(pending))
        return len(pending)

    def invalidate(self, identity: Hashable) -> bool:
        """Drop one parsed entry, e.g. after the file changed on disk.

        :returns: True if an entry was removed
        """
        with self._lock:
            return self._entries.pop(identity, None) is not None

    def clear(self) -> None:
        """Drop all parsed entries (pending loads are unaffected)."""
        with self._lock:
            self._entries.clear()
            logger.debug("[LUTCache] Cleared")

    def get_stats(self) -> LUTCacheStats:
        """Get a snapshot of cache statistics."""
        with self._lock:
            return LUTCacheStats(**vars(self._stats))
