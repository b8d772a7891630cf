"""
Per-athlete cache of the Performance Management Chart.

Each athlete's series is held as an immutable tuple. Writers for the same
athlete are serialized by a per-athlete lock and publish a new tuple with a
single reference assignment, so readers never take a lock and always see
either the previous series or the complete new one.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Callable, Dict, Iterator, Optional, Sequence, Tuple

from ..metrics.fitness import PMCPoint, recompute_from

logger = logging.getLogger(__name__)

Series = Tuple[PMCPoint, ...]


class PMCStore:
    """Keyed store of PMC snapshots with single-writer-per-athlete discipline."""

    def __init__(self) -> None:
        self._snapshots: Dict[str, Series] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, athlete_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(athlete_id)
            if lock is None:
                lock = self._locks[athlete_id] = threading.Lock()
            return lock

    @contextmanager
    def writer(self, athlete_id: str) -> Iterator[None]:
        """Hold the athlete's write lock."""
        with self._lock_for(athlete_id):
            yield

    def get(self, athlete_id: str) -> Optional[Series]:
        """Return the current snapshot without locking, or None if not cached."""
        return self._snapshots.get(athlete_id)

    def update(
        self,
        athlete_id: str,
        build: Callable[[Optional[Series]], Sequence[PMCPoint]],
    ) -> Series:
        """
        Replace an athlete's series under the write lock.

        ``build`` receives the snapshot current at the time the lock is
        acquired and returns the new series.

        Returns:
            The published snapshot
        """
        with self.writer(athlete_id):
            snapshot = tuple(build(self._snapshots.get(athlete_id)))
            self._snapshots[athlete_id] = snapshot
        logger.debug("Published PMC for athlete %s (%d points)", athlete_id, len(snapshot))
        return snapshot

    def update_if_present(
        self,
        athlete_id: str,
        build: Callable[[Series], Sequence[PMCPoint]],
    ) -> Optional[Series]:
        """
        Like ``update``, but only when the athlete already has a snapshot.

        The membership check happens under the write lock, so a build that
        is publishing concurrently is either seen here and rebuilt, or has
        not yet published and will read the new data itself.

        Returns:
            The published snapshot, or None if nothing was cached
        """
        with self.writer(athlete_id):
            current = self._snapshots.get(athlete_id)
            if current is None:
                return None
            snapshot = tuple(build(current))
            self._snapshots[athlete_id] = snapshot
        logger.debug("Republished PMC for athlete %s (%d points)", athlete_id, len(snapshot))
        return snapshot

    def replace_suffix(
        self,
        athlete_id: str,
        daily_loads: Sequence[Tuple[date, float]],
        from_date: date,
        **recurrence,
    ) -> Series:
        """Rebuild every cached point from ``from_date`` forward in one swap."""
        return self.update(
            athlete_id,
            lambda current: recompute_from(current or (), daily_loads, from_date, **recurrence),
        )

    def invalidate(self, athlete_id: str) -> None:
        """Drop an athlete's snapshot so the next read rebuilds it."""
        with self.writer(athlete_id):
            self._snapshots.pop(athlete_id, None)
        logger.debug("Invalidated PMC for athlete %s", athlete_id)

    def clear(self) -> None:
        """Drop every snapshot."""
        with self._locks_guard:
            athlete_ids = list(self._snapshots)
        for athlete_id in athlete_ids:
            self.invalidate(athlete_id)

    def __contains__(self, athlete_id: str) -> bool:
        return athlete_id in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)
