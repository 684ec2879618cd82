"""Background sweeper that evicts expired and corrupt envelopes."""
from __future__ import annotations

import logging
import random
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from disk_ttl_cache.storage.fs import iter_files
from disk_ttl_cache.storage.locator import is_envelope_name

log = logging.getLogger("disk_ttl_cache")

FIRST_SWEEP_JITTER_MS = (100, 500)


@dataclass
class SweepStats:
    scanned: int = 0
    evicted: int = 0
    failed: int = 0


def sweep(root: Path, inspect: Callable[[Path], bool], stop_event: Optional[threading.Event] = None) -> SweepStats:
    """
    Walks ``root`` once and passes every envelope file to ``inspect``.

    ``inspect`` returns True when it removed the file. Its exceptions are
    logged and counted, never raised. The walk ends early once ``stop_event``
    is set.
    """
    stats = SweepStats()
    for fp in iter_files(root):
        if stop_event is not None and stop_event.is_set():
            break
        if not is_envelope_name(fp.name):
            continue
        stats.scanned += 1
        try:
            if inspect(fp):
                stats.evicted += 1
        except Exception as e:
            stats.failed += 1
            log.warning("Cleaner could not process %s: %s", fp, e)
    return stats


class CacheCleaner:
    """
    Runs :func:`sweep` on a daemon thread every ``interval_ms`` milliseconds.

    The first sweep happens after a short random jitter so that many
    instances starting together do not hit the disk at the same moment.
    """

    def __init__(self, root: Path, interval_ms: int, inspect: Callable[[Path], bool]) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.root = root
        self.interval_ms = int(interval_ms)
        self._inspect = inspect
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.sweeps = 0
        self.last_stats: Optional[SweepStats] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._worker, daemon=True, name="disk-cache-cleaner")
        self._thread.start()

    def _worker(self) -> None:
        delay_ms = random.uniform(*FIRST_SWEEP_JITTER_MS)
        # wait() returns True once stop() was called
        while not self._stop_event.wait(delay_ms / 1000):
            stats = sweep(self.root, self._inspect, self._stop_event)
            self.sweeps += 1
            self.last_stats = stats
            log.debug(
                "Cache sweep #%s of %s: scanned=%s evicted=%s failed=%s",
                self.sweeps, self.root, stats.scanned, stats.evicted, stats.failed,
            )
            delay_ms = self.interval_ms

    def stop(self) -> None:
        """Stops the worker. Once this returns, no further sweep will run."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
