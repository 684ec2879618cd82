"""DiskStore: get/set/drop over one JSON envelope per key, plus lifecycle and cleaner wiring."""
from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from disk_ttl_cache.errors import (
    CacheError,
    CorruptEnvelopeError,
    InvalidKeyError,
    InvalidTTLError,
    NotStartedError,
)
from disk_ttl_cache.storage import envelope as codec
from disk_ttl_cache.storage.cleaner import CacheCleaner, SweepStats, sweep
from disk_ttl_cache.storage.envelope import MAX_TTL, Envelope, now_ms
from disk_ttl_cache.storage.fs import (
    check_disk_access,
    ensure_directory,
    read_bytes_or_none,
    unlink_missing_ok,
    write_bytes,
)
from disk_ttl_cache.storage.locator import CacheKey, coerce_key, is_safe_segment, storage_path

log = logging.getLogger("disk_ttl_cache")

DEFAULT_CLEAN_EVERY_MS = 3_600_000


@dataclass(frozen=True)
class CacheEntry:
    key: CacheKey
    item: Any
    stored: float
    ttl: float  # milliseconds remaining at read time


class DiskStore:
    """
    TTL key/value cache stored as one JSON file per entry.

    The store keeps no data in memory: only the started flag and the cleaner
    handle. Concurrent get/set/drop calls are not serialized against each
    other or against the cleaner; a reader racing a writer may see a corrupt
    file, which is deleted and reported as a miss.
    """

    def __init__(self, cache_path: str | Path, clean_every: int = DEFAULT_CLEAN_EVERY_MS):
        if not cache_path:
            raise ValueError("Missing cache_path value")
        if isinstance(clean_every, bool) or not isinstance(clean_every, int) or clean_every < 0:
            raise ValueError(f"clean_every must be a non-negative integer, got {clean_every!r}")
        self.cache_path = Path(cache_path)
        self.clean_every = clean_every

        self._lock = threading.Lock()
        self._started = False
        self._cleaner: Optional[CacheCleaner] = None

    # lifecycle

    def start(self) -> None:
        with self._lock:
            if self._started:
                return
            ensure_directory(self.cache_path)
            check_disk_access(self.cache_path)
            self._started = True
            if self.clean_every:
                self._cleaner = CacheCleaner(self.cache_path, self.clean_every, self._sweep_file)
                self._cleaner.start()
        log.info("Disk cache started: %s (clean_every=%sms)", self.cache_path, self.clean_every)

    def stop(self) -> None:
        with self._lock:
            was_started = self._started
            self._started = False
            cleaner, self._cleaner = self._cleaner, None
        if cleaner is not None:
            cleaner.stop()
        if was_started:
            log.info("Disk cache stopped: %s", self.cache_path)

    def is_ready(self) -> bool:
        return self._started

    def __enter__(self) -> "DiskStore":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False

    @staticmethod
    def validate_segment_name(name: object) -> Optional[CacheError]:
        if not name or not isinstance(name, str):
            return InvalidKeyError("Empty string")
        if "\0" in name:
            return InvalidKeyError("Includes null character")
        if not is_safe_segment(name):
            return InvalidKeyError("Not a single path component")
        return None

    def storage_path_for(self, key: object) -> Path:
        return storage_path(self.cache_path, key)

    def _ensure_started(self) -> None:
        if not self._started:
            raise NotStartedError("Connection not started")

    # operations

    def get(self, key: object) -> Optional[CacheEntry]:
        self._ensure_started()
        k = coerce_key(key)
        now = now_ms()
        env, _ = self._read_live(storage_path(self.cache_path, k), now)
        if env is None:
            return None
        return CacheEntry(key=k, item=env.item, stored=env.stored, ttl=env.remaining(now))

    def set(self, key: object, value: Any, ttl: float) -> None:
        self._ensure_started()
        if isinstance(ttl, bool) or not isinstance(ttl, (int, float)):
            raise InvalidTTLError(f"Invalid ttl: {ttl!r}")
        if ttl > MAX_TTL:
            raise InvalidTTLError(f"Invalid ttl (greater than {MAX_TTL})")
        if isinstance(ttl, float) and not math.isfinite(ttl):
            raise InvalidTTLError(f"Invalid ttl: {ttl!r}")

        k = coerce_key(key)
        path = storage_path(self.cache_path, k)
        body = codec.encode(k, value, ttl)
        write_bytes(path, body)

    def drop(self, key: object) -> None:
        self._ensure_started()
        unlink_missing_ok(self.storage_path_for(key))

    def sweep(self) -> SweepStats:
        """Runs one cleaner pass in the calling thread."""
        self._ensure_started()
        return sweep(self.cache_path, self._sweep_file)

    # shared by get() and the cleaner

    def _read_live(self, path: Path, now: int) -> tuple[Optional[Envelope], bool]:
        """
        Reads the envelope at ``path``, deleting it if corrupt or expired.

        Returns (live envelope or None, whether the file was removed).
        A missing file is a miss; any other read error propagates.
        """
        data = read_bytes_or_none(path)
        if data is None:
            return None, False
        try:
            env = codec.decode(data)
        except CorruptEnvelopeError as e:
            log.debug("Removing corrupt cache file %s: %s", path, e)
            return None, self._discard(path)
        if env.is_expired(now):
            return None, self._discard(path)
        return env, False

    def _sweep_file(self, path: Path) -> bool:
        _, removed = self._read_live(path, now_ms())
        return removed

    @staticmethod
    def _discard(path: Path) -> bool:
        """Best-effort delete; failures are logged, never raised."""
        try:
            unlink_missing_ok(path)
        except OSError as e:
            log.warning("Could not remove stale cache file %s: %s", path, e)
            return False
        return True
