"""Thin filesystem helpers with "not found" separated from real I/O errors."""
from __future__ import annotations

import logging
import os
import random
import stat
from collections.abc import Iterator
from pathlib import Path

from disk_ttl_cache.errors import DiskAccessError, InvalidCachePathError

log = logging.getLogger("disk_ttl_cache")

SELF_TEST_BODY = b"test-body-value"


def read_bytes_or_none(path: Path) -> bytes | None:
    """Returns file contents, or None if the file does not exist. Other OSErrors propagate."""
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None


def unlink_missing_ok(path: Path) -> None:
    path.unlink(missing_ok=True)


def write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    # single write call: readers see either the old file, an empty/truncated one, or the full payload
    path.write_bytes(data)


def ensure_directory(path: Path) -> None:
    try:
        st = path.stat()
    except FileNotFoundError as e:
        raise InvalidCachePathError(f'cache_path "{path}" does not exist') from e
    if not stat.S_ISDIR(st.st_mode):
        raise InvalidCachePathError(f'cache_path "{path}" is not a directory')


def check_disk_access(directory: Path) -> None:
    """Write, read back and delete a scratch file in ``directory``."""
    probe = directory / f"testDiskAccess.{random.randint(500, 30000)}.txt"
    probe.write_bytes(SELF_TEST_BODY)
    try:
        data = probe.read_bytes()
    finally:
        unlink_missing_ok(probe)
    if data != SELF_TEST_BODY:
        raise DiskAccessError(f'Error, value "{data!r}" does not equal "{SELF_TEST_BODY!r}" in {probe}')


def iter_files(root: Path) -> Iterator[Path]:
    """
    Yields regular files under ``root``, depth first.

    Symlinks (to files or directories) are never followed and non-regular
    entries are skipped. Entries that disappear while walking are skipped.
    """
    def _on_error(err: OSError) -> None:
        log.debug("Skipping unreadable directory during walk: %s", err)

    for dirpath, _, filenames in os.walk(root, onerror=_on_error, followlinks=False):
        for fn in filenames:
            fp = Path(dirpath) / fn
            try:
                st = fp.lstat()
            except FileNotFoundError:
                continue
            # skips symlinks, fifos, sockets and devices
            if stat.S_ISREG(st.st_mode):
                yield fp
