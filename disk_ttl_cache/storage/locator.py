"""Key -> file path mapping.

Paths are sharded by the first two byte pairs of the md5 of the key id:
``<root>/<segment>/<hh>/<hh>/<md5>.json``.
"""
from __future__ import annotations

import hashlib
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from disk_ttl_cache.errors import InvalidKeyError

ENVELOPE_SUFFIX = ".json"
ENVELOPE_NAME_RE = re.compile(r"^[0-9a-fA-F]{32}\.json$")


@dataclass(frozen=True)
class CacheKey:
    segment: str
    id: str

    def as_dict(self) -> dict[str, str]:
        return {"segment": self.segment, "id": self.id}


def is_safe_segment(segment: object) -> bool:
    """A segment must be a single, non-empty path component below the cache root."""
    if not isinstance(segment, str) or segment in ("", ".", ".."):
        return False
    if "\0" in segment or "/" in segment or "\\" in segment:
        return False
    return not os.path.isabs(segment) and not os.path.splitdrive(segment)[0]


def coerce_key(key: object) -> CacheKey:
    """Accepts a CacheKey or a mapping with ``id``/``segment`` and validates both fields."""
    if isinstance(key, CacheKey):
        segment, key_id = key.segment, key.id
    elif isinstance(key, Mapping):
        segment, key_id = key.get("segment"), key.get("id")
    else:
        raise InvalidKeyError(f"Invalid key: {key!r}")

    if not isinstance(key_id, str):
        raise InvalidKeyError(f"Invalid key id: {key_id!r}")
    if not is_safe_segment(segment):
        raise InvalidKeyError(f"Invalid key segment: {segment!r}")
    return CacheKey(segment=segment, id=key_id)


def key_hash(key_id: str) -> str:
    # md5 is only used for placement, never for security
    return hashlib.md5(key_id.encode("utf-8"), usedforsecurity=False).hexdigest()


def storage_path(root: Path, key: object) -> Path:
    k = coerce_key(key)
    h = key_hash(k.id)
    return root / k.segment / h[:2] / h[2:4] / f"{h}{ENVELOPE_SUFFIX}"


def is_envelope_name(name: str) -> bool:
    return ENVELOPE_NAME_RE.match(name) is not None
