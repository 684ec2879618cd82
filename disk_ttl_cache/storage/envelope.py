"""On-disk record format: the cached value plus its TTL metadata, as JSON."""
from __future__ import annotations

import json
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from disk_ttl_cache.errors import CorruptEnvelopeError, SerializationError
from disk_ttl_cache.storage.locator import CacheKey

MAX_TTL = 2**31 - 1  # keeps stored + ttl well inside float/date arithmetic


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Envelope:
    key: dict | None
    item: Any
    stored: float
    ttl: float

    def remaining(self, now: float) -> float:
        return self.stored + self.ttl - now

    def is_expired(self, now: float) -> bool:
        return self.remaining(now) <= 0


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False  # int too large for a float


def encode(key: CacheKey, value: Any, ttl: float, stored: int | None = None) -> bytes:
    """
    Serializes an envelope to UTF-8 JSON.

    Raises SerializationError for cycles, non-JSON types and NaN/Infinity,
    before anything is written anywhere.
    """
    if stored is None:
        stored = now_ms()
    try:
        expires = datetime.fromtimestamp((stored + ttl) / 1000, tz=timezone.utc).isoformat()
    except (OverflowError, OSError, ValueError):
        expires = None
    payload = {
        "key": key.as_dict(),
        "item": value,
        "stored": stored,
        "ttl": ttl,
        "expires": expires,
    }
    try:
        text = json.dumps(payload, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    except (TypeError, ValueError, RecursionError) as e:
        raise SerializationError(f"Cannot serialize value for {key.segment}/{key.id!r}: {e}") from e
    return text.encode("utf-8")


def decode(data: bytes) -> Envelope:
    try:
        obj = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise CorruptEnvelopeError(f"Malformed envelope: {e}") from e

    if not isinstance(obj, dict):
        raise CorruptEnvelopeError("Envelope is not a JSON object")
    if "item" not in obj:
        raise CorruptEnvelopeError("Envelope has no item")
    stored, ttl = obj.get("stored"), obj.get("ttl")
    if not _is_number(stored) or not _is_number(ttl):
        raise CorruptEnvelopeError(f"Envelope has invalid stored/ttl: {stored!r}/{ttl!r}")

    key = obj.get("key")
    return Envelope(
        key=key if isinstance(key, dict) else None,
        item=obj["item"],
        stored=stored,
        ttl=ttl,
    )
