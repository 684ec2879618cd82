"""Exception hierarchy for the disk cache.

Every error derives from :class:`CacheError` and from the closest builtin, so
callers can catch either ``CacheError`` or e.g. ``ValueError``.
Filesystem failures other than "not found" are not wrapped: the
``OSError`` raised by the filesystem reaches the caller untouched.
"""
from __future__ import annotations


class CacheError(Exception):
    """Base class for cache engine errors."""


class InvalidKeyError(CacheError, ValueError):
    """Raised when a key has no usable ``id`` or ``segment``."""


class InvalidTTLError(CacheError, ValueError):
    """Raised when a ttl is not a number or exceeds the maximum."""


class SerializationError(CacheError, ValueError):
    """Raised when a value cannot be encoded as JSON."""


class CorruptEnvelopeError(CacheError, ValueError):
    """Raised when bytes on disk are not a valid envelope."""


class NotStartedError(CacheError, RuntimeError):
    """Raised when the store is used before start() or after stop()."""


class InvalidCachePathError(CacheError, ValueError):
    """Raised when the cache root is missing or not a directory."""


class DiskAccessError(CacheError, OSError):
    """Raised when the startup self test reads back something other than it wrote."""
