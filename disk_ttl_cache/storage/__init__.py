from disk_ttl_cache.storage.locator import CacheKey, storage_path
from disk_ttl_cache.storage.store import CacheEntry, DiskStore

__all__ = ["CacheEntry", "CacheKey", "DiskStore", "storage_path"]
