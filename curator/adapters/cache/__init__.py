"""Cache durable de la corbeille (diskcache)."""

from curator.adapters.cache.trash_cache import DiskTrashCache

__all__ = ["DiskTrashCache"]
