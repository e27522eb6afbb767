"""
Runtime package for synchronization helpers.
"""

from .concurrency import ThreadSafeAttribute, get_lock, with_lock

__all__ = ["ThreadSafeAttribute", "get_lock", "with_lock"]
