# fsmhooks/runtime/concurrency.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Optional


def get_lock() -> threading.RLock:
    """
    Provide a new lock instance to be used for synchronization.

    Reentrant, so an owner may call its own locked helpers.
    """
    return threading.RLock()


@contextmanager
def with_lock(lock):
    """
    A convenience context manager that acquires the given lock upon entry and
    releases it upon exit, ensuring safe access to shared resources.
    """
    lock.acquire()
    try:
        yield
    finally:
        lock.release()


class ThreadSafeAttribute:
    """
    Descriptor storing an instance attribute behind its own lock.

    Every read and write goes through the lock, so other threads always see a
    complete value. It does not protect mutation of the stored object itself;
    owners that mutate a stored container still need their own lock.

    Example:
        class Observer:
            hooks = ThreadSafeAttribute()
    """

    def __init__(self) -> None:
        self._name: Optional[str] = None

    def __set_name__(self, owner: type, name: str) -> None:
        self._name = name

    @property
    def storage_name(self) -> str:
        return f"_{self._name}"

    def _lock_for(self, instance: Any):
        key = f"_{self._name}_lock"
        lock = instance.__dict__.get(key)
        if lock is None:
            # dict.setdefault is atomic, so two racing threads get the same lock
            lock = instance.__dict__.setdefault(key, get_lock())
        return lock

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        with with_lock(self._lock_for(instance)):
            try:
                return instance.__dict__[self.storage_name]
            except KeyError:
                raise AttributeError(self._name) from None

    def __set__(self, instance: Any, value: Any) -> None:
        with with_lock(self._lock_for(instance)):
            instance.__dict__[self.storage_name] = value
