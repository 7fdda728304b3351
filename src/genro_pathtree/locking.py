# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Re-entrant reader/writer lock.

Many threads may hold the read lock at once; the write lock is exclusive.
Both are re-entrant per thread, and the thread holding the write lock may
also take the read lock. Upgrading a read lock to a write lock is refused,
since two upgrading readers would wait on each other forever.

Writers waiting for the lock block new readers, so a steady stream of
readers cannot starve them. A thread that already holds a read lock is
always let back in.

Example:
    >>> lock = ReadWriteLock()
    >>> with lock.read_locked():
    ...     pass
    >>> with lock.write_locked():
    ...     with lock.read_locked():
    ...         pass
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """A re-entrant reader/writer lock built on threading.Condition."""

    __slots__ = ('_cond', '_readers', '_writer', '_write_count', '_waiting_writers')

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers: dict[int, int] = {}
        self._writer: int | None = None
        self._write_count = 0
        self._waiting_writers = 0

    def __repr__(self) -> str:
        with self._cond:
            state = 'write-locked' if self._writer is not None else (
                f'{len(self._readers)} reader(s)' if self._readers else 'unlocked'
            )
        return f"ReadWriteLock({state})"

    # ==================== Read ====================

    def acquire_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me or me in self._readers:
                self._readers[me] = self._readers.get(me, 0) + 1
                return
            while self._writer is not None or self._waiting_writers:
                self._cond.wait()
            self._readers[me] = 1

    def release_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            count = self._readers.get(me)
            if not count:
                raise RuntimeError("Cannot release an un-acquired read lock")
            if count == 1:
                del self._readers[me]
                if not self._readers:
                    self._cond.notify_all()
            else:
                self._readers[me] = count - 1

    # ==================== Write ====================

    def acquire_write(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                self._write_count += 1
                return
            if me in self._readers:
                raise RuntimeError("Cannot upgrade a read lock to a write lock")
            self._waiting_writers += 1
            try:
                while self._writer is not None or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = me
            self._write_count = 1

    def release_write(self) -> None:
        with self._cond:
            if self._writer != threading.get_ident():
                raise RuntimeError("Cannot release an un-acquired write lock")
            self._write_count -= 1
            if self._write_count == 0:
                self._writer = None
                self._cond.notify_all()

    # ==================== Scoped helpers ====================

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the read lock for the duration of a with block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the write lock for the duration of a with block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    @property
    def is_write_locked(self) -> bool:
        """True if some thread holds the write lock."""
        with self._cond:
            return self._writer is not None

    @property
    def owns_write(self) -> bool:
        """True if the calling thread holds the write lock."""
        with self._cond:
            return self._writer == threading.get_ident()

    @property
    def reader_count(self) -> int:
        """Number of threads currently holding the read lock."""
        with self._cond:
            return len(self._readers)
