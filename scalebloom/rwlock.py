"""Reader/writer lock guarding filter state.

Many threads may query a filter at once, but an insert needs the bit array
(and, for the scalable filter, the generation list) to itself.

Usage:
    lock = ReadWriteLock()

    with lock.read():
        found = all(bits[i] for i in indexes)

    with lock.write():
        bits[i] = True

Writers are preferred: once a writer is waiting, new readers block until it
is done, so a steady stream of queries cannot starve inserts.
"""
import threading
from contextlib import contextmanager


class ReadWriteLock:
    """Multiple concurrent readers or one exclusive writer."""

    def __init__(self):
        self._readers = 0
        self._writers_waiting = 0
        self._writer_active = False
        self._cond = threading.Condition(threading.Lock())

    @contextmanager
    def read(self):
        """Acquire shared access. Blocks while a writer is active or waiting."""
        with self._cond:
            while self._writer_active or self._writers_waiting > 0:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        """Acquire exclusive access."""
        with self._cond:
            self._writers_waiting += 1
            while self._writer_active or self._readers > 0:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer_active = True
        try:
            yield
        finally:
            with self._cond:
                self._writer_active = False
                self._cond.notify_all()
