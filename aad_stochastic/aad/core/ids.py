# aad/core/ids.py
from __future__ import annotations
import itertools
import threading


class IdCounter:
    """
    Process-wide source of operator-tree node ids.

    Ids are handed out strictly increasing and are never reused or reset, so
    every graph ever built in the process shares one numbering. A node is
    always created after its arguments, hence its id is larger than theirs.
    Allocation is guarded by a lock because graphs may be recorded
    concurrently from several threads.
    """

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            return next(self._counter)

    def peek(self) -> int:
        """The id the next call to `next_id` will return."""
        with self._lock:
            # itertools.count has no peek; re-create it at the same position
            n = next(self._counter)
            self._counter = itertools.count(n)
            return n


# The single counter, created at import and alive for the process lifetime.
global_counter = IdCounter()


def next_id() -> int:
    return global_counter.next_id()
