"""
Concurrent session index: ``session_id -> Session``.

The table lock only guards insertion, lookup, and removal of entries.
Each entry carries its own lock, so events for one browsing context
are applied one at a time while different contexts proceed in
parallel.
"""

from __future__ import annotations

import dataclasses
import threading
from collections.abc import Callable
from typing import TypeVar

from privacy_guard.session import aggregator

T = TypeVar("T")


@dataclasses.dataclass
class _Entry:
    session: aggregator.Session
    lock: threading.Lock = dataclasses.field(default_factory=threading.Lock)


class SessionTable:
    """Thread-safe map of browsing contexts to their sessions."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_or_create(self, session_id: str, fn: Callable[[aggregator.Session], T]) -> T:
        """Run *fn* on the session, creating an empty one first if needed.

        If the entry is removed while waiting for its lock, a fresh one
        is inserted and *fn* runs on that instead.
        """
        while True:
            with self._lock:
                entry = self._entries.get(session_id)
                if entry is None:
                    entry = _Entry(aggregator.Session(session_id))
                    self._entries[session_id] = entry
            with entry.lock:
                with self._lock:
                    current = self._entries.get(session_id) is entry
                if current:
                    return fn(entry.session)

    def apply(self, session_id: str, fn: Callable[[aggregator.Session], T]) -> T | None:
        """Run *fn* under the session's lock.

        Returns ``None`` without calling *fn* when the session is
        unknown (for example, closed while the event was in flight).
        """
        with self._lock:
            entry = self._entries.get(session_id)
        if entry is None:
            return None
        with entry.lock:
            # The entry may have been removed while waiting for its lock.
            with self._lock:
                if self._entries.get(session_id) is not entry:
                    return None
            return fn(entry.session)

    def remove(self, session_id: str) -> bool:
        with self._lock:
            return self._entries.pop(session_id, None) is not None
