# cerebro/memory/session_memory.py
from __future__ import annotations
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from config import settings

MEMORY_FIELDS = ("unique_id", "name_split", "team", "position")


def session_key(session_id: Any) -> str:
    return str(session_id or "")[: settings.SESSION_ID_MAX_LENGTH]


class SessionMemory:
    """
    Remembers the last player each chat session resolved.

    Entries expire `ttl` seconds after their last write and are dropped lazily
    when read. Once `max_entries` sessions are held, the least recently used
    one is evicted. Each operation holds the lock; callers racing on the same
    session see last-write-wins.
    """

    def __init__(
        self,
        ttl: float = settings.SESSION_TTL_SECONDS,
        max_entries: int = settings.SESSION_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self.clock = clock
        self._data: "OrderedDict[str, Tuple[Dict[str, Any], float]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, session_id: Any) -> Optional[Dict[str, Any]]:
        key = session_key(session_id)
        if not key:
            return None
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            player, updated_at = item
            if self.clock() - updated_at > self.ttl:
                del self._data[key]
                return None
            self._data.move_to_end(key)
            return dict(player)

    def set(self, session_id: Any, player: Optional[Mapping[str, Any]]) -> None:
        key = session_key(session_id)
        if not key or not player or not player.get("unique_id"):
            return
        entry = {f: player.get(f) for f in MEMORY_FIELDS}
        with self._lock:
            self._data[key] = (entry, self.clock())
            self._data.move_to_end(key)
            while len(self._data) > self.max_entries:
                self._data.popitem(last=False)

    def clear(self, session_id: Any = None) -> None:
        with self._lock:
            if session_id is None:
                self._data.clear()
            else:
                self._data.pop(session_key(session_id), None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
