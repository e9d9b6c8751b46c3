from __future__ import annotations

from contextlib import contextmanager
from threading import Lock
from typing import Iterator

# room_id -> [lock, holders]; an entry lives only while some turn holds or waits on it
_room_locks: dict[str, list] = {}
_lock = Lock()


@contextmanager
def room_lock(room_id: str) -> Iterator[None]:
    """Serialize turns within one room; other rooms proceed in parallel."""
    with _lock:
        entry = _room_locks.get(room_id)
        if entry is None:
            entry = _room_locks[room_id] = [Lock(), 0]
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _lock:
            entry[1] -= 1
            if entry[1] == 0:
                del _room_locks[room_id]


def active_rooms() -> int:
    with _lock:
        return len(_room_locks)
