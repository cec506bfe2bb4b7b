"""Process-wide locks for JSON data files.

Every repository instance pointing at the same file shares one lock, so a
read-modify-write on that file never interleaves with another thread's.
"""

from __future__ import annotations

import threading
from pathlib import Path

_registry_lock = threading.Lock()
_locks: dict[Path, threading.RLock] = {}


def lock_for(file_path: Path) -> threading.RLock:
    key = file_path.resolve()
    with _registry_lock:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.RLock()
        return lock
