"""Per-session scan throttle for keyboard-wedge scanner bursts.

Process-local only. It smooths input storms from a single scanning station
and gives no guarantee across sessions or processes; duplicate protection
comes from the unique index on manifest_items.
"""

import threading
import time
from collections.abc import Callable, Hashable


class ScanDebouncer:
    def __init__(self, window_ms: int = 100, clock: Callable[[], float] = time.monotonic):
        self.window_ms = window_ms
        self._clock = clock
        self._last_seen: dict[Hashable, float] = {}
        self._lock = threading.Lock()

    def allow(self, session_key: Hashable) -> bool:
        """Record a scan for ``session_key``; False if it lands inside the window."""
        if self.window_ms <= 0:
            return True

        now = self._clock()
        with self._lock:
            # forget sessions whose window has passed
            expired = [k for k, seen in self._last_seen.items() if (now - seen) * 1000 >= self.window_ms]
            for key in expired:
                del self._last_seen[key]

            if session_key in self._last_seen:
                return False
            self._last_seen[session_key] = now
            return True

    @property
    def active_sessions(self) -> int:
        """Sessions still inside their window as of the last call to allow()."""
        return len(self._last_seen)

    def reset(self, session_key: Hashable | None = None) -> None:
        with self._lock:
            if session_key is None:
                self._last_seen.clear()
            else:
                self._last_seen.pop(session_key, None)
