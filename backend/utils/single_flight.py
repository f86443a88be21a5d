"""Non-blocking mutual exclusion for batch runners."""

import threading
from contextlib import contextmanager
from typing import Iterator


class SingleFlight:
    """Guard that lets at most one holder run at a time.

    ``try_acquire`` never blocks: a second caller is told to back off
    instead of queueing behind the first. Each runner owns its own guard.
    """

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        """True while a holder is inside the guard."""
        return self._lock.locked()

    @contextmanager
    def try_acquire(self) -> Iterator[bool]:
        """Yield True if the guard was acquired, False if already held.

        The guard is released on exit only when it was acquired.
        """
        acquired = self._lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                self._lock.release()
