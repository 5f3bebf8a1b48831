"""Reentrant busy tracking across nested save operations."""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
import threading

BusyObserver = Callable[[bool], None]


class BusyGuard:
    """Counts outstanding units of work and reports idle/busy transitions.

    Each ``acquire()`` scope increments the counter on entry and decrements it
    on exit, exceptions included. Observers are notified with ``True`` when the
    counter leaves 0 and with ``False`` when it returns to 0; nested scopes in
    between are silent.
    """

    def __init__(self, on_changed: BusyObserver | None = None) -> None:
        self._lock = threading.Lock()
        self._outstanding = 0
        self._observers: list[BusyObserver] = []
        if on_changed is not None:
            self._observers.append(on_changed)

    @property
    def is_busy(self) -> bool:
        return self._outstanding > 0

    @property
    def outstanding(self) -> int:
        return self._outstanding

    def subscribe(self, callback: BusyObserver) -> None:
        self._observers.append(callback)

    @contextmanager
    def acquire(self) -> Iterator[None]:
        """Hold the guard for the duration of the ``with`` block."""
        with self._lock:
            self._outstanding += 1
            became_busy = self._outstanding == 1
        if became_busy:
            self._notify(True)
        try:
            yield
        finally:
            with self._lock:
                self._outstanding -= 1
                became_idle = self._outstanding == 0
            if became_idle:
                self._notify(False)

    def _notify(self, busy: bool) -> None:
        # Called outside the lock so observers may query the guard
        for observer in list(self._observers):
            observer(busy)
