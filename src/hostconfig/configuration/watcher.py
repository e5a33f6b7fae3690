"""
Polling file watcher used by file providers with reload_on_change.
"""

import threading
from pathlib import Path
from typing import Callable, Optional, Tuple

from ..infrastructure.observability.factory import get_provider_logger

FileState = Tuple[bool, int, int]


class FileChangeWatcher:
    """
    Calls ``callback`` from a daemon thread whenever the watched file is
    created, deleted, or its modification time or size changes.
    """

    def __init__(self, path: Path, callback: Callable[[], None], interval: float = 1.0):
        self.path = Path(path)
        self.callback = callback
        self.interval = interval
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._last_state: FileState = self._snapshot()
        self.logger = get_provider_logger("watcher")

    def _snapshot(self) -> FileState:
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return (False, 0, 0)
        return (True, stat.st_mtime_ns, stat.st_size)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            return

        self._last_state = self._snapshot()
        self._thread = threading.Thread(
            target=self._worker,
            name=f"hostconfig-watcher-{self.path.name}",
            daemon=True
        )
        self._thread.start()

    def _worker(self) -> None:
        while not self._stop_event.wait(self.interval):
            self.check()

    def check(self) -> bool:
        """Compare the file against the last snapshot; returns True if the callback ran."""
        state = self._snapshot()
        if state == self._last_state:
            return False

        self._last_state = state
        try:
            self.callback()
        except Exception as e:
            self.logger.error("Error in file change callback", extra={
                "path": str(self.path)
            }, exc_info=e)
        return True

    def stop(self, timeout: float = 5.0) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
        self._thread = None
