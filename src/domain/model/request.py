"""Request state shared by dictionary lookups.

A request is created by a dictionary, does its work on the event loop, and
is observed by consumers that may live on other threads:

    request = dictionary.get_article("cat", ["cats"])
    request.add_update_listener(on_more_data)
    await request.wait_finished()
    html = request.get_data()

All reads and writes of the accumulated state go through ``_lock``. Listener
callbacks and the asyncio events are driven from the event loop thread only.
cancel() may be called from any thread: the finished flag is set at once and
the rest of the teardown is handed to the loop.
"""

import asyncio
import threading
from typing import Callable


Listener = Callable[["Request"], None]


class Request:
    """Base request: finished flag, error string, update/finished notifications."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._finished = False
        self._error = ""
        self._update_listeners: list[Listener] = []
        self._finished_listeners: list[Listener] = []
        self._finished_event = asyncio.Event()
        self._changed_event = asyncio.Event()
        try:
            self._loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None

    # ── Consumer side ───────────────────────────────────────

    def is_finished(self) -> bool:
        with self._lock:
            return self._finished

    def error_string(self) -> str:
        """Last error observed, empty if none."""
        with self._lock:
            return self._error

    def add_update_listener(self, listener: Listener) -> None:
        self._update_listeners.append(listener)

    def add_finished_listener(self, listener: Listener) -> None:
        """Register listener; it is called at once if the request already finished."""
        if self.is_finished():
            listener(self)
            return
        self._finished_listeners.append(listener)

    async def wait_finished(self) -> None:
        await self._finished_event.wait()

    async def wait_for_change(self) -> None:
        """Wait until new data arrives or the request finishes."""
        if self.is_finished():
            return
        await self._changed_event.wait()
        self._changed_event.clear()

    def cancel(self) -> None:
        """Stop the request. Safe to call from any thread, and more than once.

        is_finished() is True when this returns. Releasing in-flight work,
        waking waiters and calling finished listeners happen on the loop
        thread; off the loop they run on its next iteration.
        """
        if not self._mark_finished():
            return
        if self._on_loop_thread():
            self._cancelled()
        else:
            self._loop.call_soon_threadsafe(self._cancelled)

    # ── Producer side ───────────────────────────────────────

    def set_error_string(self, error: str) -> None:
        with self._lock:
            self._error = error

    def update(self) -> None:
        """Notify consumers that more data is available."""
        if self.is_finished():
            return
        self._changed_event.set()
        for listener in list(self._update_listeners):
            listener(self)

    def finish(self) -> None:
        """Move to the terminal state. Safe to call more than once."""
        if self._mark_finished():
            self._notify_finished()

    def _release(self) -> None:
        """Abort in-flight work. Subclasses with transfers override this."""

    def _mark_finished(self) -> bool:
        with self._lock:
            if self._finished:
                return False
            self._finished = True
            return True

    def _on_loop_thread(self) -> bool:
        if self._loop is None:
            return True
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    def _cancelled(self) -> None:
        self._release()
        self._notify_finished()

    def _notify_finished(self) -> None:
        self._finished_event.set()
        self._changed_event.set()
        listeners, self._finished_listeners = self._finished_listeners, []
        for listener in listeners:
            listener(self)


class WordSearchRequest(Request):
    """Request producing a list of matching titles."""

    def __init__(self) -> None:
        super().__init__()
        self._matches: list[str] = []

    def matches(self) -> list[str]:
        """Snapshot of the matches found so far."""
        with self._lock:
            return list(self._matches)

    def add_matches(self, titles: list[str]) -> None:
        """Add titles; ignored once the request has finished."""
        with self._lock:
            if not self._finished:
                self._matches.extend(titles)


class DataRequest(Request):
    """Request producing a growing byte buffer."""

    def __init__(self) -> None:
        super().__init__()
        self._data = bytearray()
        self._has_any_data = False

    def has_any_data(self) -> bool:
        with self._lock:
            return self._has_any_data

    def data_size(self) -> int:
        with self._lock:
            return len(self._data)

    def get_data(self, offset: int = 0, size: int | None = None) -> bytes:
        """Snapshot of the buffer, or of ``size`` bytes starting at ``offset``."""
        with self._lock:
            end = len(self._data) if size is None else offset + size
            return bytes(self._data[offset:end])

    def append_data(self, chunk: bytes) -> None:
        """Append chunk; ignored once the request has finished."""
        with self._lock:
            if self._finished:
                return
            self._data.extend(chunk)
            self._has_any_data = True


class WordSearchRequestInstant(WordSearchRequest):
    """Search request that is finished on construction."""

    def __init__(self, matches: list[str] | None = None) -> None:
        super().__init__()
        if matches:
            self.add_matches(matches)
        self.finish()


class DataRequestInstant(DataRequest):
    """Data request that is finished on construction, optionally with data."""

    def __init__(self, data: bytes | None = None) -> None:
        super().__init__()
        if data:
            self.append_data(data)
        self.finish()
