"""FileWatcher — notices when another device rewrites the backing document.

The watcher compares a cheap file signature (mtime + size) between checks.
The first check reports ``GATHERED``; every later signature change reports
``UPDATED``. Delivery always happens on the thread that asks for it:

* ``poll()`` checks once and runs callbacks right away, for owners that
  drive their own loop.
* ``start()`` runs the checks on a daemon thread that only queues events;
  the owner calls ``drain()`` to run callbacks on its own thread.

While updates are disabled (around the gathered callback) changes are not
reported, and since the stored signature isn't advanced they surface on the
first check after updates are re-enabled.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from loguru import logger

from inkwell.core.storage import FileSignature, FileSystem, LocalFileSystem


class ChangeKind(StrEnum):
    GATHERED = "gathered"
    UPDATED = "updated"


@dataclass(frozen=True)
class ChangeEvent:
    kind: ChangeKind
    path: Path
    signature: FileSignature | None = None


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription:
    """Handle returned by ``FileWatcher.subscribe``; ``cancel()`` to stop delivery."""

    def __init__(self, watcher: FileWatcher, callback: ChangeCallback):
        self._watcher = watcher
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._watcher._unsubscribe(self)


class FileWatcher:
    """Polls one file and reports gathered/updated events to subscribers."""

    def __init__(self, path: str | Path, fs: FileSystem | None = None):
        self.path = Path(path).expanduser()
        self._fs = fs or LocalFileSystem()
        self._subscriptions: list[Subscription] = []
        self._lock = threading.Lock()
        self._gathered = False
        self._signature: FileSignature | None = None
        self._updates_enabled = True
        self._pending: queue.Queue[ChangeEvent] = queue.Queue()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    # -- Subscriptions ------------------------------------------------------

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        sub = Subscription(self, callback)
        self._subscriptions.append(sub)
        return sub

    def _unsubscribe(self, sub: Subscription) -> None:
        try:
            self._subscriptions.remove(sub)
        except ValueError:
            pass

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    # -- Update gating ------------------------------------------------------

    def disable_updates(self) -> None:
        with self._lock:
            self._updates_enabled = False

    def enable_updates(self) -> None:
        with self._lock:
            self._updates_enabled = True

    # -- Checking -----------------------------------------------------------

    def check(self) -> ChangeEvent | None:
        """Compare the file's signature with the last one seen. Never dispatches."""
        signature = self._fs.signature(self.path)
        with self._lock:
            if not self._gathered:
                self._gathered = True
                self._signature = signature
                return ChangeEvent(ChangeKind.GATHERED, self.path, signature)
            if not self._updates_enabled or signature == self._signature:
                return None
            self._signature = signature
            return ChangeEvent(ChangeKind.UPDATED, self.path, signature)

    def poll(self) -> ChangeEvent | None:
        """Check once and deliver any event on the calling thread."""
        event = self.check()
        if event is not None:
            self._dispatch(event)
        return event

    def drain(self) -> list[ChangeEvent]:
        """Deliver events queued by the background thread on the calling thread."""
        events = []
        while True:
            try:
                event = self._pending.get_nowait()
            except queue.Empty:
                break
            self._dispatch(event)
            events.append(event)
        return events

    def _dispatch(self, event: ChangeEvent) -> None:
        for sub in list(self._subscriptions):
            if not sub.active:
                continue
            try:
                sub.callback(event)
            except Exception as exc:
                logger.warning(f"Change callback failed for {event.kind} on {self.path}: {exc}")

    # -- Background polling -------------------------------------------------

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, interval: float = 2.0) -> None:
        """Start a daemon thread that queues events every *interval* seconds."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, args=(interval,), name=f"watch:{self.path.name}", daemon=True
        )
        self._thread.start()

    def _run(self, interval: float) -> None:
        while not self._stop.is_set():
            try:
                event = self.check()
            except Exception as exc:
                logger.warning(f"Watch check failed for {self.path}: {exc}")
                event = None
            if event is not None:
                self._pending.put(event)
            self._stop.wait(interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop background polling and drop every subscription."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        for sub in list(self._subscriptions):
            sub.cancel()
