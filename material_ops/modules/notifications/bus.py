"""
modules/notifications/bus.py

Topic-based "something changed, refetch" notifications.

- Within one app instance, publish() calls local subscribers directly when it
  runs on the bus thread; a publish from a worker thread is queued to it.
- Across app instances, every publish also writes a small JSON stamp file
  (<signal dir>/<topic>.json) with an atomic replace. A watchdog observer on
  that directory picks up stamps written by other instances and re-emits them
  on the Qt thread.

Handlers get (topic, timestamp) and are expected to refetch in full.
Neither publish() nor subscribe() raise: a lost notification only leaves a
view stale until its next periodic re-poll.
"""
from __future__ import annotations

import json
import os
import tempfile
import time
import uuid
from collections import defaultdict
from pathlib import Path
from typing import Callable, Dict, List, Optional

from PySide6.QtCore import QObject, Qt, QThread, Signal, Slot
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from ...constants import TOPICS
from ...utils.loggers import get_logger

_log = get_logger(__name__)

Handler = Callable[[str, float], None]


class _SignalFileHandler(FileSystemEventHandler):
    """Runs on the watchdog thread; hands stamp files back to the bus."""

    def __init__(self, bus: "NotificationBus"):
        super().__init__()
        self._bus = bus

    def on_created(self, event):
        if not event.is_directory:
            self._bus._ingest(event.src_path)

    def on_modified(self, event):
        if not event.is_directory:
            self._bus._ingest(event.src_path)

    def on_moved(self, event):
        if not event.is_directory:
            self._bus._ingest(event.dest_path)


class NotificationBus(QObject):
    published = Signal(str, float)
    _remote = Signal(str, float)
    _local = Signal(str, float)

    def __init__(self, signal_dir: Optional[str] = None, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        if signal_dir is None:
            from ...config import SIGNAL_DIR
            signal_dir = SIGNAL_DIR
        self.signal_dir = Path(signal_dir)
        self.origin = f"{os.getpid()}-{uuid.uuid4().hex[:8]}"
        self._subs: Dict[str, List[Handler]] = defaultdict(list)
        self._seen: Dict[str, float] = {}
        self._observer: Optional[Observer] = None
        # watchdog thread -> Qt thread
        self._remote.connect(self._deliver_remote, Qt.QueuedConnection)
        # worker thread -> Qt thread; subscribers own timers and widgets
        self._local.connect(self._dispatch, Qt.QueuedConnection)

    # ---------- publish / subscribe ----------
    def publish(self, topic: str) -> Optional[float]:
        """Stamp `topic` as changed now. Returns the stamp, or None for an unknown topic."""
        if topic not in TOPICS:
            _log.warning("Ignoring publish on unknown topic %r", topic)
            return None
        ts = time.time()
        self._seen[topic] = max(ts, self._seen.get(topic, 0.0))
        self._write_stamp(topic, ts)
        if QThread.currentThread() == self.thread():
            self._dispatch(topic, ts)
        else:
            self._local.emit(topic, ts)
        return ts

    def publish_many(self, topics) -> List[str]:
        """Publish each topic once, in a stable order; returns the topics actually sent."""
        sent = []
        for topic in sorted(set(topics)):
            if self.publish(topic) is not None:
                sent.append(topic)
        return sent

    def subscribe(self, topic: str, handler: Handler) -> Callable[[], None]:
        if topic not in TOPICS:
            _log.warning("Subscribing to unknown topic %r; it will never fire", topic)
        self._subs[topic].append(handler)

        def unsubscribe() -> None:
            handlers = self._subs.get(topic, [])
            if handler in handlers:
                handlers.remove(handler)
        return unsubscribe

    def subscriber_count(self, topic: str) -> int:
        return len(self._subs.get(topic, []))

    def last_published(self, topic: str) -> Optional[float]:
        """Most recent stamp for `topic` from any instance, or None when never published."""
        payload = self._read_stamp(self._path(topic))
        return payload[1] if payload else None

    # ---------- cross-instance ----------
    def start(self) -> None:
        """Begin watching the signal dir. Stamps already on disk count as seen."""
        if self._observer is not None:
            return
        try:
            self.signal_dir.mkdir(parents=True, exist_ok=True)
            for topic in TOPICS:
                ts = self.last_published(topic)
                if ts is not None:
                    self._seen[topic] = max(ts, self._seen.get(topic, 0.0))
            observer = Observer()
            observer.schedule(_SignalFileHandler(self), str(self.signal_dir), recursive=False)
            observer.daemon = True
            observer.start()
        except OSError as exc:
            _log.warning("Cross-window notifications disabled: %s", exc)
            return
        self._observer = observer
        _log.info("Watching %s for notifications", self.signal_dir)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=2)
        self._observer = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def check_signals(self) -> List[str]:
        """
        Scan every stamp file once and deliver newer stamps from other instances.
        Used as the polling fallback when file events are unavailable.
        """
        fresh = []
        for topic in TOPICS:
            payload = self._read_stamp(self._path(topic))
            if payload and self._is_new(*payload):
                self._accept(*payload)
                fresh.append(topic)
        return fresh

    # ---------- internals ----------
    def _path(self, topic: str) -> Path:
        return self.signal_dir / f"{topic}.json"

    def _write_stamp(self, topic: str, ts: float) -> None:
        payload = {"topic": topic, "ts": ts, "origin": self.origin}
        tmp_path = None
        try:
            self.signal_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{topic}.", suffix=".tmp", dir=str(self.signal_dir))
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh)
            os.replace(tmp_path, self._path(topic))
            tmp_path = None
        except OSError as exc:
            _log.warning("Could not write notification stamp for %s: %s", topic, exc)
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass

    def _read_stamp(self, path: Path) -> Optional[tuple]:
        """(topic, ts, origin) from a stamp file, or None when missing/partial/foreign."""
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            topic, ts, origin = data["topic"], float(data["ts"]), str(data.get("origin") or "")
        except (OSError, ValueError, KeyError, TypeError):
            return None
        if topic not in TOPICS:
            return None
        return topic, ts, origin

    def _is_new(self, topic: str, ts: float, origin: str) -> bool:
        return origin != self.origin and ts > self._seen.get(topic, 0.0)

    def _ingest(self, src_path: str) -> None:
        path = Path(src_path)
        if path.name.startswith(".") or path.suffix != ".json":
            return
        payload = self._read_stamp(path)
        if payload and self._is_new(*payload):
            self._remote.emit(payload[0], payload[1])

    @Slot(str, float)
    def _deliver_remote(self, topic: str, ts: float) -> None:
        # duplicate file events for one write arrive here more than once
        if ts <= self._seen.get(topic, 0.0):
            return
        self._accept(topic, ts, "")

    def _accept(self, topic: str, ts: float, _origin: str) -> None:
        self._seen[topic] = ts
        self._dispatch(topic, ts)

    @Slot(str, float)
    def _dispatch(self, topic: str, ts: float) -> None:
        for handler in list(self._subs.get(topic, [])):
            try:
                handler(topic, ts)
            except Exception:
                _log.exception("Notification handler failed for %s", topic)
        self.published.emit(topic, ts)
