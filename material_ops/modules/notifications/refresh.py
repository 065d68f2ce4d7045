"""
modules/notifications/refresh.py

RefreshWatcher ties one view's reload callback to:
- bus topics (push from this or another app instance),
- a periodic re-poll (fallback for missed notifications),
- the application becoming active again.

Triggers arriving together are coalesced into a single reload.
"""
from __future__ import annotations

from typing import Callable, Iterable, List, Optional

from PySide6.QtCore import QObject, Qt, QTimer, Slot
from PySide6.QtGui import QGuiApplication

from ...utils.loggers import get_logger
from .bus import NotificationBus

_log = get_logger(__name__)

COALESCE_MS = 150


class RefreshWatcher(QObject):
    def __init__(
        self,
        bus: NotificationBus,
        topics: Iterable[str],
        reload: Callable[[], None],
        interval_ms: int = 0,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._bus = bus
        self._reload = reload
        self._unsubscribe: List[Callable[[], None]] = [
            bus.subscribe(topic, self._on_topic) for topic in topics
        ]

        self._pending = QTimer(self)
        self._pending.setSingleShot(True)
        self._pending.setInterval(COALESCE_MS)
        self._pending.timeout.connect(self._fire)

        self._poll = QTimer(self)
        self._poll.timeout.connect(self._on_poll)
        if interval_ms > 0:
            self._poll.start(interval_ms)

        self._app = QGuiApplication.instance()
        if self._app is not None:
            self._app.applicationStateChanged.connect(self._on_app_state)
        self._stopped = False

    @property
    def interval(self) -> int:
        return self._poll.interval() if self._poll.isActive() else 0

    def trigger(self) -> None:
        if not self._stopped:
            self._pending.start()

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        for unsub in self._unsubscribe:
            unsub()
        self._unsubscribe.clear()
        self._poll.stop()
        self._pending.stop()
        if self._app is not None:
            try:
                self._app.applicationStateChanged.disconnect(self._on_app_state)
            except (RuntimeError, TypeError):
                pass

    # ---- triggers ----
    def _on_topic(self, topic: str, ts: float) -> None:
        _log.debug("Refresh on %s (%.3f)", topic, ts)
        self.trigger()

    @Slot()
    def _on_poll(self) -> None:
        # pick up stamps the file watcher may have missed, then reload regardless
        if not self._bus.running:
            self._bus.check_signals()
        self.trigger()

    def _on_app_state(self, state) -> None:
        if state == Qt.ApplicationActive:
            self.trigger()

    @Slot()
    def _fire(self) -> None:
        if self._stopped:
            return
        try:
            self._reload()
        except Exception:
            _log.exception("Reload after refresh trigger failed")
