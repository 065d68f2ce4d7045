"""
utils/tasks.py

Run blocking API calls off the UI thread.

run_task(owner, fn, on_success, on_error) executes `fn()` on the global
QThreadPool and delivers the outcome back on the UI thread through a relay
QObject parented to `owner`. When the owner is destroyed before the call
returns (view closed, module torn down) the outcome is dropped, so no view
state is touched after teardown. The network request itself is not cancelled.
"""
from __future__ import annotations

import traceback
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal, Slot

from .loggers import get_logger

_log = get_logger(__name__)


class _Relay(QObject):
    """Lives on the owner's thread; worker signals reach it queued."""
    succeeded = Signal(object)
    failed = Signal(object)

    def __init__(
        self,
        owner: QObject,
        on_success: Optional[Callable[[Any], None]],
        on_error: Optional[Callable[[BaseException], None]],
    ) -> None:
        super().__init__(owner)
        self._alive = True
        self._on_success = on_success
        self._on_error = on_error
        owner.destroyed.connect(self._owner_gone)
        self.succeeded.connect(self._deliver_success)
        self.failed.connect(self._deliver_error)

    @Slot()
    def _owner_gone(self, *_args) -> None:
        self._alive = False

    @Slot(object)
    def _deliver_success(self, value) -> None:
        self._deliver(self._on_success, value)

    @Slot(object)
    def _deliver_error(self, exc) -> None:
        if self._on_error is None:
            _log.warning("Unhandled background task error: %s", exc)
        self._deliver(self._on_error, exc)

    def _deliver(self, callback, value) -> None:
        try:
            if self._alive and callback is not None:
                callback(value)
        finally:
            self._on_success = self._on_error = None
            self.deleteLater()


class _TaskRunnable(QRunnable):
    def __init__(self, fn: Callable[[], Any], relay: _Relay) -> None:
        super().__init__()
        self.setAutoDelete(True)
        self._fn = fn
        self._relay = relay

    @Slot()
    def run(self) -> None:  # type: ignore[override]
        try:
            result = self._fn()
        except Exception as exc:
            _log.debug("Background task failed:\n%s", traceback.format_exc())
            self._emit(self._relay.failed, exc)
            return
        self._emit(self._relay.succeeded, result)

    @staticmethod
    def _emit(signal, value) -> None:
        try:
            signal.emit(value)
        except RuntimeError:
            # relay already deleted with its owner
            pass


def run_task(
    owner: QObject,
    fn: Callable[[], Any],
    on_success: Optional[Callable[[Any], None]] = None,
    on_error: Optional[Callable[[BaseException], None]] = None,
    *,
    pool: Optional[QThreadPool] = None,
) -> None:
    relay = _Relay(owner, on_success, on_error)
    (pool or QThreadPool.globalInstance()).start(_TaskRunnable(fn, relay))
