from typing import Callable, Iterable, Optional

from PySide6.QtCore import QObject
from PySide6.QtWidgets import QWidget

from ..utils import ui_helpers as uih
from ..utils.loggers import get_logger
from ..utils.tasks import run_task

_log = get_logger(__name__)


class BaseModule(QObject):
    """
    One navigation page. Subclasses keep their widget in `self.view`, their
    refresh trigger in `self.watcher` and the notification bus in `self.bus`.
    """
    view: Optional[QWidget] = None
    watcher = None
    bus = None

    def get_widget(self) -> QWidget:
        raise NotImplementedError

    def set_busy(self, busy: bool) -> None:
        if self.view is not None and hasattr(self.view, "set_busy"):
            self.view.set_busy(busy)

    def refresh(self) -> None:
        if self.watcher is not None:
            self.watcher.trigger()

    def teardown(self) -> None:
        """Stop refresh triggers; results of calls still in flight are dropped with the view."""
        if self.watcher is not None:
            self.watcher.stop()
            self.watcher = None

    def run_action(
        self,
        title: str,
        fn: Callable[[], object],
        *,
        topics: Iterable[str] = (),
        done: Optional[Callable[[object], None]] = None,
    ) -> None:
        """
        Run a mutation off the UI thread with the page marked busy. On success
        the topics are published (the page's own watcher reloads from that);
        on failure the operator may retry the same call.
        """
        topics = tuple(topics)
        self.set_busy(True)

        def _ok(result):
            self.set_busy(False)
            if self.bus is not None and topics:
                self.bus.publish_many(topics)
            if done is not None:
                done(result)

        def _failed(exc):
            self.set_busy(False)
            _log.warning("%s failed: %s", title, exc)
            if uih.retry_error(self.view, title, exc):
                self.run_action(title, fn, topics=topics, done=done)

        run_task(self.view, fn, _ok, _failed)
