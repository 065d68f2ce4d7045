from PySide6.QtWidgets import (
    QApplication,
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QListWidget,
    QListWidgetItem,
    QStackedWidget,
    QHBoxLayout,
    QSizePolicy,
    QLabel,
    QComboBox,
    QPushButton,
)
from PySide6.QtCore import Qt, Signal
import sys
from importlib import import_module

from .api import ApiClient, Apis
from .constants import APP_NAME, ORG_NAME
from .modules.base_module import BaseModule
from .modules.login import LoginController
from .modules.notifications import NotificationBus
from .utils import ui_helpers as uih
from .utils.loggers import get_logger
from .utils.session import SessionContext
from .utils.tasks import run_task

_log = get_logger(__name__)

ALL_BRANCHES = "All branches"


def _lazy_get(name: str, attr: str):
    """Import a module by name and fetch an attribute from it, with a clear error if missing."""
    try:
        mod = import_module(name)
    except Exception as e:
        raise ImportError(f"Failed to import module '{name}': {e}") from e
    try:
        return getattr(mod, attr)
    except AttributeError as e:
        raise ImportError(f"'{attr}' not found in module '{name}'.") from e


class MainWindow(QMainWindow):
    # emitted from whichever thread saw the 401; handled on the UI thread
    session_expired = Signal()

    def __init__(self, apis: Apis, session: SessionContext, bus: NotificationBus):
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.setWindowFlag(Qt.WindowMinimizeButtonHint, True)
        self.setWindowFlag(Qt.WindowMaximizeButtonHint, True)
        self.setMinimumSize(980, 600)

        self.apis = apis
        self.session = session
        self.bus = bus
        self._relogin_active = False

        # ---- Central layout: top bar, left nav + stacked pages ----
        central = QWidget(self)
        layout = QVBoxLayout(central)
        self.setCentralWidget(central)

        top = QHBoxLayout()
        self.lbl_user = QLabel()
        self.lbl_user.setStyleSheet("font-weight:600;")
        self.lbl_branch = QLabel("Branch:")
        self.cmb_branch = QComboBox()
        self.cmb_branch.setMinimumWidth(200)
        self.btn_logout = QPushButton("Log out")
        top.addWidget(self.lbl_user)
        top.addStretch(1)
        top.addWidget(self.lbl_branch)
        top.addWidget(self.cmb_branch)
        top.addWidget(self.btn_logout)
        layout.addLayout(top)

        self.nav = QListWidget()
        self.nav.setFixedWidth(170)
        self.nav.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Expanding)
        self.stack = QStackedWidget()

        row = QWidget()
        row_lay = QHBoxLayout(row)
        row_lay.setContentsMargins(0, 0, 0, 0)
        row_lay.addWidget(self.nav)
        row_lay.addWidget(self.stack, 1)
        layout.addWidget(row, 1)

        # module info for lazy loading, and the controllers loaded so far (by nav index)
        self.module_info: list[dict] = []
        self.modules: dict[int, tuple[str, BaseModule | None]] = {}

        self.nav.currentRowChanged.connect(self._on_nav_item_changed)
        self.cmb_branch.currentIndexChanged.connect(self._on_branch_changed)
        self.btn_logout.clicked.connect(self._logout)
        self.session_expired.connect(self._on_session_expired, Qt.QueuedConnection)
        self.apis.client.set_unauthorized_handler(self.session_expired.emit)

        self._build_pages()

    # ---------- pages ----------
    def _build_pages(self):
        self._update_user_bar()

        args = (self.apis, self.session, self.bus)
        self._add_module_deferred("Intents", "material_ops.modules.intent.controller", "IntentController", *args)
        self._add_module_deferred(
            "Site Transfers", "material_ops.modules.site_transfer.controller", "SiteTransferController", *args,
        )
        self._add_module_deferred(
            "Upcoming Deliveries", "material_ops.modules.delivery.controller", "DeliveryController", *args,
        )
        self._add_module_deferred("GRN", "material_ops.modules.grn.controller", "GrnController", *args)

        if self.nav.count():
            self.nav.setCurrentRow(0)
            self._load_module_at_index(0)

    def _teardown_pages(self):
        for _title, controller in self.modules.values():
            if controller is not None:
                controller.teardown()
        self.modules.clear()
        self.module_info.clear()
        self.nav.blockSignals(True)
        self.nav.clear()
        self.nav.blockSignals(False)
        while self.stack.count():
            w = self.stack.widget(0)
            self.stack.removeWidget(w)
            w.deleteLater()

    def _add_module_deferred(self, title: str, module_path: str, class_name: str, *args, **kwargs):
        """Add module info for deferred loading."""
        self.module_info.append({
            'title': title,
            'module_path': module_path,
            'class_name': class_name,
            'args': args,
            'kwargs': kwargs,
        })
        self.nav.addItem(QListWidgetItem(title))
        self.stack.addWidget(uih.wrap_center(QLabel(f"Loading {title}...")))

    def _on_nav_item_changed(self, index: int):
        """Load module when navigating to it."""
        if index < 0 or index >= len(self.module_info):
            return
        self._load_module_at_index(index)

    def _load_module_at_index(self, index: int):
        if index not in self.modules:
            self._load_module(index)
        self.stack.setCurrentIndex(index)

    def _load_module(self, index: int):
        info = self.module_info[index]
        QApplication.setOverrideCursor(Qt.WaitCursor)
        try:
            Controller = _lazy_get(info['module_path'], info['class_name'])
            controller = Controller(*info['args'], **info['kwargs'])
            self._replace_widget(index, controller.get_widget())
            self.modules[index] = (info['title'], controller)
        except Exception:
            _log.exception("Error loading module %s", info['title'])
            self._replace_widget(index, uih.wrap_center(QLabel(f"{info['title']}\n\nLoading failed")))
            self.modules[index] = (info['title'], None)
        finally:
            QApplication.restoreOverrideCursor()

    def _replace_widget(self, index: int, widget: QWidget):
        current_widget = self.stack.widget(index)
        self.stack.removeWidget(current_widget)
        current_widget.deleteLater()
        self.stack.insertWidget(index, widget)

    def _refresh_loaded(self):
        for _title, controller in self.modules.values():
            if controller is not None:
                controller.refresh()

    # ---------- user / branch bar ----------
    def _update_user_bar(self):
        user = self.session.user
        self.lbl_user.setText(f"{user.name} ({user.role or 'user'})" if user else "")
        scoped = self.session.is_branch_scoped
        self.lbl_branch.setVisible(scoped)
        self.cmb_branch.setVisible(scoped)
        self.cmb_branch.blockSignals(True)
        self.cmb_branch.clear()
        self.cmb_branch.addItem(ALL_BRANCHES, None)
        branch = self.session.selected_branch
        if branch is not None:
            self.cmb_branch.addItem(branch.name, branch)
            self.cmb_branch.setCurrentIndex(1)
        self.cmb_branch.blockSignals(False)
        if scoped:
            run_task(self, self.apis.branches.list, self._on_branches, self._on_branches_failed)

    def _on_branches(self, branches):
        selected = self.session.selected_branch
        self.cmb_branch.blockSignals(True)
        self.cmb_branch.clear()
        self.cmb_branch.addItem(ALL_BRANCHES, None)
        for b in branches:
            self.cmb_branch.addItem(b.name, b)
        idx = next((i for i, b in enumerate(branches, start=1) if selected and b.id == selected.id), 0)
        self.cmb_branch.setCurrentIndex(idx)
        self.cmb_branch.blockSignals(False)

    def _on_branches_failed(self, exc):
        _log.warning("Could not load branches: %s", exc)

    def _on_branch_changed(self, index: int):
        branch = self.cmb_branch.itemData(index)
        if branch is None:
            self.session.clear_branch()
        else:
            self.session.set_branch(branch)
        _log.info("Branch scope: %s", branch.name if branch else ALL_BRANCHES)
        self._refresh_loaded()

    # ---------- session ----------
    def _logout(self):
        if not uih.confirm(self, "Log out", "Sign out of this workstation?"):
            return
        self.session.clear()
        self._relogin("Signed out.")

    def _on_session_expired(self):
        if self._relogin_active:
            return
        self._relogin("Your session has expired. Please sign in again.")

    def _relogin(self, info: str):
        self._relogin_active = True
        try:
            self._teardown_pages()
            login = LoginController(self.apis.auth, self.session, self, server=self.apis.client.base_url)
            if login.prompt(info=info) is None:
                self.close()
                return
            self._build_pages()
        finally:
            self._relogin_active = False

    def closeEvent(self, event):
        self._teardown_pages()
        self.apis.client.set_unauthorized_handler(None)
        super().closeEvent(event)


def main():
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(ORG_NAME)

    session = SessionContext().load()
    client = ApiClient(session)
    apis = Apis(client)

    bus = NotificationBus()
    bus.start()
    app.aboutToQuit.connect(bus.stop)

    if not session.is_authenticated:
        login = LoginController(apis.auth, session, server=client.base_url)
        if login.prompt() is None:
            _log.info("Login cancelled; exiting")
            bus.stop()
            return

    win = MainWindow(apis, session, bus)
    win.resize(1200, 720)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
