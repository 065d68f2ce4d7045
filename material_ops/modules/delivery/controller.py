from PySide6.QtCore import QRegularExpression, QSortFilterProxyModel, Qt, QTimer
from PySide6.QtWidgets import QDialog, QFileDialog, QWidget

from ...constants import (
    LIST_PAGE_SIZE,
    POLL_INTERVALS,
    TOPIC_DELIVERY,
    TOPIC_INTENT,
    TOPIC_UPCOMING_DELIVERY,
)
from ...utils import ui_helpers as uih
from ...utils.loggers import get_logger
from ...utils.tasks import run_task
from ...widgets.attachments import FILE_FILTER
from ..base_module import BaseModule
from ..notifications import RefreshWatcher
from .checklist import DeliveryChecklistDialog
from .model import DeliveriesTableModel
from .reconciliation import DeliveryReconciler
from .view import TYPE_ALL, DeliveryView

_log = get_logger(__name__)

SEARCH_DEBOUNCE_MS = 400
REFRESH_TOPICS = (TOPIC_UPCOMING_DELIVERY, TOPIC_DELIVERY, TOPIC_INTENT)
MUTATION_TOPICS = (TOPIC_UPCOMING_DELIVERY, TOPIC_DELIVERY)


class DeliveryController(BaseModule):
    def __init__(self, apis, session, bus):
        super().__init__()
        self.apis = apis
        self.api = apis.deliveries
        self.session = session
        self.bus = bus
        self.reconciler = DeliveryReconciler(
            apis.deliveries, bus,
            purchase_orders_api=apis.purchase_orders,
            site_transfers_api=apis.site_transfers,
        )
        self.view = DeliveryView(is_admin=session.is_admin)

        self._page = 1
        self._search = ""
        self._loaded = []
        self._loading = False
        self._reload_again = False

        self.base_model = DeliveriesTableModel([])
        self.proxy = QSortFilterProxyModel(self.view)
        self.proxy.setSourceModel(self.base_model)
        self.proxy.setFilterCaseSensitivity(Qt.CaseInsensitive)
        self.proxy.setFilterKeyColumn(-1)
        self.view.table.setModel(self.proxy)
        self.view.table.selectionModel().selectionChanged.connect(self._update_details)

        self._debounce = QTimer(self.view)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(SEARCH_DEBOUNCE_MS)
        self._debounce.timeout.connect(self._on_search_settled)

        self._wire()
        self.watcher = RefreshWatcher(bus, REFRESH_TOPICS, self._reload, POLL_INTERVALS["delivery"], parent=self.view)
        self._reload()

    def get_widget(self) -> QWidget:
        return self.view

    def _wire(self):
        self.view.btn_checklist.clicked.connect(self._open_checklist)
        self.view.table.doubleClicked.connect(lambda *_: self._open_checklist())
        self.view.btn_upload.clicked.connect(self._upload_receipts)
        self.view.btn_delete.clicked.connect(self._delete)
        self.view.btn_delete_all.clicked.connect(self._delete_all)
        self.view.btn_refresh.clicked.connect(self._reload)
        self.view.cmb_type.currentIndexChanged.connect(lambda *_: self._populate())
        self.view.search.textChanged.connect(self._apply_filter)
        self.view.pager.page_requested.connect(self._goto_page)

    # ---------- loading ----------
    def _reload(self):
        if self._loading:
            self._reload_again = True
            return
        self._loading = True
        self.set_busy(True)
        page, search = self._page, self._search
        run_task(
            self.view,
            lambda: self.api.list(page=page, limit=LIST_PAGE_SIZE, search=search),
            self._on_loaded,
            self._on_load_failed,
        )

    def _on_loaded(self, page):
        self._loaded = list(page.items)
        self.view.pager.set_page(page.page, page.total_pages, page.total)
        self.view.banner.show_message(None)
        self._populate()
        self._done_loading()

    def _on_load_failed(self, exc):
        _log.warning("Loading upcoming deliveries failed: %s", exc)
        self.view.banner.show_message(uih.error_text(exc))
        self._done_loading()

    def _done_loading(self):
        self._loading = False
        self.set_busy(False)
        if self._reload_again:
            self._reload_again = False
            self._reload()

    def _populate(self):
        """Apply the PO/ST type filter to the loaded page and keep the selection."""
        keep = self._selected()
        kind = self.view.type_filter()
        rows = self._loaded if kind == TYPE_ALL else [d for d in self._loaded if d.type == kind]
        self.base_model.set_rows(rows)
        row = self.base_model.row_of(keep.id) if keep else None
        if row is not None:
            self.view.table.selectRow(self.proxy.mapFromSource(self.base_model.index(row, 0)).row())
        elif self.proxy.rowCount() > 0:
            self.view.table.selectRow(0)
        else:
            self.view.details.clear()

    def _apply_filter(self, text: str):
        self.proxy.setFilterRegularExpression(QRegularExpression(QRegularExpression.escape(text)))
        self._debounce.start()

    def _on_search_settled(self):
        self._search = self.view.search.text().strip()
        self._page = 1
        self._reload()

    def _goto_page(self, page: int):
        self._page = max(1, page)
        self._reload()

    def _selected(self):
        row = self.view.table.selected_source_row()
        return self.base_model.at(row) if row is not None else None

    def _update_details(self, *args):
        self.view.details.set_data(self._selected())

    # ---------- checklist ----------
    def _open_checklist(self):
        d = self._selected()
        if d is None:
            uih.info(self.view, "Delivery", "Select a delivery first.")
            return
        self.set_busy(True)
        # work on the server's current items, not the possibly stale list row
        run_task(self.view, lambda: self.api.get(d.id), self._show_checklist, self._on_fetch_failed)

    def _on_fetch_failed(self, exc):
        self.set_busy(False)
        uih.error(self.view, "Delivery", uih.error_text(exc))

    def _show_checklist(self, delivery):
        self.set_busy(False)
        dlg = DeliveryChecklistDialog(delivery, self.reconciler, self.view)
        if dlg.exec() != QDialog.Accepted or dlg.result_record is None:
            return
        result = dlg.result_record
        text = f"Delivery {delivery.reference} is now {result.status}."
        if result.origin_updated:
            text += f"\n{delivery.type} {delivery.reference} marked as transferred."
        if result.warnings:
            text += "\n\n" + "\n".join(result.warnings)
        uih.info(self.view, "Delivery Updated", text)

    # ---------- other actions ----------
    def _upload_receipts(self):
        d = self._selected()
        if d is None:
            uih.info(self.view, "Receipts", "Select a delivery first.")
            return
        files, _ = QFileDialog.getOpenFileNames(self.view, "Upload Receipts", "", FILE_FILTER)
        if not files:
            return
        self.run_action(
            "Upload Receipts",
            lambda: self.api.upload_receipts(d.id, files),
            topics=MUTATION_TOPICS,
            done=lambda _r: uih.info(self.view, "Receipts", f"{len(files)} receipt(s) uploaded."),
        )

    def _delete(self):
        d = self._selected()
        if d is None:
            return
        if not uih.confirm(self.view, "Delete Delivery", f"Delete delivery {d.reference}?"):
            return
        self.run_action("Delete Delivery", lambda: self.api.delete(d.id), topics=MUTATION_TOPICS)

    def _delete_all(self):
        if not uih.confirm(self.view, "Delete All Deliveries", "Delete every upcoming delivery? This cannot be undone."):
            return
        self.run_action("Delete All Deliveries", self.api.delete_all, topics=MUTATION_TOPICS)
