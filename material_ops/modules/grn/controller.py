from PySide6.QtCore import QRegularExpression, QSortFilterProxyModel, Qt, QTimer
from PySide6.QtWidgets import QDialog, QFileDialog, QWidget

from ...constants import GRN_FETCH_LIMIT, POLL_INTERVALS, TOPIC_DELIVERY, TOPIC_UPCOMING_DELIVERY
from ...utils import ui_helpers as uih
from ...utils.loggers import get_logger
from ...utils.tasks import run_task
from ..base_module import BaseModule
from ..delivery_utilities.grn import apply_filters, grn_analytics, grn_projection, site_options
from ..notifications import RefreshWatcher
from .billing_form import GrnBillingDialog
from .billing_service import GrnBillingService
from .export import default_file_name, export_pdf, export_xlsx
from .model import GrnTableModel
from .view import GrnView

_log = get_logger(__name__)

FILTER_DEBOUNCE_MS = 250


class GrnController(BaseModule):
    """
    GRN register: every fully transferred delivery, client-side filters,
    analytics for the filtered set, billing edit and PDF / Excel export.
    """

    def __init__(self, apis, session, bus):
        super().__init__()
        self.apis = apis
        self.api = apis.deliveries
        self.session = session
        self.bus = bus
        self.service = GrnBillingService(apis.deliveries, bus)
        self.view = GrnView()

        self._grns = []
        self._loading = False
        self._reload_again = False

        self.base_model = GrnTableModel([])
        self.proxy = QSortFilterProxyModel(self.view)
        self.proxy.setSourceModel(self.base_model)
        self.proxy.setFilterCaseSensitivity(Qt.CaseInsensitive)
        self.proxy.setFilterKeyColumn(-1)
        self.view.table.setModel(self.proxy)

        self._debounce = QTimer(self.view)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(FILTER_DEBOUNCE_MS)
        self._debounce.timeout.connect(self._populate)

        self._wire()
        self.watcher = RefreshWatcher(
            bus, (TOPIC_DELIVERY, TOPIC_UPCOMING_DELIVERY), self._reload,
            POLL_INTERVALS["grn"], parent=self.view,
        )
        self._reload()

    def get_widget(self) -> QWidget:
        return self.view

    def _wire(self):
        v = self.view
        v.btn_billing.clicked.connect(self._edit_billing)
        v.table.doubleClicked.connect(lambda *_: self._edit_billing())
        v.btn_export_pdf.clicked.connect(self._export_pdf)
        v.btn_export_xlsx.clicked.connect(self._export_xlsx)
        v.btn_refresh.clicked.connect(self._reload)
        v.btn_clear.clicked.connect(self._clear_filters)
        v.search.textChanged.connect(lambda *_: self._debounce.start())
        v.txt_invoice.textChanged.connect(lambda *_: self._debounce.start())
        v.cmb_site.currentIndexChanged.connect(lambda *_: self._populate())
        v.cmb_origin.currentIndexChanged.connect(lambda *_: self._populate())
        v.chk_dates.toggled.connect(lambda *_: self._populate())
        v.date_from.dateChanged.connect(lambda *_: self._populate())
        v.date_to.dateChanged.connect(lambda *_: self._populate())

    # ---------- loading ----------
    def _reload(self):
        if self._loading:
            self._reload_again = True
            return
        self._loading = True
        self.set_busy(True)
        run_task(
            self.view,
            lambda: self.api.list(page=1, limit=GRN_FETCH_LIMIT).items,
            self._on_loaded,
            self._on_load_failed,
        )

    def _on_loaded(self, deliveries):
        self._grns = grn_projection(deliveries)
        self.view.set_sites(site_options(self._grns))
        self.view.banner.show_message(None)
        self._populate()
        self._done_loading()

    def _on_load_failed(self, exc):
        _log.warning("Loading GRNs failed: %s", exc)
        self.view.banner.show_message(uih.error_text(exc))
        self._done_loading()

    def _done_loading(self):
        self._loading = False
        self.set_busy(False)
        if self._reload_again:
            self._reload_again = False
            self._reload()

    def _filtered(self):
        return apply_filters(self._grns, self.view.filters())

    def _populate(self):
        keep = self._selected()
        rows = self._filtered()
        self.base_model.set_rows(rows)
        self.view.analytics.set_data(grn_analytics(rows))
        row = self.base_model.row_of(keep.id) if keep else None
        if row is not None:
            self.view.table.selectRow(self.proxy.mapFromSource(self.base_model.index(row, 0)).row())

    def _clear_filters(self):
        self.view.clear_filters()
        self._populate()

    def _selected(self):
        row = self.view.table.selected_source_row()
        return self.base_model.at(row) if row is not None else None

    # ---------- billing ----------
    def _edit_billing(self):
        d = self._selected()
        if d is None:
            uih.info(self.view, "GRN Billing", "Select a GRN first.")
            return
        dlg = GrnBillingDialog(d, self.service, self.view)
        if dlg.exec() != QDialog.Accepted or dlg.result_record is None:
            return
        billing = dlg.result_record.billing
        uih.info(
            self.view, "GRN Billing",
            f"Billing saved for {d.reference}" + (f" (invoice {billing.invoice_number})." if billing else "."),
        )

    # ---------- export ----------
    def _export(self, title: str, ext: str, file_filter: str, writer):
        rows = self.base_model.rows()
        if not rows:
            uih.info(self.view, title, "There are no GRNs to export.")
            return
        path, _ = QFileDialog.getSaveFileName(self.view, title, default_file_name(ext), file_filter)
        if not path:
            return
        analytics = grn_analytics(rows)
        self.set_busy(True)

        def _ok(written):
            self.set_busy(False)
            uih.info(self.view, title, f"Exported {len(rows)} GRN(s) to:\n{written}")

        def _failed(exc):
            self.set_busy(False)
            _log.warning("%s failed: %s", title, exc)
            uih.error(self.view, title, uih.error_text(exc))

        run_task(self.view, lambda: writer(rows, path, analytics), _ok, _failed)

    def _export_pdf(self):
        self._export("Export PDF", "pdf", "PDF Files (*.pdf)", export_pdf)

    def _export_xlsx(self):
        self._export("Export Excel", "xlsx", "Excel Workbook (*.xlsx)", export_xlsx)
